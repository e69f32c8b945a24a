"""Pydantic schemas for in-app notifications."""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel


class NotificationOut(BaseModel):
    notification_id: str
    type: str
    title: str
    message: str
    related_id: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
