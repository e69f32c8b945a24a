"""Pydantic schemas for RSVPs."""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel


class RSVPPayload(BaseModel):
    status: str  # PENDING, YES, NO, MAYBE


class RSVPOut(BaseModel):
    rsvp_id: str
    hangout_id: str
    user_id: str
    status: str
    responded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RSVPListOut(BaseModel):
    rsvps: list[RSVPOut]
    attendance: dict[str, Any]
    mandatory: dict[str, Any]
