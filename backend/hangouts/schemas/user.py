"""Pydantic schemas for Users."""
from datetime import datetime
from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    display_name: str = Field(min_length=1, max_length=100)


class UserOut(BaseModel):
    user_id: str
    username: str
    display_name: str
    created_at: datetime

    model_config = {"from_attributes": True}
