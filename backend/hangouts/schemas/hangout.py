"""Pydantic schemas for Hangouts, their options and polls."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field


class OptionIn(BaseModel):
    option_id: Optional[str] = Field(default=None, max_length=64)
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    location: Optional[str] = None
    date_time: Optional[datetime] = None
    price: Optional[float] = None


class HangoutCreate(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    privacy_level: Literal["PRIVATE", "FRIENDS_ONLY", "PUBLIC"] = "PUBLIC"
    max_participants: Optional[int] = Field(default=None, ge=2, le=100)
    participants: list[str] = []          # user ids to invite
    mandatory_participants: list[str] = []
    co_hosts: list[str] = []
    consensus_percentage: Optional[int] = None  # clamped to 50..100
    min_participants: Optional[int] = Field(default=None, ge=1)
    type: Literal["quick_plan", "multi_option"] = "multi_option"
    options: list[OptionIn] = []
    poll_expires_at: Optional[datetime] = None  # voting window, polls only


class ParticipantsAdd(BaseModel):
    user_ids: list[str] = Field(min_length=1)


class ParticipantOut(BaseModel):
    user_id: str
    role: str
    can_edit: bool
    is_mandatory: bool
    is_co_host: bool
    rsvp_status: Optional[str] = None
    joined_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PollOut(BaseModel):
    poll_id: str
    status: str
    options: list[dict[str, Any]]
    consensus_threshold: int
    min_participants: int
    allow_multiple: bool
    expires_at: Optional[datetime] = None
    finalized_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class HangoutOut(BaseModel):
    hangout_id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: datetime
    end_time: datetime
    creator_id: str
    privacy_level: str
    status: str
    plan_type: str
    max_participants: Optional[int] = None
    confirmed_at: Optional[datetime] = None
    participants: list[ParticipantOut] = []
    poll: Optional[PollOut] = None
    phase: Optional[str] = None

    model_config = {"from_attributes": True}


class PollTransitionPayload(BaseModel):
    action: str  # finalize, close
