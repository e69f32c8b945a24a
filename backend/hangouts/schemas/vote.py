"""Pydantic schemas for votes and the consensus display."""
from typing import Any, Optional
from pydantic import BaseModel


class VotePayload(BaseModel):
    option_id: str
    action: str = "add"  # add, remove, preferred, toggle


class VoteResult(BaseModel):
    vote_cast: bool
    finalized: bool
    winner: Optional[dict[str, Any]] = None
    phase: Optional[str] = None


class VoteSummaryOut(BaseModel):
    poll_id: str
    status: str
    votes_by_option: dict[str, list[str]]
    votes_by_user: dict[str, list[str]]
    preferred_by_user: dict[str, str]
    consensus: dict[str, Any]
