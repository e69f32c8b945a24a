"""Error taxonomy for the hangout consensus flow.

Each error is an ``HTTPException`` so services can raise it directly and
FastAPI renders the matching status code.
"""
from typing import Optional

from fastapi import HTTPException, status


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Not allowed"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class VotingClosed(HTTPException):
    """Mutation attempted against a poll that is not ACTIVE."""

    def __init__(self, poll_status: Optional[str] = None):
        detail = "Voting is closed for this poll"
        if poll_status:
            detail = f"{detail} (status: {poll_status})"
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(HTTPException):
    """Malformed input; ``field`` names the offending attribute."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"field": field, "message": message},
        )


class PersistenceFailure(HTTPException):
    """Finalize transaction failed. The triggering vote is already committed."""

    def __init__(self, message: str, vote_recorded: bool = True):
        self.vote_recorded = vote_recorded
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"message": message, "vote_recorded": vote_recorded},
        )


class NotificationDispatchFailure(Exception):
    """Raised inside the notification dispatcher; logged, never surfaced."""
