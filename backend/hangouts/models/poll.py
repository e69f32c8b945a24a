"""Poll ORM model — the vote attached to a multi-option hangout.

``options`` holds the ordered, serialized Option dicts. Once the poll
reaches consensus it is overwritten with a one-element list holding the
winner. A poll the creator closes without a winner becomes CLOSED.
Past ``expires_at`` no more votes are accepted, but the creator can still
finalize or close it.
"""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, Integer, Boolean, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hangouts.database import Base


class PollStatus(str, enum.Enum):
    draft = "DRAFT"
    active = "ACTIVE"
    consensus_reached = "CONSENSUS_REACHED"
    closed = "CLOSED"


class Poll(Base):
    __tablename__ = "polls"

    poll_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    hangout_id = Column(String(36), ForeignKey("hangouts.hangout_id"), nullable=False, index=True)
    creator_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    title = Column(String(100), nullable=False)
    options = Column(JSON, nullable=False, default=list)
    status = Column(SAEnum(PollStatus), nullable=False, default=PollStatus.active)
    consensus_threshold = Column(Integer, nullable=False, default=70)
    min_participants = Column(Integer, nullable=False, default=2)
    allow_multiple = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    finalized_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    hangout = relationship("Hangout", back_populates="polls")

    def option_ids(self) -> list[str]:
        return [opt["option_id"] for opt in self.options or []]
