"""Participant ORM model — membership of a user in a hangout."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hangouts.database import Base
from hangouts.models.rsvp import RSVPStatus


class ParticipantRole(str, enum.Enum):
    creator = "CREATOR"
    co_host = "CO_HOST"
    member = "MEMBER"


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (UniqueConstraint("hangout_id", "user_id", name="uq_participant_hangout_user"),)

    participant_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    hangout_id = Column(String(36), ForeignKey("hangouts.hangout_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    role = Column(SAEnum(ParticipantRole), nullable=False, default=ParticipantRole.member)
    can_edit = Column(Boolean, nullable=False, default=False)
    is_mandatory = Column(Boolean, nullable=False, default=False)
    is_co_host = Column(Boolean, nullable=False, default=False)
    rsvp_status = Column(SAEnum(RSVPStatus), nullable=True)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    hangout = relationship("Hangout", back_populates="participants")
