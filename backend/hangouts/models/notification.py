"""Notification model — in-app inbox written by the notification dispatcher."""
import uuid
import enum
from sqlalchemy import Column, String, Boolean, DateTime, Text, JSON, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from hangouts.database import Base


class NotificationType(str, enum.Enum):
    content_invitation = "CONTENT_INVITATION"
    content_rsvp = "CONTENT_RSVP"
    poll_vote_cast = "POLL_VOTE_CAST"
    poll_consensus_reached = "POLL_CONSENSUS_REACHED"
    hangout_confirmed = "HANGOUT_CONFIRMED"


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SAEnum(NotificationType), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    related_id = Column(String(36), nullable=True)
    data = Column(JSON, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
