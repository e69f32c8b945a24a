"""RSVP ORM model — attendance response to a confirmed hangout."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from hangouts.database import Base


class RSVPStatus(str, enum.Enum):
    pending = "PENDING"
    yes = "YES"
    no = "NO"
    maybe = "MAYBE"


class RSVP(Base):
    __tablename__ = "rsvps"
    __table_args__ = (UniqueConstraint("hangout_id", "user_id", name="uq_rsvp_hangout_user"),)

    rsvp_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    hangout_id = Column(String(36), ForeignKey("hangouts.hangout_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    status = Column(SAEnum(RSVPStatus), nullable=False, default=RSVPStatus.pending)
    responded_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
