"""Hangout ORM model — a Content item of type hangout."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hangouts.database import Base


class HangoutStatus(str, enum.Enum):
    draft = "DRAFT"
    published = "PUBLISHED"
    active = "ACTIVE"
    completed = "COMPLETED"
    cancelled = "CANCELLED"


class PrivacyLevel(str, enum.Enum):
    private = "PRIVATE"
    friends_only = "FRIENDS_ONLY"
    public = "PUBLIC"


class PlanType(str, enum.Enum):
    quick_plan = "quick_plan"
    multi_option = "multi_option"


class Hangout(Base):
    __tablename__ = "hangouts"

    hangout_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(200), nullable=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    creator_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    privacy_level = Column(SAEnum(PrivacyLevel), nullable=False, default=PrivacyLevel.public)
    status = Column(SAEnum(HangoutStatus), nullable=False, default=HangoutStatus.published)
    plan_type = Column(SAEnum(PlanType), nullable=False, default=PlanType.multi_option)
    max_participants = Column(Integer, nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    participants = relationship(
        "Participant", back_populates="hangout", order_by="Participant.joined_at"
    )
    polls = relationship("Poll", back_populates="hangout", order_by="Poll.created_at")
