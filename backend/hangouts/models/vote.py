"""Vote ORM model. ``vote_id`` order is the order votes were recorded in."""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from hangouts.database import Base


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("poll_id", "user_id", "option_id", name="uq_vote_poll_user_option"),
    )

    vote_id = Column(Integer, primary_key=True, autoincrement=True)
    poll_id = Column(String(36), ForeignKey("polls.poll_id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), nullable=False)
    option_id = Column(String(64), nullable=False)
    is_preferred = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
