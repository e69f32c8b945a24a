"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the Hangouts service:
users, hangouts, participants, polls, votes, rsvps, notifications.
Enum columns store member names, matching SQLAlchemy's Enum default.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(50), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- hangouts ---
    op.create_table(
        "hangouts",
        sa.Column("hangout_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("creator_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("privacy_level", sa.String(20), nullable=False, server_default="public"),
        sa.Column("status", sa.String(20), nullable=False, server_default="published"),
        sa.Column("plan_type", sa.String(20), nullable=False, server_default="multi_option"),
        sa.Column("max_participants", sa.Integer, nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- participants ---
    op.create_table(
        "participants",
        sa.Column("participant_id", sa.String(36), primary_key=True),
        sa.Column("hangout_id", sa.String(36), sa.ForeignKey("hangouts.hangout_id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("can_edit", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("is_mandatory", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("is_co_host", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("rsvp_status", sa.String(20), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("hangout_id", "user_id", name="uq_participant_hangout_user"),
    )

    # --- polls ---
    op.create_table(
        "polls",
        sa.Column("poll_id", sa.String(36), primary_key=True),
        sa.Column("hangout_id", sa.String(36), sa.ForeignKey("hangouts.hangout_id"), nullable=False, index=True),
        sa.Column("creator_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("options", sa.JSON, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("consensus_threshold", sa.Integer, nullable=False, server_default="70"),
        sa.Column("min_participants", sa.Integer, nullable=False, server_default="2"),
        sa.Column("allow_multiple", sa.Boolean, nullable=False, server_default="1"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("finalized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- votes ---
    op.create_table(
        "votes",
        sa.Column("vote_id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("poll_id", sa.String(36), sa.ForeignKey("polls.poll_id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("option_id", sa.String(64), nullable=False),
        sa.Column("is_preferred", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("poll_id", "user_id", "option_id", name="uq_vote_poll_user_option"),
    )

    # --- rsvps ---
    op.create_table(
        "rsvps",
        sa.Column("rsvp_id", sa.String(36), primary_key=True),
        sa.Column("hangout_id", sa.String(36), sa.ForeignKey("hangouts.hangout_id"), nullable=False, index=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("hangout_id", "user_id", name="uq_rsvp_hangout_user"),
    )

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("type", sa.String(40), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("related_id", sa.String(36), nullable=True),
        sa.Column("data", sa.JSON, nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("rsvps")
    op.drop_table("votes")
    op.drop_table("polls")
    op.drop_table("participants")
    op.drop_table("hangouts")
    op.drop_table("users")
