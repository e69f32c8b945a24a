"""Vote ledger — per-user, per-option vote rows for a poll.

Mutations flush but never commit; the caller owns the transaction.
Every read goes to the database, nothing about vote state is cached.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session

from hangouts.errors import VotingClosed
from hangouts.models.participant import Participant, ParticipantRole
from hangouts.models.poll import Poll, PollStatus
from hangouts.models.vote import Vote
from hangouts.services.times import to_utc

logger = logging.getLogger(__name__)


def is_expired(poll: Poll, now: Optional[datetime] = None) -> bool:
    if poll.expires_at is None:
        return False
    return to_utc(poll.expires_at) <= (now or datetime.now(timezone.utc))


def require_active(poll: Poll) -> None:
    """Raise VotingClosed unless the poll is ACTIVE and inside its voting window."""
    if poll.status != PollStatus.active:
        raise VotingClosed(poll.status.value if poll.status else None)
    if is_expired(poll):
        raise VotingClosed("EXPIRED")


def confirm_still_active(db: Session, poll: Poll) -> bool:
    """Re-check ACTIVE from inside the caller's transaction.

    The no-op conditional update takes the poll row's write lock, so a
    finalize committed after ``poll`` was loaded shows up here as 0 rows and
    a later one has to wait for this transaction to end.
    """
    touched = (
        db.query(Poll)
        .filter(Poll.poll_id == poll.poll_id, Poll.status == PollStatus.active)
        .update({Poll.status: PollStatus.active}, synchronize_session=False)
    )
    return touched == 1


def _find_votes(db: Session, poll_id: str, user_id: str, option_id: str):
    return db.query(Vote).filter(
        Vote.poll_id == poll_id,
        Vote.user_id == user_id,
        Vote.option_id == option_id,
    )


def _drop_other_votes(db: Session, poll: Poll, user_id: str, option_id: str) -> int:
    return db.query(Vote).filter(
        Vote.poll_id == poll.poll_id,
        Vote.user_id == user_id,
        Vote.option_id != option_id,
    ).delete(synchronize_session="evaluate")


def ensure_participant(db: Session, hangout_id: str, user_id: str) -> Participant:
    """Auto-join: make sure the voter is a countable participant."""
    participant = (
        db.query(Participant)
        .filter(Participant.hangout_id == hangout_id, Participant.user_id == user_id)
        .first()
    )
    if participant:
        return participant

    participant = Participant(
        hangout_id=hangout_id,
        user_id=user_id,
        role=ParticipantRole.member,
        can_edit=False,
        is_mandatory=False,
        is_co_host=False,
    )
    db.add(participant)
    db.flush()
    logger.info("User %s auto-joined hangout %s", user_id, hangout_id)
    return participant


def cast_or_toggle_vote(db: Session, poll: Poll, user_id: str, option_id: str) -> bool:
    """Add the vote if absent, remove it if present.

    On a single-choice poll a new vote replaces the user's other votes.
    Returns True when the user holds a vote for the option afterwards.
    """
    require_active(poll)
    existing = _find_votes(db, poll.poll_id, user_id, option_id).first()
    if existing:
        db.delete(existing)
        db.flush()
        logger.info("User %s toggled off option %s on poll %s", user_id, option_id, poll.poll_id)
        return False

    if not poll.allow_multiple:
        _drop_other_votes(db, poll, user_id, option_id)
    db.add(Vote(poll_id=poll.poll_id, user_id=user_id, option_id=option_id, is_preferred=False))
    db.flush()
    logger.info("User %s voted for option %s on poll %s", user_id, option_id, poll.poll_id)
    return True


def remove_vote(db: Session, poll: Poll, user_id: str, option_id: str) -> int:
    """Delete every matching vote row, regardless of toggle state."""
    require_active(poll)
    removed = _find_votes(db, poll.poll_id, user_id, option_id).delete(synchronize_session="evaluate")
    db.flush()
    logger.info("Removed %d vote(s) by %s for option %s", removed, user_id, option_id)
    return removed


def set_preferred(db: Session, poll: Poll, user_id: str, option_id: str) -> Vote:
    """Mark ``option_id`` as the user's top choice (or flip it back off).

    Creates the vote when missing, then clears the preferred flag on all of
    the user's other votes in the poll.
    """
    require_active(poll)
    vote = _find_votes(db, poll.poll_id, user_id, option_id).first()
    if vote is None:
        if not poll.allow_multiple:
            _drop_other_votes(db, poll, user_id, option_id)
        vote = Vote(poll_id=poll.poll_id, user_id=user_id, option_id=option_id, is_preferred=True)
        db.add(vote)
    else:
        vote.is_preferred = not vote.is_preferred

    db.query(Vote).filter(
        Vote.poll_id == poll.poll_id,
        Vote.user_id == user_id,
        Vote.option_id != option_id,
    ).update({Vote.is_preferred: False}, synchronize_session="evaluate")
    db.flush()
    logger.info(
        "User %s set preferred=%s on option %s (poll %s)",
        user_id, vote.is_preferred, option_id, poll.poll_id,
    )
    return vote


def poll_votes(db: Session, poll_id: str) -> list[Vote]:
    """All vote rows of a poll in recorded order."""
    return db.query(Vote).filter(Vote.poll_id == poll_id).order_by(Vote.vote_id).all()


def summarize_votes(votes: Iterable[Vote]) -> dict[str, Any]:
    """Group votes for display: by option, by user, and preferred per user."""
    votes_by_option: dict[str, list[str]] = {}
    votes_by_user: dict[str, list[str]] = {}
    preferred_by_user: dict[str, str] = {}
    for vote in votes:
        votes_by_option.setdefault(vote.option_id, []).append(vote.user_id)
        votes_by_user.setdefault(vote.user_id, []).append(vote.option_id)
        if vote.is_preferred:
            preferred_by_user[vote.user_id] = vote.option_id
    return {
        "votes_by_option": votes_by_option,
        "votes_by_user": votes_by_user,
        "preferred_by_user": preferred_by_user,
    }


def canonical_ballots(votes: Iterable[Vote]) -> dict[str, str]:
    """Project multi-select votes onto one option per user.

    A user's preferred vote counts if they marked one, otherwise their
    earliest recorded vote. ``votes`` must be in recorded order.
    """
    first: dict[str, str] = {}
    preferred: dict[str, str] = {}
    for vote in votes:
        first.setdefault(vote.user_id, vote.option_id)
        if vote.is_preferred:
            preferred[vote.user_id] = vote.option_id
    return {user_id: preferred.get(user_id, option_id) for user_id, option_id in first.items()}
