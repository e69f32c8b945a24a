"""Phase controller — drives a hangout from voting to a locked-in plan.

Phases: planning → voting → consensus → rsvp. A hangout with a single
option never has a poll and goes straight to consensus. The poll creator
can also end voting early: finalize on the leading option, or close the
poll without a winner (back to planning).

The vote pipeline runs in one request, step by step:

1. load hangout + poll, require the poll to be ACTIVE, validate the option
2. auto-join the voter, apply the ledger mutation, re-check that the poll
   is still ACTIVE inside the same transaction, commit
3. re-read votes and participants, evaluate consensus
4. if ready: conditionally flip the poll to CONSENSUS_REACHED, collapse its
   options to the winner and bootstrap RSVPs, all in one transaction
5. request notification fan-out (never fails the request)

Step 2 commits on its own, so a failed finalize in step 4 never loses the
vote. Retrying the same vote (toggle twice) re-runs the evaluation.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hangouts.config import settings
from hangouts.errors import Forbidden, NotFound, PersistenceFailure, ValidationError, VotingClosed
from hangouts.models.hangout import Hangout
from hangouts.models.notification import NotificationType
from hangouts.models.participant import Participant, ParticipantRole
from hangouts.models.poll import Poll, PollStatus
from hangouts.models.rsvp import RSVP
from hangouts.models.user import User
from hangouts.services import consensus, rsvp_ledger, vote_ledger
from hangouts.services.times import to_utc

logger = logging.getLogger(__name__)


class Phase(str, enum.Enum):
    planning = "planning"
    voting = "voting"
    consensus = "consensus"
    rsvp = "rsvp"


class VoteAction(str, enum.Enum):
    add = "add"
    remove = "remove"
    preferred = "preferred"
    toggle = "toggle"


@dataclass
class VoteOutcome:
    vote_cast: bool
    finalized: bool
    winner: Optional[dict[str, Any]] = None
    phase: Optional[Phase] = None

    def as_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"vote_cast": self.vote_cast, "finalized": self.finalized}
        if self.winner is not None:
            result["winner"] = self.winner
        if self.phase is not None:
            result["phase"] = self.phase.value
        return result


def load_hangout(db: Session, hangout_id: str) -> Hangout:
    hangout = db.query(Hangout).filter(Hangout.hangout_id == hangout_id).first()
    if not hangout:
        raise NotFound("Hangout not found")
    return hangout


def get_poll(db: Session, hangout_id: str) -> Optional[Poll]:
    """The hangout's poll. Only the first one created is ever consulted."""
    return (
        db.query(Poll)
        .filter(Poll.hangout_id == hangout_id)
        .order_by(Poll.created_at, Poll.poll_id)
        .first()
    )


def participant_ids(db: Session, hangout_id: str) -> list[str]:
    return [
        uid
        for (uid,) in db.query(Participant.user_id)
        .filter(Participant.hangout_id == hangout_id)
        .order_by(Participant.joined_at)
    ]


def derive_phase(db: Session, hangout: Hangout, poll: Optional[Poll] = None) -> Phase:
    poll = poll or get_poll(db, hangout.hangout_id)
    if poll is not None:
        if poll.status == PollStatus.active:
            return Phase.voting
        if poll.status in (PollStatus.draft, PollStatus.closed):
            return Phase.planning

    has_rsvps = db.query(RSVP.rsvp_id).filter(RSVP.hangout_id == hangout.hangout_id).first()
    if has_rsvps:
        return Phase.rsvp
    if poll is not None or hangout.confirmed_at is not None:
        return Phase.consensus
    return Phase.planning


def _apply_winner(hangout: Hangout, winner: dict[str, Any]) -> None:
    """Copy the winning option's place and time onto the hangout."""
    if winner.get("location"):
        hangout.location = winner["location"]
    start = to_utc(winner.get("date_time"))
    if start is not None:
        hangout.start_time = start
        hangout.end_time = start + timedelta(hours=settings.DEFAULT_DURATION_HOURS)
    hangout.confirmed_at = datetime.now(timezone.utc)


def finalize_poll(db: Session, hangout: Hangout, poll: Poll, winner: dict[str, Any]) -> bool:
    """Lock in ``winner``. Returns False if another request already did.

    The status flip is a conditional update on ``status = ACTIVE`` so only
    one concurrent finalizer can win; the loser skips the RSVP bootstrap.
    """
    try:
        updated = (
            db.query(Poll)
            .filter(Poll.poll_id == poll.poll_id, Poll.status == PollStatus.active)
            .update(
                {
                    Poll.status: PollStatus.consensus_reached,
                    Poll.options: [winner],
                    Poll.finalized_at: datetime.now(timezone.utc),
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            db.rollback()
            logger.info("Poll %s was already finalized, skipping", poll.poll_id)
            return False

        _apply_winner(hangout, winner)
        rsvp_ledger.bootstrap(db, hangout.hangout_id, participant_ids(db, hangout.hangout_id))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Finalize transaction failed for poll %s", poll.poll_id)
        raise PersistenceFailure(
            "Your vote was recorded but the poll could not be finalized. Retry to re-check consensus."
        ) from exc

    db.refresh(poll)
    logger.info(
        "Poll %s reached consensus on option %s (%s)",
        poll.poll_id, winner.get("option_id"), winner.get("title"),
    )
    return True


def check_and_finalize(db: Session, hangout: Hangout, poll: Poll, notifier=None) -> VoteOutcome:
    """Re-evaluate consensus from a fresh read and finalize if ready."""
    db.refresh(poll)
    if poll.status != PollStatus.active:
        # another request got here first
        winner = poll.options[0] if poll.status == PollStatus.consensus_reached and poll.options else None
        return VoteOutcome(True, winner is not None, winner, derive_phase(db, hangout, poll))

    votes = vote_ledger.poll_votes(db, poll.poll_id)
    members = participant_ids(db, hangout.hangout_id)
    decision = consensus.evaluate(
        poll.options,
        vote_ledger.canonical_ballots(votes),
        active_participants=len(members),
        threshold=poll.consensus_threshold,
        min_participants=poll.min_participants,
    )
    if not decision.ready:
        return VoteOutcome(vote_cast=True, finalized=False)

    if finalize_poll(db, hangout, poll, decision.winner):
        if notifier is not None:
            _notify_consensus(db, hangout, poll, decision.winner, notifier)
        return VoteOutcome(True, True, decision.winner, derive_phase(db, hangout, poll))

    db.refresh(poll)
    return VoteOutcome(True, True, poll.options[0], derive_phase(db, hangout, poll))


def _notify_consensus(db: Session, hangout: Hangout, poll: Poll, winner: dict[str, Any], notifier) -> None:
    notifier.notify(
        NotificationType.poll_consensus_reached,
        participant_ids(db, hangout.hangout_id),
        {
            "hangout_id": hangout.hangout_id,
            "hangout_title": hangout.title,
            "poll_id": poll.poll_id,
            "winner": winner,
            "winner_title": winner.get("title"),
        },
    )


def _notify_vote_cast(db: Session, hangout: Hangout, poll: Poll, voter_id: str, option_id: str, notifier) -> None:
    creator = (
        db.query(Participant)
        .filter(Participant.hangout_id == hangout.hangout_id, Participant.role == ParticipantRole.creator)
        .first()
    )
    if not creator or creator.user_id == voter_id:
        return
    voter = db.query(User).filter(User.user_id == voter_id).first()
    notifier.notify(
        NotificationType.poll_vote_cast,
        [creator.user_id],
        {
            "hangout_id": hangout.hangout_id,
            "hangout_title": hangout.title,
            "poll_id": poll.poll_id,
            "option_id": option_id,
            "voter_name": voter.display_name if voter else "Someone",
        },
    )


def process_vote(
    db: Session,
    hangout_id: str,
    user_id: str,
    option_id: str,
    action: VoteAction = VoteAction.add,
    notifier=None,
) -> VoteOutcome:
    """Cast/toggle/remove/prefer a vote, then check for consensus."""
    hangout = load_hangout(db, hangout_id)
    poll = get_poll(db, hangout_id)
    if poll is None:
        raise NotFound("This hangout does not have a poll")
    vote_ledger.require_active(poll)

    if not option_id or option_id not in poll.option_ids():
        raise ValidationError("option_id", f"Unknown option '{option_id}' for this poll")

    if action != VoteAction.remove:
        vote_ledger.ensure_participant(db, hangout_id, user_id)

    voted = False
    if action in (VoteAction.add, VoteAction.toggle):
        voted = vote_ledger.cast_or_toggle_vote(db, poll, user_id, option_id)
    elif action == VoteAction.remove:
        vote_ledger.remove_vote(db, poll, user_id, option_id)
    elif action == VoteAction.preferred:
        voted = vote_ledger.set_preferred(db, poll, user_id, option_id).is_preferred

    if not vote_ledger.confirm_still_active(db, poll):
        db.rollback()
        db.refresh(poll)
        logger.info("Poll %s closed while vote by %s was in flight", poll.poll_id, user_id)
        raise VotingClosed(poll.status.value)
    db.commit()

    if notifier is not None and voted:
        _notify_vote_cast(db, hangout, poll, user_id, option_id, notifier)

    return check_and_finalize(db, hangout, poll, notifier)


def confirm_without_poll(
    db: Session,
    hangout: Hangout,
    option: Optional[dict[str, Any]] = None,
    notifier=None,
) -> list[RSVP]:
    """Single-option path: consensus is the sole option, RSVPs open immediately."""
    if option:
        _apply_winner(hangout, option)
    else:
        hangout.confirmed_at = datetime.now(timezone.utc)
    members = participant_ids(db, hangout.hangout_id)
    created = rsvp_ledger.bootstrap(db, hangout.hangout_id, members)
    db.commit()
    logger.info("Hangout %s confirmed without a poll", hangout.hangout_id)

    if notifier is not None:
        notifier.notify(
            NotificationType.hangout_confirmed,
            [uid for uid in members if uid != hangout.creator_id],
            {"hangout_id": hangout.hangout_id, "hangout_title": hangout.title},
        )
    return created


class PollTransition(str, enum.Enum):
    finalize = "finalize"
    close = "close"


def transition_poll(
    db: Session,
    hangout_id: str,
    actor_id: str,
    action: PollTransition,
    notifier=None,
) -> Hangout:
    """Creator ends voting early.

    ``finalize`` locks in the leading option even below the threshold (and
    works after ``expires_at``); ``close`` ends the poll without a winner.
    """
    hangout = load_hangout(db, hangout_id)
    poll = get_poll(db, hangout_id)
    if poll is None:
        raise NotFound("This hangout does not have a poll")
    if poll.creator_id != actor_id:
        raise Forbidden("Only the poll creator can end voting")
    if poll.status != PollStatus.active:
        raise VotingClosed(poll.status.value)

    if action == PollTransition.close:
        closed = (
            db.query(Poll)
            .filter(Poll.poll_id == poll.poll_id, Poll.status == PollStatus.active)
            .update({Poll.status: PollStatus.closed}, synchronize_session=False)
        )
        if closed == 0:
            db.rollback()
            db.refresh(poll)
            raise VotingClosed(poll.status.value)
        db.commit()
        logger.info("Poll %s closed without a winner by %s", poll.poll_id, actor_id)
        return hangout

    ballots = vote_ledger.canonical_ballots(vote_ledger.poll_votes(db, poll.poll_id))
    winner = consensus.leading_option(poll.options, ballots)
    if winner is None:
        raise ValidationError("action", "Cannot finalize a poll nobody has voted on")
    if not finalize_poll(db, hangout, poll, winner):
        db.refresh(poll)
        raise VotingClosed(poll.status.value)
    if notifier is not None:
        _notify_consensus(db, hangout, poll, winner, notifier)
    logger.info("Poll %s finalized early by %s", poll.poll_id, actor_id)
    return hangout
