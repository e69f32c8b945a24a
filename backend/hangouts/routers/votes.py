"""Voting routes — the entry point of the poll → consensus → RSVP flow."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hangouts.auth import get_current_user
from hangouts.database import get_db
from hangouts.errors import NotFound, ValidationError
from hangouts.models.participant import Participant
from hangouts.models.user import User
from hangouts.routers.hangouts import hangout_out
from hangouts.schemas.hangout import HangoutOut, PollTransitionPayload
from hangouts.schemas.vote import VotePayload, VoteResult, VoteSummaryOut
from hangouts.services import consensus, phase_controller, vote_ledger
from hangouts.services.notifications import get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/{hangout_id}/vote", response_model=VoteResult)
def cast_vote(
    hangout_id: str,
    payload: VotePayload,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Cast, toggle, remove or prefer a vote; finalizes the poll on consensus."""
    try:
        action = phase_controller.VoteAction(payload.action)
    except ValueError:
        raise ValidationError("action", f"Invalid action: {payload.action}")

    outcome = phase_controller.process_vote(
        db,
        hangout_id=hangout_id,
        user_id=current_user.user_id,
        option_id=payload.option_id,
        action=action,
        notifier=notifier,
    )
    logger.info(
        "Vote %s by %s on hangout %s (finalized=%s)",
        action.value, current_user.user_id, hangout_id, outcome.finalized,
    )
    return outcome.as_dict()


@router.get("/{hangout_id}/votes", response_model=VoteSummaryOut)
def get_votes(
    hangout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Votes grouped by option and by user, plus a consensus preview."""
    phase_controller.load_hangout(db, hangout_id)
    poll = phase_controller.get_poll(db, hangout_id)
    if poll is None:
        raise NotFound("This hangout does not have a poll")

    votes = vote_ledger.poll_votes(db, poll.poll_id)
    active = db.query(Participant).filter(Participant.hangout_id == hangout_id).count()
    decision = consensus.evaluate(
        poll.options,
        vote_ledger.canonical_ballots(votes),
        active_participants=active,
        threshold=poll.consensus_threshold,
        min_participants=poll.min_participants,
    )
    return {
        "poll_id": poll.poll_id,
        "status": poll.status.value,
        **vote_ledger.summarize_votes(votes),
        "consensus": decision.as_dict(),
    }


@router.post("/{hangout_id}/poll/transition", response_model=HangoutOut)
def transition_poll(
    hangout_id: str,
    payload: PollTransitionPayload,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Poll creator only: finalize on the leading option, or close without a winner."""
    try:
        action = phase_controller.PollTransition(payload.action)
    except ValueError:
        raise ValidationError("action", f"Invalid transition: {payload.action}")

    hangout = phase_controller.transition_poll(
        db, hangout_id, current_user.user_id, action, notifier=notifier
    )
    return hangout_out(db, hangout)
