"""Hangout API routes — creation, detail, invitations."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from hangouts.auth import get_current_user
from hangouts.database import get_db
from hangouts.models.hangout import Hangout
from hangouts.models.participant import Participant
from hangouts.models.user import User
from hangouts.schemas.hangout import HangoutCreate, HangoutOut, ParticipantOut, ParticipantsAdd, PollOut
from hangouts.services import hangout_service, phase_controller
from hangouts.services.notifications import get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


def hangout_out(db: Session, hangout: Hangout) -> HangoutOut:
    """Serialize a hangout together with its poll and current phase."""
    poll = phase_controller.get_poll(db, hangout.hangout_id)
    out = HangoutOut.model_validate(hangout)
    out.poll = PollOut.model_validate(poll) if poll else None
    out.phase = phase_controller.derive_phase(db, hangout, poll).value
    return out


@router.post("/", response_model=HangoutOut, status_code=status.HTTP_201_CREATED)
def create_hangout(
    payload: HangoutCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Create a hangout. Two or more options open a poll; one option confirms it."""
    hangout = hangout_service.create_hangout(db, current_user.user_id, payload, notifier=notifier)
    return hangout_out(db, hangout)


@router.get("/", response_model=list[HangoutOut])
def list_my_hangouts(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Hangouts the current user participates in, newest first."""
    hangouts = (
        db.query(Hangout)
        .join(Participant, Participant.hangout_id == Hangout.hangout_id)
        .filter(Participant.user_id == current_user.user_id)
        .order_by(Hangout.created_at.desc())
        .all()
    )
    return [hangout_out(db, h) for h in hangouts]


@router.get("/{hangout_id}", response_model=HangoutOut)
def get_hangout(
    hangout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    hangout = phase_controller.load_hangout(db, hangout_id)
    return hangout_out(db, hangout)


@router.post(
    "/{hangout_id}/participants",
    response_model=list[ParticipantOut],
    status_code=status.HTTP_201_CREATED,
)
def add_participants(
    hangout_id: str,
    payload: ParticipantsAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Invite users (creator or co-host only)."""
    return hangout_service.add_participants(
        db, hangout_id, current_user.user_id, payload.user_ids, notifier=notifier
    )
