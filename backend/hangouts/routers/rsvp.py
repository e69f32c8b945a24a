"""RSVP routes — attendance once the plan is locked in."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hangouts.auth import get_current_user
from hangouts.database import get_db
from hangouts.errors import ValidationError
from hangouts.models.notification import NotificationType
from hangouts.models.rsvp import RSVPStatus
from hangouts.models.user import User
from hangouts.schemas.rsvp import RSVPListOut, RSVPOut, RSVPPayload
from hangouts.services import phase_controller, rsvp_ledger
from hangouts.services.notifications import get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{hangout_id}/rsvp", response_model=RSVPListOut)
def list_rsvps(
    hangout_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    phase_controller.load_hangout(db, hangout_id)
    rsvps = rsvp_ledger.list_rsvps(db, hangout_id)
    return {
        "rsvps": rsvps,
        "attendance": rsvp_ledger.summarize_attendance(rsvps),
        "mandatory": rsvp_ledger.check_mandatory(db, hangout_id),
    }


@router.post("/{hangout_id}/rsvp", response_model=RSVPOut)
def respond(
    hangout_id: str,
    payload: RSVPPayload,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier=Depends(get_notifier),
):
    """Set or update the current user's RSVP."""
    try:
        rsvp_status = RSVPStatus(payload.status)
    except ValueError:
        raise ValidationError("status", f"Invalid RSVP status: {payload.status}")

    rsvp = rsvp_ledger.respond(db, hangout_id, current_user.user_id, rsvp_status)
    hangout = phase_controller.load_hangout(db, hangout_id)
    if hangout.creator_id != current_user.user_id:
        notifier.notify(
            NotificationType.content_rsvp,
            [hangout.creator_id],
            {
                "hangout_id": hangout_id,
                "hangout_title": hangout.title,
                "responder_name": current_user.display_name,
                "status": rsvp_status.value,
            },
        )
    return rsvp
