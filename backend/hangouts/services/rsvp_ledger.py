"""RSVP ledger — attendance responses once a plan is locked in."""
import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy.orm import Session

from hangouts.errors import NotFound
from hangouts.models.hangout import Hangout
from hangouts.models.participant import Participant
from hangouts.models.rsvp import RSVP, RSVPStatus
from hangouts.services.vote_ledger import ensure_participant

logger = logging.getLogger(__name__)


def bootstrap(db: Session, hangout_id: str, user_ids: Iterable[str]) -> list[RSVP]:
    """Create PENDING rows for users that have none yet.

    Existing rows are left untouched, so calling this any number of times
    with the same users yields the same set of rows. Flushes without
    committing; the caller owns the transaction.
    """
    wanted = list(dict.fromkeys(user_ids))
    existing = {
        uid for (uid,) in db.query(RSVP.user_id).filter(RSVP.hangout_id == hangout_id).all()
    }
    created = [
        RSVP(hangout_id=hangout_id, user_id=uid, status=RSVPStatus.pending, responded_at=None)
        for uid in wanted
        if uid not in existing
    ]
    if created:
        db.add_all(created)
        db.flush()
    logger.info(
        "Bootstrapped %d RSVP(s) for hangout %s (%d already present)",
        len(created), hangout_id, len(wanted) - len(created),
    )
    return created


def list_rsvps(db: Session, hangout_id: str) -> list[RSVP]:
    return db.query(RSVP).filter(RSVP.hangout_id == hangout_id).order_by(RSVP.created_at).all()


def respond(db: Session, hangout_id: str, user_id: str, rsvp_status: RSVPStatus) -> RSVP:
    """Record a user's attendance answer and commit."""
    hangout = db.query(Hangout).filter(Hangout.hangout_id == hangout_id).first()
    if not hangout:
        raise NotFound("Hangout not found")

    participant = ensure_participant(db, hangout_id, user_id)

    rsvp = (
        db.query(RSVP)
        .filter(RSVP.hangout_id == hangout_id, RSVP.user_id == user_id)
        .first()
    )
    if rsvp is None:
        rsvp = RSVP(hangout_id=hangout_id, user_id=user_id)
        db.add(rsvp)

    rsvp.status = rsvp_status
    rsvp.responded_at = None if rsvp_status == RSVPStatus.pending else datetime.now(timezone.utc)
    participant.rsvp_status = rsvp_status
    db.commit()
    db.refresh(rsvp)
    logger.info("User %s RSVP'd %s to hangout %s", user_id, rsvp_status.value, hangout_id)
    return rsvp


def summarize_attendance(rsvps: Iterable[RSVP]) -> dict[str, Any]:
    going, maybe, not_going, waiting = [], [], [], []
    for rsvp in rsvps:
        if rsvp.status == RSVPStatus.yes:
            going.append(rsvp.user_id)
        elif rsvp.status == RSVPStatus.maybe:
            maybe.append(rsvp.user_id)
        elif rsvp.status == RSVPStatus.no:
            not_going.append(rsvp.user_id)
        else:
            waiting.append(rsvp.user_id)
    return {
        "going": going,
        "maybe": maybe,
        "not_going": not_going,
        "waiting": waiting,
        "responded": len(going) + len(maybe) + len(not_going),
    }


def check_mandatory(db: Session, hangout_id: str) -> dict[str, Any]:
    """Mandatory participants who have not said YES yet."""
    mandatory = (
        db.query(Participant)
        .filter(Participant.hangout_id == hangout_id, Participant.is_mandatory.is_(True))
        .all()
    )
    answered_yes = {
        uid
        for (uid,) in db.query(RSVP.user_id).filter(
            RSVP.hangout_id == hangout_id, RSVP.status == RSVPStatus.yes
        )
    }
    waiting_for = [p.user_id for p in mandatory if p.user_id not in answered_yes]
    return {"can_proceed": not waiting_for, "waiting_for": waiting_for}
