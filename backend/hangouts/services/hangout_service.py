"""Hangout creation and membership.

A hangout with two or more options gets an ACTIVE poll; quick plans allow
one pick per user, multi-option plans allow several. A single option skips
voting and is confirmed on the spot, as is a quick plan with no options.
A multi-option plan with no options yet stays in planning.
"""
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from hangouts.config import settings
from hangouts.errors import Forbidden, NotFound, ValidationError
from hangouts.models.hangout import Hangout, HangoutStatus, PlanType, PrivacyLevel
from hangouts.models.notification import NotificationType
from hangouts.models.participant import Participant, ParticipantRole
from hangouts.models.poll import Poll, PollStatus
from hangouts.models.user import User
from hangouts.schemas.hangout import HangoutCreate
from hangouts.services import phase_controller, rsvp_ledger
from hangouts.services.times import to_utc

logger = logging.getLogger(__name__)


def _require_user(db: Session, user_id: str, field: str = "user_id") -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound(f"User {user_id} not found ({field})")
    return user


def clamp_threshold(value: Optional[int]) -> int:
    if value is None:
        return settings.CONSENSUS_THRESHOLD
    return max(settings.MIN_CONSENSUS_THRESHOLD, min(100, value))


def normalize_options(options: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Assign missing option ids and reject duplicates."""
    seen: set[str] = set()
    normalized = []
    for opt in options:
        option_id = opt.get("option_id") or str(uuid.uuid4())
        if option_id in seen:
            raise ValidationError("options", f"Duplicate option id '{option_id}'")
        seen.add(option_id)
        normalized.append({**opt, "option_id": option_id})
    return normalized


def _add_participant(
    db: Session,
    hangout: Hangout,
    user_id: str,
    role: ParticipantRole,
    is_mandatory: bool = False,
) -> Participant:
    participant = Participant(
        hangout_id=hangout.hangout_id,
        user_id=user_id,
        role=role,
        can_edit=role in (ParticipantRole.creator, ParticipantRole.co_host),
        is_mandatory=is_mandatory,
        is_co_host=role == ParticipantRole.co_host,
    )
    db.add(participant)
    return participant


def create_hangout(db: Session, creator_id: str, payload: HangoutCreate, notifier=None) -> Hangout:
    """Create a hangout, its participants, and a poll when there is a choice to make."""
    _require_user(db, creator_id, "creator_id")
    options = normalize_options([opt.model_dump(mode="json") for opt in payload.options])

    start = to_utc(options[0].get("date_time")) if options else None
    start = start or to_utc(payload.start_time) or datetime.now(timezone.utc)
    end = to_utc(payload.end_time) or start + timedelta(hours=settings.DEFAULT_DURATION_HOURS)
    if end <= start:
        raise ValidationError("end_time", "End time must be after start time")

    hangout = Hangout(
        title=payload.title,
        description=payload.description,
        location=payload.location or (options[0].get("location") if len(options) == 1 else None),
        start_time=start,
        end_time=end,
        creator_id=creator_id,
        privacy_level=PrivacyLevel(payload.privacy_level),
        status=HangoutStatus.published,
        plan_type=PlanType(payload.type),
        max_participants=payload.max_participants,
    )
    db.add(hangout)
    db.flush()

    mandatory = set(payload.mandatory_participants)
    co_hosts = set(payload.co_hosts)
    _add_participant(db, hangout, creator_id, ParticipantRole.creator, is_mandatory=True)
    invited = [
        uid for uid in dict.fromkeys(payload.participants + payload.co_hosts) if uid != creator_id
    ]
    if hangout.max_participants and len(invited) + 1 > hangout.max_participants:
        raise ValidationError("participants", f"Hangout allows at most {hangout.max_participants} participants")
    for uid in invited:
        _require_user(db, uid, "participants")
        role = ParticipantRole.co_host if uid in co_hosts else ParticipantRole.member
        _add_participant(db, hangout, uid, role, is_mandatory=uid in mandatory)

    # any real choice gets a poll, whatever the plan type
    confirmed_now = len(options) == 1 or (
        not options and hangout.plan_type == PlanType.quick_plan
    )
    if len(options) > 1:
        db.add(Poll(
            hangout_id=hangout.hangout_id,
            creator_id=creator_id,
            title=payload.title,
            options=options,
            status=PollStatus.active,
            consensus_threshold=clamp_threshold(payload.consensus_percentage),
            min_participants=payload.min_participants or settings.MIN_PARTICIPANTS,
            allow_multiple=hangout.plan_type == PlanType.multi_option,
            expires_at=to_utc(payload.poll_expires_at),
        ))
    db.commit()
    db.refresh(hangout)
    logger.info(
        "Created hangout '%s' (%s) by %s with %d option(s), %d invitee(s)",
        hangout.title, hangout.hangout_id, creator_id, len(options), len(invited),
    )

    if notifier is not None and invited:
        notifier.notify(
            NotificationType.content_invitation,
            invited,
            {"hangout_id": hangout.hangout_id, "hangout_title": hangout.title},
        )
    if confirmed_now:
        phase_controller.confirm_without_poll(
            db, hangout, options[0] if options else None, notifier=notifier
        )
        db.refresh(hangout)
    return hangout


def add_participants(
    db: Session,
    hangout_id: str,
    actor_id: str,
    user_ids: list[str],
    notifier=None,
) -> list[Participant]:
    """Invite users. Only the creator or a co-host may invite."""
    hangout = phase_controller.load_hangout(db, hangout_id)
    actor = (
        db.query(Participant)
        .filter(Participant.hangout_id == hangout_id, Participant.user_id == actor_id)
        .first()
    )
    if not actor or actor.role not in (ParticipantRole.creator, ParticipantRole.co_host):
        raise Forbidden("Only the creator or a co-host may invite participants")

    current = set(phase_controller.participant_ids(db, hangout_id))
    new_ids = [uid for uid in dict.fromkeys(user_ids) if uid not in current]
    if hangout.max_participants and len(current) + len(new_ids) > hangout.max_participants:
        raise ValidationError("user_ids", f"Hangout allows at most {hangout.max_participants} participants")

    added = []
    for uid in new_ids:
        _require_user(db, uid, "user_ids")
        added.append(_add_participant(db, hangout, uid, ParticipantRole.member))
    db.flush()

    # late invitees to a locked-in plan still need an RSVP row
    if phase_controller.derive_phase(db, hangout) in (
        phase_controller.Phase.consensus, phase_controller.Phase.rsvp,
    ):
        rsvp_ledger.bootstrap(db, hangout_id, new_ids)
    db.commit()
    logger.info("Added %d participant(s) to hangout %s", len(added), hangout_id)

    if notifier is not None and new_ids:
        notifier.notify(
            NotificationType.content_invitation,
            new_ids,
            {"hangout_id": hangout_id, "hangout_title": hangout.title},
        )
    return added
