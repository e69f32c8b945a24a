"""Notification dispatcher — in-app notifications, fire-and-forget.

The dispatcher writes rows through its own session so that a delivery
problem can never roll back (or be rolled back by) the caller's transaction.
Every failure is logged and swallowed.
"""
import logging
from typing import Any, Callable, Iterable, Optional

from fastapi import BackgroundTasks, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hangouts.database import SessionLocal
from hangouts.errors import NotificationDispatchFailure
from hangouts.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

_TITLES = {
    NotificationType.content_invitation: "Hangout Invitation",
    NotificationType.content_rsvp: "New RSVP",
    NotificationType.poll_vote_cast: "New Vote",
    NotificationType.poll_consensus_reached: "Poll Consensus Reached",
    NotificationType.hangout_confirmed: "Hangout Confirmed",
}


def format_message(event_type: NotificationType, payload: dict[str, Any]) -> str:
    title = payload.get("hangout_title", "your hangout")
    if event_type == NotificationType.poll_consensus_reached:
        winner = payload.get("winner_title", "")
        return f'Your poll "{title}" has reached consensus! The winner is: {winner}'
    if event_type == NotificationType.poll_vote_cast:
        return f'{payload.get("voter_name", "Someone")} voted on your poll "{title}"'
    if event_type == NotificationType.content_invitation:
        return f'You were invited to "{title}"'
    if event_type == NotificationType.content_rsvp:
        return f'{payload.get("responder_name", "Someone")} responded {payload.get("status")} to "{title}"'
    if event_type == NotificationType.hangout_confirmed:
        return f'"{title}" is confirmed. Let everyone know if you can make it!'
    return title


class NotificationDispatcher:
    """Writes one Notification row per recipient."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def notify(
        self,
        event_type: NotificationType,
        recipient_ids: Iterable[str],
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        payload = payload or {}
        recipients = list(dict.fromkeys(recipient_ids))
        if not recipients:
            return
        try:
            self._deliver(event_type, recipients, payload)
        except Exception:
            logger.exception(
                "Notification %s to %d recipient(s) failed", event_type.value, len(recipients)
            )

    def _deliver(self, event_type: NotificationType, recipients: list[str], payload: dict[str, Any]) -> None:
        db = self._session_factory()
        try:
            message = format_message(event_type, payload)
            for user_id in recipients:
                db.add(Notification(
                    user_id=user_id,
                    type=event_type,
                    title=_TITLES.get(event_type, "Notification"),
                    message=message,
                    related_id=payload.get("hangout_id"),
                    data=payload,
                ))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise NotificationDispatchFailure(str(exc)) from exc
        finally:
            db.close()
        logger.info("Sent %s to %d recipient(s)", event_type.value, len(recipients))


class BackgroundNotifier:
    """Defers dispatch until after the response has been sent."""

    def __init__(self, background_tasks: BackgroundTasks, dispatcher: NotificationDispatcher):
        self._background_tasks = background_tasks
        self._dispatcher = dispatcher

    def notify(
        self,
        event_type: NotificationType,
        recipient_ids: Iterable[str],
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        self._background_tasks.add_task(
            self._dispatcher.notify, event_type, list(recipient_ids), payload
        )


_dispatcher = NotificationDispatcher()


def get_dispatcher() -> NotificationDispatcher:
    return _dispatcher


def get_notifier(
    background_tasks: BackgroundTasks,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> BackgroundNotifier:
    """FastAPI dependency used by routers that trigger notifications."""
    return BackgroundNotifier(background_tasks, dispatcher)
