"""Moderation state machine for submitted events.

Admins move events out of review. The status write is committed before the
organizer is notified, and a failing notification never undoes it: the
failure is logged and the updated event is still returned.

    draft/pending -> approved | rejected | cancelled
    approved      -> rejected | cancelled
    rejected, cancelled, completed are terminal
"""
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.event import Event, EventStatus
from app.models.notification import NotificationType
from app.security import Identity
from app.services.notification_service import DatabaseNotifier

logger = logging.getLogger(__name__)

MODERATION_TARGETS = (EventStatus.approved, EventStatus.rejected, EventStatus.cancelled)

ALLOWED_TRANSITIONS = {
    EventStatus.draft: {EventStatus.approved, EventStatus.rejected, EventStatus.cancelled},
    EventStatus.pending: {EventStatus.approved, EventStatus.rejected, EventStatus.cancelled},
    EventStatus.approved: {EventStatus.rejected, EventStatus.cancelled},
    EventStatus.rejected: set(),
    EventStatus.cancelled: set(),
    EventStatus.completed: set(),
}

_NOTIFICATION_TYPES = {
    EventStatus.approved: NotificationType.success,
    EventStatus.rejected: NotificationType.error,
    EventStatus.cancelled: NotificationType.warning,
}


def build_status_notification(event: Event, new_status: EventStatus, reason: Optional[str] = None) -> dict[str, Any]:
    """Notification fields for the organizer after ``event`` moved to ``new_status``."""
    reason = (reason or "").strip()
    suffix = f" Reason: {reason}" if reason else ""
    if new_status == EventStatus.approved:
        message = f'Great news! Your event "{event.title}" has been approved and is now live!'
    elif new_status == EventStatus.rejected:
        message = f'Your event "{event.title}" has been rejected.{suffix}'
    else:
        message = f'Your event "{event.title}" has been cancelled.{suffix}'

    return {
        "user_id": event.organizer_id,
        "type": _NOTIFICATION_TYPES[new_status],
        "title": f"Event {new_status.value.capitalize()}",
        "message": message,
        "link": f"/events/{event.event_id}",
    }


def _parse_target(new_status: Any) -> EventStatus:
    try:
        target = EventStatus(new_status)
    except ValueError:
        raise ValidationError("Invalid status")
    if target not in MODERATION_TARGETS:
        raise ValidationError("Invalid status")
    return target


def set_event_status(
    db: Session,
    event_id: str,
    new_status: Any,
    actor: Optional[Identity],
    reason: Optional[str] = None,
    notifier=None,
) -> Event:
    """Apply an admin status transition and notify the organizer (best effort)."""
    if actor is None or not actor.is_admin:
        raise AuthorizationError("Only admins can change event status")

    target = _parse_target(new_status)

    event = db.query(Event).filter(Event.event_id == event_id).first()
    if not event:
        raise NotFoundError("Event not found")

    previous = event.status
    if target not in ALLOWED_TRANSITIONS[previous]:
        raise ValidationError(f"Cannot change status from {previous.value} to {target.value}")

    event.status = target
    db.commit()
    db.refresh(event)
    logger.info("Event %s moved %s -> %s by admin %s", event_id, previous.value, target.value, actor.user_id)

    notifier = notifier or DatabaseNotifier(db)
    try:
        notifier.create(**build_status_notification(event, target, reason))
    except Exception:
        db.rollback()
        logger.exception(
            "Event %s is %s but notifying organizer %s failed", event_id, target.value, event.organizer_id
        )
        db.refresh(event)
    return event
