"""Favorite relation between users and events.

The (user, event) pair is unique. Toggling flips membership and keeps the
event's favorites_count in step inside the same transaction.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import NotFoundError
from app.models.event import Event
from app.models.favorite import Favorite
from app.security import Identity
from app.services import event_service

logger = logging.getLogger(__name__)


def _find(db: Session, user_id: str, event_id: str):
    return (
        db.query(Favorite)
        .filter(Favorite.user_id == user_id, Favorite.event_id == event_id)
        .first()
    )


def is_favorited(db: Session, user_id: str, event_id: str) -> bool:
    return _find(db, user_id, event_id) is not None


def toggle_favorite(db: Session, actor: Identity, event_id: str) -> bool:
    """Flip membership of (actor, event); returns the new state."""
    existing = _find(db, actor.user_id, event_id)
    if existing:
        db.delete(existing)
        event_service.adjust_favorites_count(db, event_id, -1)
        db.commit()
        logger.info("User %s removed event %s from favorites", actor.user_id, event_id)
        return False

    event = event_service.find_event(db, event_id)
    if not event or not event_service.is_visible_to(event, actor):
        raise NotFoundError("Event not found")

    db.add(Favorite(user_id=actor.user_id, event_id=event_id))
    event_service.adjust_favorites_count(db, event_id, 1)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent toggle inserted the same pair first
        db.rollback()
        logger.info("Favorite (%s, %s) already present", actor.user_id, event_id)
        return True
    logger.info("User %s added event %s to favorites", actor.user_id, event_id)
    return True


def list_favorites(db: Session, user_id: str) -> list[Event]:
    return (
        db.query(Event)
        .join(Favorite, Favorite.event_id == Event.event_id)
        .filter(Favorite.user_id == user_id)
        .all()
    )
