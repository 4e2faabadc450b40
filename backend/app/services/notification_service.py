"""Notification sink and the recipient-side inbox operations."""
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import NotFoundError
from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class DatabaseNotifier:
    """Notification sink backed by the notifications table."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.info,
        link: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            link=link,
            is_read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.info("Notification %s (%s) created for user %s", notification.notification_id, type.value, user_id)
        return notification


def get_notifier(db: Session = Depends(get_db)) -> DatabaseNotifier:
    return DatabaseNotifier(db)


def list_notifications(db: Session, user_id: str) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.notification_id)
        .all()
    )


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def _get_owned(db: Session, notification_id: str, user_id: str) -> Notification:
    # Someone else's notification is indistinguishable from a missing one
    notification = (
        db.query(Notification)
        .filter(Notification.notification_id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


def mark_read(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = _get_owned(db, notification_id, user_id)
    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    logger.info("Marked %d notifications read for user %s", updated, user_id)
    return updated


def delete_notification(db: Session, notification_id: str, user_id: str) -> None:
    notification = _get_owned(db, notification_id, user_id)
    db.delete(notification)
    db.commit()
    logger.info("Deleted notification %s for user %s", notification_id, user_id)
