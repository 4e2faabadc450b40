"""Notification inbox routes: every operation is scoped to the caller."""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import DataResponse, ListResponse, MessageResponse
from app.schemas.notification import NotificationOut, UnreadCountOut
from app.security import Identity, get_current_identity
from app.services import notification_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=ListResponse[NotificationOut])
def list_notifications(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    notifications = notification_service.list_notifications(db, identity.user_id)
    return {"count": len(notifications), "data": notifications}


@router.get("/unread-count", response_model=UnreadCountOut)
def get_unread_count(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return {"count": notification_service.unread_count(db, identity.user_id)}


@router.put("/mark-all-read", response_model=MessageResponse)
def mark_all_read(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, identity.user_id)
    return {"message": f"{updated} notifications marked as read"}


@router.put("/{notification_id}/read", response_model=DataResponse[NotificationOut])
def mark_read(
    notification_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return {"data": notification_service.mark_read(db, notification_id, identity.user_id)}


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(
    notification_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    notification_service.delete_notification(db, notification_id, identity.user_id)
    return {"message": "Notification deleted"}
