"""Pydantic schemas for Notifications."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.notification import NotificationType


class NotificationOut(BaseModel):
    notification_id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    link: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UnreadCountOut(BaseModel):
    success: bool = True
    count: int
