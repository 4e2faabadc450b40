"""Pydantic schemas for Events.

Create/update payloads also accept the older nested shape used by the first
frontend (``date.start``, ``location.city``, ``college.name`` ...). It is
flattened here so the service layer only ever sees the canonical fields.
"""
from __future__ import annotations
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, model_validator

from app.models.event import EventCategory, EventStatus, EventType

_NESTED_FIELDS = {
    "date": {"start": "start_date", "end": "end_date"},
    "location": {"venue": "venue", "city": "city", "state": "state"},
    "college": {"name": "college"},
    "registration": {"link": "registration_link", "fee": "registration_fee",
                     "maxParticipants": "max_participants"},
}

_CAMEL_FIELDS = {
    "eventType": "event_type",
    "registrationDeadline": "registration_deadline",
    "shortDescription": "short_description",
    "endDate": "end_date",
}


def flatten_legacy_payload(data: Any) -> Any:
    """Translate the nested/camelCase event payload into canonical flat keys."""
    if not isinstance(data, dict):
        return data

    flat = dict(data)
    for key, mapping in _NESTED_FIELDS.items():
        value = flat.get(key)
        if key == "date" and value is not None and not isinstance(value, dict):
            # Newer clients send the start date directly as "date"
            flat.pop(key)
            flat.setdefault("start_date", value)
            continue
        if not isinstance(value, dict):
            continue
        flat.pop(key)
        for nested_key, field in mapping.items():
            if nested_key in value and field not in flat:
                flat[field] = value[nested_key]

    contact = flat.pop("contact", None)
    if isinstance(contact, dict) and contact.get("website") and "registration_link" not in flat:
        flat["registration_link"] = contact["website"]

    for camel, field in _CAMEL_FIELDS.items():
        if camel in flat:
            value = flat.pop(camel)
            flat.setdefault(field, value)
    return flat


class _EventPayload(BaseModel):
    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        return flatten_legacy_payload(data)


class EventCreate(_EventPayload):
    # Required-ness of title/description/category/city/college is checked by
    # event_service so direct service callers get the same ValidationError.
    title: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    category: Optional[EventCategory] = None
    event_type: EventType = EventType.offline
    image: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    registration_deadline: Optional[datetime] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    college: Optional[str] = None
    registration_link: Optional[str] = None
    registration_fee: float = 0
    max_participants: Optional[int] = None
    tags: list[str] = []
    requirements: list[str] = []


class EventUpdate(_EventPayload):
    title: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    category: Optional[EventCategory] = None
    event_type: Optional[EventType] = None
    image: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    registration_deadline: Optional[datetime] = None
    venue: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    college: Optional[str] = None
    registration_link: Optional[str] = None
    registration_fee: Optional[float] = None
    max_participants: Optional[int] = None
    tags: Optional[list[str]] = None
    requirements: Optional[list[str]] = None


class StatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None


class OrganizerOut(BaseModel):
    user_id: str
    name: str
    email: str
    college: Optional[str] = None

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    event_id: str
    title: str
    description: str
    short_description: Optional[str] = None
    category: EventCategory
    event_type: EventType
    image: Optional[str] = None
    start_date: datetime
    end_date: Optional[datetime] = None
    registration_deadline: Optional[datetime] = None
    venue: Optional[str] = None
    city: str
    state: Optional[str] = None
    college: str
    organizer_id: str
    organizer: Optional[OrganizerOut] = None
    registration_link: Optional[str] = None
    registration_fee: float
    max_participants: Optional[int] = None
    tags: list[str] = []
    requirements: list[str] = []
    views: int
    favorites_count: int
    status: EventStatus
    featured: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventDetailOut(EventOut):
    is_favorited: bool = False


class CategoryCount(BaseModel):
    category: EventCategory
    count: int


class FavoriteToggleOut(BaseModel):
    success: bool = True
    message: str
    is_favorited: bool
