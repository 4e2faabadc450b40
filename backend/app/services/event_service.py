"""Event store accessor: listing, lookups, counters and owner-side CRUD.

Responsibilities:
- Listing: conjunctive filters, whitelisted sort keys, offset pagination
- Visibility: anything not approved is "not found" unless the caller is the
  organizer or an admin; anonymous and regular callers only ever list approved
- Counters: views and favorites_count change through single UPDATE statements
- Ownership: only the organizer or an admin may update/delete an event
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.models.event import Event, EventCategory, EventStatus, EventType
from app.security import Identity

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "date": Event.start_date,
    "createdAt": Event.created_at,
    "created_at": Event.created_at,
    "views": Event.views,
    "favoritesCount": Event.favorites_count,
    "favorites_count": Event.favorites_count,
}
DEFAULT_SORT = "date"

REQUIRED_FIELDS = {
    "title": "Title is required",
    "description": "Description is required",
    "category": "Category is required",
    "start_date": "Start date is required",
    "city": "City is required",
    "college": "College/Organization name is required",
}

# Owned by moderation, counters or the server; never taken from an edit payload.
PROTECTED_FIELDS = frozenset({
    "event_id", "organizer_id", "status", "views", "favorites_count",
    "featured", "created_at", "updated_at",
})


@dataclass
class EventFilter:
    status: Optional[str] = None
    category: Optional[str] = None
    event_type: Optional[str] = None
    city: Optional[str] = None
    college: Optional[str] = None
    search: Optional[str] = None
    upcoming: bool = False


@dataclass
class EventPage:
    events: list[Event]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.total else 0


def coerce_positive_int(value: Any, default: int) -> int:
    """Parse a page/limit value, falling back to ``default`` when unusable."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _coerce_enum(enum_cls, value: Optional[str], label: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}")


def _contains_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def _paginate(query, page: Any, page_size: Any) -> tuple[list[Event], int, int, int]:
    page = coerce_positive_int(page, 1)
    page_size = coerce_positive_int(page_size, settings.DEFAULT_PAGE_SIZE)
    total = query.count()
    events = query.offset((page - 1) * page_size).limit(page_size).all()
    return events, total, page, page_size


def is_visible_to(event: Event, requester: Optional[Identity]) -> bool:
    if event.status == EventStatus.approved:
        return True
    if requester is None:
        return False
    return requester.is_admin or requester.user_id == event.organizer_id


def find_event(db: Session, event_id: str) -> Optional[Event]:
    return db.query(Event).filter(Event.event_id == event_id).first()


def list_events(
    db: Session,
    filters: Optional[EventFilter] = None,
    sort_by: str = DEFAULT_SORT,
    sort_order: str = "asc",
    page: Any = 1,
    page_size: Any = None,
    requester: Optional[Identity] = None,
) -> EventPage:
    """Filtered, sorted, paginated view of events.

    Non-admin callers are pinned to approved events whatever status they asked for.
    Unknown sort keys fall back to the start date; any order other than "desc" is ascending.
    """
    filters = filters or EventFilter()
    query = db.query(Event)

    if requester is not None and requester.is_admin:
        status = _coerce_enum(EventStatus, filters.status, "status")
    else:
        if filters.status and filters.status != EventStatus.approved.value:
            logger.debug("Ignoring status filter %r for non-admin caller", filters.status)
        status = EventStatus.approved
    if status is not None:
        query = query.filter(Event.status == status)

    category = _coerce_enum(EventCategory, filters.category, "category")
    if category is not None:
        query = query.filter(Event.category == category)

    event_type = _coerce_enum(EventType, filters.event_type, "event type")
    if event_type is not None:
        query = query.filter(Event.event_type == event_type)

    if filters.city:
        query = query.filter(Event.city == filters.city)
    if filters.college:
        query = query.filter(Event.college.ilike(_contains_pattern(filters.college), escape="\\"))
    if filters.search:
        pattern = _contains_pattern(filters.search)
        query = query.filter(or_(
            Event.title.ilike(pattern, escape="\\"),
            Event.description.ilike(pattern, escape="\\"),
        ))
    if filters.upcoming:
        query = query.filter(Event.start_date >= datetime.now(timezone.utc))

    column = SORT_FIELDS.get(sort_by, SORT_FIELDS[DEFAULT_SORT])
    ordering = column.desc() if str(sort_order).lower() == "desc" else column.asc()
    # event_id keeps page boundaries stable when sort values tie
    query = query.order_by(ordering, Event.event_id)

    events, total, page, page_size = _paginate(query, page, page_size)
    return EventPage(events=events, total=total, page=page, page_size=page_size)


def list_my_events(
    db: Session,
    actor: Identity,
    status: Optional[str] = None,
    page: Any = 1,
    page_size: Any = None,
) -> EventPage:
    """The organizer's own events in any status, newest first."""
    query = db.query(Event).filter(Event.organizer_id == actor.user_id)
    status_value = _coerce_enum(EventStatus, status, "status")
    if status_value is not None:
        query = query.filter(Event.status == status_value)
    query = query.order_by(Event.created_at.desc(), Event.event_id)

    events, total, page, page_size = _paginate(query, page, page_size)
    return EventPage(events=events, total=total, page=page, page_size=page_size)


def get_event_by_id(db: Session, event_id: str, requester: Optional[Identity] = None) -> Event:
    """Fetch one event and count the view.

    Hidden events raise NotFoundError exactly like missing ones.
    """
    event = find_event(db, event_id)
    if not event or not is_visible_to(event, requester):
        raise NotFoundError("Event not found")

    increment_views(db, event.event_id)
    db.refresh(event)
    return event


def increment_views(db: Session, event_id: str) -> None:
    """Atomically add one view; degrade to read-then-write if the UPDATE fails."""
    stmt = (
        update(Event)
        .where(Event.event_id == event_id)
        # counter bumps are not edits
        .values(views=Event.views + 1, updated_at=Event.updated_at)
        .execution_options(synchronize_session=False)
    )
    try:
        db.execute(stmt)
        db.commit()
    except OperationalError:
        db.rollback()
        logger.warning("Atomic view increment failed for event %s, using read-then-write", event_id)
        event = find_event(db, event_id)
        if event:
            event.views = (event.views or 0) + 1
            db.commit()


def adjust_favorites_count(db: Session, event_id: str, delta: int) -> None:
    """Shift favorites_count by ``delta`` in the caller's transaction, never below zero."""
    stmt = update(Event).where(Event.event_id == event_id)
    if delta < 0:
        stmt = stmt.where(Event.favorites_count + delta >= 0)
    stmt = stmt.values(
        favorites_count=Event.favorites_count + delta,
        updated_at=Event.updated_at,
    ).execution_options(synchronize_session=False)
    db.execute(stmt)


def _validate_fields(values: dict[str, Any], fields) -> None:
    for field in fields:
        value = values.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(REQUIRED_FIELDS[field])


def _validate_fee(values: dict[str, Any]) -> None:
    fee = values.get("registration_fee")
    if fee is not None and fee < 0:
        raise ValidationError("Registration fee cannot be negative")


def _drop_unset_nulls(values: dict[str, Any]) -> dict[str, Any]:
    # null on a NOT NULL column means "leave as is"; required fields are rejected earlier
    columns = Event.__table__.columns
    return {
        field: value for field, value in values.items()
        if value is not None or field not in columns or columns[field].nullable
    }


def _naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; compare everything as naive UTC
    value = _as_utc(value)
    return value.replace(tzinfo=None)


def _validate_schedule(start: Optional[datetime], end: Optional[datetime]) -> None:
    if start and end and _naive_utc(end) < _naive_utc(start):
        raise ValidationError("End date cannot be before start date")


def _clean(values: dict[str, Any]) -> dict[str, Any]:
    cleaned = {}
    for field, value in values.items():
        if isinstance(value, str):
            value = value.strip()
        elif isinstance(value, datetime):
            value = _as_utc(value)
        cleaned[field] = value
    return cleaned


def _check_owner_or_admin(event: Event, actor: Identity, action: str) -> None:
    if not actor.is_admin and event.organizer_id != actor.user_id:
        raise AuthorizationError(f"Not authorized to {action} this event")


def create_event(db: Session, payload: dict[str, Any], actor: Identity) -> Event:
    """Create an event owned by ``actor``; admins skip the review queue."""
    values = _clean({
        k: v for k, v in payload.items() if k not in PROTECTED_FIELDS and hasattr(Event, k)
    })
    _validate_fields(values, REQUIRED_FIELDS)
    _validate_schedule(values.get("start_date"), values.get("end_date"))
    _validate_fee(values)

    event = Event(
        **values,
        organizer_id=actor.user_id,
        status=EventStatus.approved if actor.is_admin else EventStatus.pending,
        views=0,
        favorites_count=0,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Created event '%s' (%s) by %s with status %s",
                event.title, event.event_id, actor.user_id, event.status.value)
    return event


def update_event(db: Session, event_id: str, changes: dict[str, Any], actor: Identity) -> Event:
    """Partial update by the organizer or an admin."""
    event = find_event(db, event_id)
    if not event:
        raise NotFoundError("Event not found")
    _check_owner_or_admin(event, actor, "update")

    values = _clean({k: v for k, v in changes.items() if k not in PROTECTED_FIELDS})
    _validate_fields(values, [f for f in REQUIRED_FIELDS if f in values])
    values = _drop_unset_nulls(values)
    _validate_fee(values)
    _validate_schedule(values.get("start_date", event.start_date), values.get("end_date", event.end_date))

    for field, value in values.items():
        if hasattr(event, field):
            setattr(event, field, value)

    db.commit()
    db.refresh(event)
    logger.info("Updated event %s (%s) by %s", event_id, ", ".join(sorted(values)) or "no fields", actor.user_id)
    return event


def delete_event(db: Session, event_id: str, actor: Identity) -> None:
    """Irreversibly remove an event together with its favorites."""
    event = find_event(db, event_id)
    if not event:
        raise NotFoundError("Event not found")
    _check_owner_or_admin(event, actor, "delete")

    db.delete(event)
    db.commit()
    logger.info("Deleted event %s by %s", event_id, actor.user_id)


def get_categories(db: Session) -> list[dict[str, Any]]:
    """Approved-event counts per category, most populated first."""
    count = func.count(Event.event_id)
    rows = (
        db.query(Event.category, count)
        .filter(Event.status == EventStatus.approved)
        .group_by(Event.category)
        .order_by(count.desc())
        .all()
    )
    return [{"category": category, "count": total} for category, total in rows]
