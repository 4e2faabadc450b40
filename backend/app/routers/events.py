"""Event API routes: delegates to the event, favorite and moderation services."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import DataResponse, ListResponse, MessageResponse, PageResponse
from app.schemas.event import (
    CategoryCount, EventCreate, EventDetailOut, EventOut, EventUpdate, FavoriteToggleOut, StatusUpdate,
)
from app.security import Identity, get_current_identity, get_optional_identity
from app.services import event_service, favorite_service, moderation_service
from app.services.event_service import EventFilter, EventPage
from app.services.notification_service import get_notifier

logger = logging.getLogger(__name__)
router = APIRouter()


def _page_response(result: EventPage) -> dict:
    return {
        "success": True,
        "count": len(result.events),
        "total": result.total,
        "total_pages": result.pages,
        "current_page": result.page,
        "data": result.events,
    }


@router.get("/", response_model=PageResponse[EventOut])
def list_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    event_type: Optional[str] = Query(None),
    event_type_camel: Optional[str] = Query(None, alias="eventType"),
    city: Optional[str] = Query(None),
    college: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    upcoming: bool = Query(False),
    sort: str = Query("date"),
    order: str = Query("asc"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    """List events. Anyone but an admin only sees approved events."""
    filters = EventFilter(
        status=status_filter,
        category=category,
        event_type=event_type or event_type_camel,
        city=city,
        college=college,
        search=search,
        upcoming=upcoming,
    )
    result = event_service.list_events(
        db, filters, sort_by=sort, sort_order=order, page=page, page_size=limit, requester=identity,
    )
    return _page_response(result)


@router.get("/categories", response_model=DataResponse[list[CategoryCount]])
def get_categories(db: Session = Depends(get_db)):
    """Approved-event counts per category."""
    return {"data": event_service.get_categories(db)}


@router.get("/favorites", response_model=ListResponse[EventOut])
def get_favorites(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    favorites = favorite_service.list_favorites(db, identity.user_id)
    return {"count": len(favorites), "data": favorites}


@router.get("/my-events", response_model=PageResponse[EventOut])
def get_my_events(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """The caller's own submissions in every status."""
    result = event_service.list_my_events(db, identity, status=status_filter, page=page, page_size=limit)
    return _page_response(result)


@router.get("/{event_id}", response_model=DataResponse[EventDetailOut])
def get_event(
    event_id: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
):
    """Fetch a single event; counts a view."""
    event = event_service.get_event_by_id(db, event_id, requester=identity)
    detail = EventDetailOut.model_validate(event)
    if identity is not None:
        detail.is_favorited = favorite_service.is_favorited(db, identity.user_id, event_id)
    return {"data": detail}


@router.post("/", response_model=DataResponse[EventOut], status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Submit an event. Admin submissions are approved immediately."""
    event = event_service.create_event(db, payload.model_dump(), identity)
    return {"data": event}


@router.put("/{event_id}", response_model=DataResponse[EventOut])
def update_event(
    event_id: str,
    payload: EventUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Partial update (organizer or admin)."""
    event = event_service.update_event(db, event_id, payload.model_dump(exclude_unset=True), identity)
    return {"data": event}


@router.delete("/{event_id}", response_model=MessageResponse)
def delete_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    event_service.delete_event(db, event_id, identity)
    return {"message": "Event deleted"}


@router.post("/{event_id}/favorite", response_model=FavoriteToggleOut)
def toggle_favorite(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    favorited = favorite_service.toggle_favorite(db, identity, event_id)
    message = "Event added to favorites" if favorited else "Event removed from favorites"
    return {"message": message, "is_favorited": favorited}


@router.put("/{event_id}/status", response_model=DataResponse[EventOut])
def update_event_status(
    event_id: str,
    payload: StatusUpdate,
    identity: Identity = Depends(get_current_identity),
    notifier=Depends(get_notifier),
    db: Session = Depends(get_db),
):
    """Approve, reject or cancel an event (admin only); notifies the organizer."""
    event = moderation_service.set_event_status(
        db, event_id, payload.status, identity, reason=payload.reason, notifier=notifier,
    )
    return {"data": event, "message": f"Event {event.status.value} successfully"}
