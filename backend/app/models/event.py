"""Event ORM model and its enumerations."""
import uuid
import enum
from sqlalchemy import (
    Column, String, Text, DateTime, Integer, Float, Boolean, JSON, ForeignKey, Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


def _enum_values(enum_cls):
    # Persist the public value ("coding-contest"), not the member name.
    return [member.value for member in enum_cls]


class EventCategory(str, enum.Enum):
    hackathon = "hackathon"
    coding_contest = "coding-contest"
    workshop = "workshop"
    seminar = "seminar"
    tech_talk = "tech-talk"
    cultural = "cultural"
    sports = "sports"
    academic = "academic"
    networking = "networking"
    other = "other"


class EventType(str, enum.Enum):
    online = "online"
    offline = "offline"
    hybrid = "hybrid"


class EventStatus(str, enum.Enum):
    draft = "draft"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"
    completed = "completed"


class Event(Base):
    __tablename__ = "events"

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    short_description = Column(String(200), nullable=True)
    category = Column(SAEnum(EventCategory, values_callable=_enum_values), nullable=False, index=True)
    event_type = Column(SAEnum(EventType, values_callable=_enum_values), nullable=False, default=EventType.offline)
    image = Column(String(500), nullable=True)

    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)

    venue = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=True)
    college = Column(String(200), nullable=False)

    organizer_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)

    registration_link = Column(String(500), nullable=True)
    registration_fee = Column(Float, nullable=False, default=0)
    max_participants = Column(Integer, nullable=True)

    tags = Column(JSON, nullable=False, default=list)
    requirements = Column(JSON, nullable=False, default=list)

    views = Column(Integer, nullable=False, default=0)
    favorites_count = Column(Integer, nullable=False, default=0)
    status = Column(SAEnum(EventStatus, values_callable=_enum_values), nullable=False,
                    default=EventStatus.pending, index=True)
    featured = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organizer = relationship("User", lazy="joined")
    favorites = relationship("Favorite", back_populates="event", cascade="all, delete-orphan")
