"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the College Events application:
users, events, favorites, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EVENT_CATEGORIES = (
    "hackathon", "coding-contest", "workshop", "seminar", "tech-talk",
    "cultural", "sports", "academic", "networking", "other",
)
EVENT_TYPES = ("online", "offline", "hybrid")
EVENT_STATUSES = ("draft", "pending", "approved", "rejected", "cancelled", "completed")


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.Enum("user", "admin", name="userrole"), nullable=False, server_default="user"),
        sa.Column("college", sa.String(200), nullable=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("short_description", sa.String(200), nullable=True),
        sa.Column("category", sa.Enum(*EVENT_CATEGORIES, name="eventcategory"), nullable=False),
        sa.Column("event_type", sa.Enum(*EVENT_TYPES, name="eventtype"), nullable=False, server_default="offline"),
        sa.Column("image", sa.String(500), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("registration_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("venue", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("college", sa.String(200), nullable=False),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("registration_link", sa.String(500), nullable=True),
        sa.Column("registration_fee", sa.Float, nullable=False, server_default="0"),
        sa.Column("max_participants", sa.Integer, nullable=True),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("requirements", sa.JSON, nullable=False),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        sa.Column("favorites_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.Enum(*EVENT_STATUSES, name="eventstatus"), nullable=False, server_default="pending"),
        sa.Column("featured", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_events_category", "events", ["category"])
    op.create_index("ix_events_start_date", "events", ["start_date"])
    op.create_index("ix_events_city", "events", ["city"])
    op.create_index("ix_events_status", "events", ["status"])
    op.create_index("ix_events_organizer_id", "events", ["organizer_id"])

    # --- favorites ---
    op.create_table(
        "favorites",
        sa.Column("favorite_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "event_id", name="uq_favorites_user_event"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("type", sa.Enum("info", "success", "warning", "error", name="notificationtype"),
                  nullable=False, server_default="info"),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("is_read", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("favorites")
    op.drop_table("events")
    op.drop_table("users")
    for enum_name in ("notificationtype", "eventstatus", "eventtype", "eventcategory", "userrole"):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
