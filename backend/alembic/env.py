"""Alembic environment for the college events schema.

Online migrations reuse the application's engine so the URL and SQLite
connect arguments come from app.config in one place. Offline mode renders
SQL against the same URL.
"""
from logging.config import fileConfig

from alembic import context

from app.config import settings
from app.database import Base, engine

# Registers users, events, favorites and notifications on Base.metadata
from app.models import event, favorite, notification, user  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _configure_options() -> dict:
    # SQLite cannot ALTER most constraints in place
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": settings.DATABASE_URL.startswith("sqlite"),
    }


def run_offline() -> None:
    context.configure(
        url=settings.DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    with engine.connect() as connection:
        context.configure(connection=connection, **_configure_options())
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
