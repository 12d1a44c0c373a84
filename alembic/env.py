"""Alembic environment: DATABASE_URL and logging come from planner settings; metadata from the ORM models."""

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

from planner.core.config import settings
from planner.core.logging import configure_logging

# Importing the package registers every model on Base.metadata.
from planner.models import Base, User  # noqa: F401

configure_logging(settings.LOG_LEVEL)

target_metadata = Base.metadata


def get_url() -> str:
    """Return the database URL from application settings."""
    return settings.DATABASE_URL


def run_migrations_offline() -> None:
    """Emit SQL for the users schema without connecting."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect with a throwaway engine and apply migrations."""
    connectable = create_engine(get_url(), poolclass=NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
