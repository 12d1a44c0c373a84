"""SQLAlchemy ORM models."""

from planner.models.base import Base
from planner.models.user import User, UserRole

__all__ = ["Base", "User", "UserRole"]
