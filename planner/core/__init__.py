"""Core app configuration, database and security primitives."""

from planner.core.config import get_settings, settings
from planner.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
