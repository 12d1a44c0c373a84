"""Persistence adapters used by the authentication core."""

from planner.stores.user_store import DuplicateUserError, SqlAlchemyUserStore, UserStore

__all__ = ["DuplicateUserError", "SqlAlchemyUserStore", "UserStore"]
