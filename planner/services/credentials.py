"""Resolve a login identifier to an active user with a matching password."""

import logging

from planner.core.security import PasswordHasher
from planner.models.user import User
from planner.stores.user_store import UserStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CredentialValidator:
    """
    Check a username-or-email plus password.

    Unknown identifier, inactive account and wrong password all return None;
    callers turn that into one uniform "invalid credentials" failure.
    """

    def __init__(self, store: UserStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def validate(self, identifier: str, password: str) -> User | None:
        user = self._store.find_by_username(identifier)
        if user is None:
            user = self._store.find_by_email(normalize_email(identifier))
        if user is None:
            logger.debug("Credential check failed: unknown identifier")
            return None
        # Inactive accounts never reach the (slow) password check.
        if not user.is_active:
            logger.info("Credential check rejected inactive user id=%s", user.id)
            return None
        if not user.password_hash or not self._hasher.verify(password, user.password_hash):
            logger.debug("Credential check failed: password mismatch for user id=%s", user.id)
            return None
        return user
