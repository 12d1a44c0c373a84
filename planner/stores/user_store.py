"""User lookup and mutation used by the auth core; backed by SQLAlchemy."""

import logging
from typing import Any, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from planner.models.user import User

logger = logging.getLogger(__name__)

# Columns the auth core is allowed to write through update().
UPDATABLE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "role",
        "is_active",
        "last_login_at",
        "refresh_token_hash",
        "refresh_token_expires_at",
    }
)


class DuplicateUserError(Exception):
    """Raised when create() hits a unique constraint; field is 'username', 'email' or None."""

    def __init__(self, field: str | None = None) -> None:
        self.field = field
        super().__init__(f"Duplicate user ({field or 'unknown field'})")


class UserStore(Protocol):
    """Operations the auth core needs from the persistence layer."""

    def find_by_id(self, user_id: str) -> User | None: ...

    def find_by_username(self, username: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def create(self, **fields: Any) -> User: ...

    def update(self, user_id: str, **fields: Any) -> None: ...

    def delete(self, user_id: str) -> None: ...

    def list_users(self) -> list[User]: ...


def _duplicate_field(error: IntegrityError) -> str | None:
    message = str(error.orig).lower()
    if "username" in message:
        return "username"
    if "email" in message:
        return "email"
    return None


class SqlAlchemyUserStore:
    """UserStore over a SQLAlchemy session. Each write is committed on its own."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_id(self, user_id: str) -> User | None:
        return self._session.get(User, str(user_id))

    def find_by_username(self, username: str) -> User | None:
        return self._session.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self._session.query(User).filter(User.email == email).first()

    def create(self, **fields: Any) -> User:
        user = User(**fields)
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise DuplicateUserError(_duplicate_field(e)) from e
        self._session.refresh(user)
        return user

    def update(self, user_id: str, **fields: Any) -> None:
        """Write the given columns in a single UPDATE statement."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")
        self._session.query(User).filter(User.id == str(user_id)).update(
            fields, synchronize_session="fetch"
        )
        self._session.commit()

    def delete(self, user_id: str) -> None:
        self._session.query(User).filter(User.id == str(user_id)).delete(
            synchronize_session="fetch"
        )
        self._session.commit()
        logger.info("Deleted user id=%s", user_id)

    def list_users(self) -> list[User]:
        return self._session.query(User).order_by(User.username).all()
