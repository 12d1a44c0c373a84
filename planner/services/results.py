"""Explicit success/failure results returned by the authentication core."""

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]


class AuthErrorKind(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class AuthError:
    """
    Failure reported to callers of the auth core.

    Unauthorized messages are deliberately uniform; they never say which check failed.
    """

    kind: AuthErrorKind
    message: str

    @classmethod
    def unauthorized(cls, message: str = "Unauthorized") -> "AuthError":
        return cls(AuthErrorKind.UNAUTHORIZED, message)

    @classmethod
    def conflict(cls, message: str) -> "AuthError":
        return cls(AuthErrorKind.CONFLICT, message)
