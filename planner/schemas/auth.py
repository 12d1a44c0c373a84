"""Request/response schemas for auth endpoints."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from planner.core.security import (
    EMAIL_MAX_LEN,
    LOGIN_PASSWORD_MIN_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from planner.models.user import UserRole

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class CamelModel(BaseModel):
    """Base for wire schemas: camelCase on the wire, snake_case accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginRequest(CamelModel):
    """Credentials for login; username may also be the account email."""

    username: str = Field(
        ..., min_length=1, max_length=EMAIL_MAX_LEN, description="Username or email"
    )
    password: str = Field(
        ..., min_length=LOGIN_PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )


class RegisterRequest(CamelModel):
    """New account details."""

    username: str = Field(..., max_length=USERNAME_MAX_LEN, description="Unique username")
    email: str = Field(..., max_length=EMAIL_MAX_LEN, description="Unique email address")
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    first_name: str | None = Field(default=None, max_length=NAME_MAX_LEN)
    last_name: str | None = Field(default=None, max_length=NAME_MAX_LEN)
    role: UserRole | None = Field(default=None, description="Defaults to 'user'")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < USERNAME_MIN_LEN:
            raise ValueError(f"Username must be at least {USERNAME_MIN_LEN} characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if (
            not re.search(r"[a-z]", v)
            or not re.search(r"[A-Z]", v)
            or not re.search(r"\d", v)
        ):
            raise ValueError(
                "Password must contain at least one uppercase letter, one lowercase letter, and one number"
            )
        return v


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class PublicUser(CamelModel):
    """User projection safe to return to clients (never includes hashes)."""

    id: str
    username: str
    email: str
    role: UserRole
    first_name: str | None = None
    last_name: str | None = None


class AuthResponse(CamelModel):
    """Token pair and user returned by register, login and refresh."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")
    user: PublicUser


class Principal(CamelModel):
    """Verified identity of the caller (id, username, email, role)."""

    id: str
    username: str
    email: str
    role: UserRole


class UsersListResponse(CamelModel):
    """Response for GET /users."""

    users: list[PublicUser]
