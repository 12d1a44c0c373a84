"""Pydantic request/response schemas."""

from planner.schemas.auth import (
    AuthResponse,
    LoginRequest,
    Principal,
    PublicUser,
    RefreshRequest,
    RegisterRequest,
    UsersListResponse,
)
from planner.schemas.health import HealthResponse

__all__ = [
    "AuthResponse",
    "HealthResponse",
    "LoginRequest",
    "Principal",
    "PublicUser",
    "RefreshRequest",
    "RegisterRequest",
    "UsersListResponse",
]
