"""JWT access/refresh token issuance and verification."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from planner.models.user import UserRole

if TYPE_CHECKING:
    from planner.core.config import Settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)

REQUIRED_CLAIMS = ["sub", "exp", "iat", "jti"]


class InvalidTokenError(Exception):
    """Raised for any malformed, tampered, mistyped or expired token."""

    def __init__(self, message: str = "Invalid token") -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by both token classes; timestamps are set on verify."""

    subject: str
    username: str
    email: str
    role: UserRole
    issued_at: datetime | None = None
    expires_at: datetime | None = None
    token_id: str | None = None


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenCodec:
    """
    Signs and verifies access and refresh JWTs.

    Each token class has its own secret and default lifetime, so holding one
    secret never allows forging the other class. Stateless apart from config.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
    ) -> None:
        if not access_secret or not refresh_secret:
            raise ValueError("Token secrets must be non-empty")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh token secrets must differ")
        self._secrets = {
            ACCESS_TOKEN_TYPE: access_secret,
            REFRESH_TOKEN_TYPE: refresh_secret,
        }
        self._ttls = {
            ACCESS_TOKEN_TYPE: access_ttl,
            REFRESH_TOKEN_TYPE: refresh_ttl,
        }
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenCodec:
        return cls(
            access_secret=settings.JWT_SECRET.get_secret_value(),
            refresh_secret=settings.JWT_REFRESH_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
        )

    def issue_access(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        return self._encode(claims, ACCESS_TOKEN_TYPE, ttl)

    def issue_refresh(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        return self._encode(claims, REFRESH_TOKEN_TYPE, ttl)

    def issue_pair(self, claims: TokenClaims) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(claims),
            refresh_token=self.issue_refresh(claims),
        )

    def verify_access(self, token: str) -> TokenClaims:
        """Return the claims of a valid access token. Raises InvalidTokenError."""
        return self._decode(token, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> TokenClaims:
        """Return the claims of a valid refresh token. Raises InvalidTokenError."""
        return self._decode(token, REFRESH_TOKEN_TYPE)

    def _encode(self, claims: TokenClaims, token_type: str, ttl: timedelta | None) -> str:
        now = datetime.now(UTC)
        expire = now + (ttl if ttl is not None else self._ttls[token_type])
        payload: dict[str, Any] = {
            "sub": str(claims.subject),
            "username": claims.username,
            "email": claims.email,
            "role": UserRole(claims.role).value,
            "type": token_type,
            # Unique per token so two tokens minted in the same second still differ.
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(payload, self._secrets[token_type], algorithm=self.algorithm)

    def _decode(self, token: str, token_type: str) -> TokenClaims:
        if not token or not isinstance(token, str):
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secrets[token_type],
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e
        if payload.get("type") != token_type:
            raise InvalidTokenError()
        try:
            return TokenClaims(
                subject=str(payload["sub"]),
                username=str(payload["username"]),
                email=str(payload["email"]),
                role=UserRole(payload["role"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), UTC),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), UTC),
                token_id=str(payload["jti"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError() from e
