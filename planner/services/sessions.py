"""
Login, registration, refresh-token rotation and logout.

Session state lives on the user row: no session while refresh_token_hash is
null, an active session while it is set and unexpired. Every successful login,
registration or refresh overwrites the stored hash, so at most one refresh
token per user is valid. Concurrent refreshes for one user are last-write-wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from planner.core.security import PasswordHasher
from planner.core.tokens import InvalidTokenError, TokenClaims, TokenCodec, TokenPair
from planner.models.user import User, UserRole
from planner.schemas.auth import AuthResponse, PublicUser, RegisterRequest
from planner.services.credentials import CredentialValidator, normalize_email
from planner.services.results import AuthError, Err, Ok, Result
from planner.stores.user_store import DuplicateUserError, UserStore

if TYPE_CHECKING:
    from planner.core.config import Settings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"

DUPLICATE_MESSAGES = {
    "username": "Username already exists",
    "email": "Email already exists",
    None: "Username or email already exists",
}


def _as_utc(value: datetime | None) -> datetime | None:
    # Some backends hand back naive datetimes; stored values are always UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _utcnow() -> datetime:
    return datetime.now(UTC)


def claims_for(user: User) -> TokenClaims:
    return TokenClaims(
        subject=str(user.id),
        username=user.username,
        email=user.email,
        role=UserRole(user.role),
    )


def public_user(user: User) -> PublicUser:
    return PublicUser(
        id=str(user.id),
        username=user.username or "",
        email=user.email or "",
        role=UserRole(user.role),
        first_name=user.first_name,
        last_name=user.last_name,
    )


class SessionManager:
    """Issues, rotates and revokes token pairs for users in a UserStore."""

    def __init__(
        self,
        store: UserStore,
        settings: Settings,
        *,
        codec: TokenCodec | None = None,
        password_hasher: PasswordHasher | None = None,
        token_hasher: PasswordHasher | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._codec = codec or TokenCodec.from_settings(settings)
        self._password_hasher = password_hasher or PasswordHasher(settings.BCRYPT_ROUNDS)
        self._token_hasher = token_hasher or PasswordHasher(settings.REFRESH_TOKEN_BCRYPT_ROUNDS)
        self._validator = CredentialValidator(store, self._password_hasher)
        self._refresh_horizon = timedelta(days=settings.REFRESH_TOKEN_EXPIRATION_DAYS)
        self._clock = clock

    def login(self, identifier: str, password: str) -> Result[AuthResponse, AuthError]:
        user = self._validator.validate(identifier, password)
        if user is None:
            return Err(AuthError.unauthorized(INVALID_CREDENTIALS))

        self._store.update(user.id, last_login_at=self._clock())
        tokens = self._codec.issue_pair(claims_for(user))
        self._store_refresh_token(user.id, tokens.refresh_token)
        logger.info("User logged in: id=%s", user.id)
        return Ok(self._response(user, tokens))

    def register(self, registration: RegisterRequest) -> Result[AuthResponse, AuthError]:
        username = registration.username.strip()
        email = normalize_email(registration.email)
        if not username:
            return Err(AuthError.conflict("Username cannot be empty"))
        if not email:
            return Err(AuthError.conflict("Email cannot be empty"))

        # Username is always checked before email.
        if self._store.find_by_username(username) is not None:
            return Err(AuthError.conflict(DUPLICATE_MESSAGES["username"]))
        if self._store.find_by_email(email) is not None:
            return Err(AuthError.conflict(DUPLICATE_MESSAGES["email"]))

        try:
            user = self._store.create(
                username=username,
                email=email,
                password_hash=self._password_hasher.hash(registration.password),
                first_name=(registration.first_name or "").strip() or None,
                last_name=(registration.last_name or "").strip() or None,
                role=(registration.role or UserRole.USER).value,
                is_active=True,
            )
        except DuplicateUserError as e:
            logger.info("Registration lost a uniqueness race on %s", e.field or "unknown field")
            return Err(AuthError.conflict(DUPLICATE_MESSAGES.get(e.field, DUPLICATE_MESSAGES[None])))

        try:
            tokens = self._codec.issue_pair(claims_for(user))
        except Exception:
            logger.exception("Token generation failed for new user id=%s; removing user", user.id)
            self._store.delete(user.id)
            raise

        try:
            self._store_refresh_token(user.id, tokens.refresh_token)
        except Exception:
            # The account exists and the tokens are valid; the next login stores a fresh hash.
            logger.exception("Storing refresh token failed for new user id=%s", user.id)

        logger.info("User registered: id=%s role=%s", user.id, user.role)
        return Ok(self._response(user, tokens))

    def refresh(self, refresh_token: str) -> Result[AuthResponse, AuthError]:
        """Exchange a refresh token for a new pair; the presented token stops working."""
        try:
            return self._rotate(refresh_token)
        except Exception:
            logger.exception("Unexpected error during token refresh")
            return Err(AuthError.unauthorized(INVALID_REFRESH_TOKEN))

    def logout(self, user_id: str) -> None:
        """Drop the user's refresh capability. Safe to call without an active session."""
        self._store.update(user_id, refresh_token_hash=None, refresh_token_expires_at=None)
        logger.info("User logged out: id=%s", user_id)

    def _rotate(self, refresh_token: str) -> Result[AuthResponse, AuthError]:
        rejected = Err(AuthError.unauthorized(INVALID_REFRESH_TOKEN))
        try:
            claims = self._codec.verify_refresh(refresh_token)
        except InvalidTokenError:
            logger.info("Refresh rejected: token failed verification")
            return rejected

        user = self._store.find_by_id(claims.subject)
        if user is None or not user.is_active:
            logger.info("Refresh rejected: user missing or inactive (sub=%s)", claims.subject)
            return rejected

        if not user.refresh_token_hash or not self._token_hasher.verify(
            refresh_token, user.refresh_token_hash
        ):
            logger.info("Refresh rejected: token does not match stored session for id=%s", user.id)
            return rejected

        expires_at = _as_utc(user.refresh_token_expires_at)
        if expires_at is None or expires_at < self._clock():
            logger.info("Refresh rejected: stored session expired for id=%s", user.id)
            return rejected

        tokens = self._codec.issue_pair(claims_for(user))
        self._store_refresh_token(user.id, tokens.refresh_token)
        logger.info("Refresh token rotated for id=%s", user.id)
        return Ok(self._response(user, tokens))

    def _store_refresh_token(self, user_id: str, refresh_token: str) -> None:
        # Hash and expiry are always written together.
        self._store.update(
            user_id,
            refresh_token_hash=self._token_hasher.hash(refresh_token),
            refresh_token_expires_at=self._clock() + self._refresh_horizon,
        )

    @staticmethod
    def _response(user: User, tokens: TokenPair) -> AuthResponse:
        return AuthResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            user=public_user(user),
        )
