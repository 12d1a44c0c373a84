"""Per-request bearer token verification."""

import logging

from planner.core.tokens import InvalidTokenError, TokenCodec
from planner.models.user import UserRole
from planner.schemas.auth import Principal
from planner.services.results import AuthError, Err, Ok, Result
from planner.stores.user_store import UserStore

logger = logging.getLogger(__name__)


class AccessVerifier:
    """
    Turn an access token into a Principal.

    The user is re-read on every call, so deactivation or a role change
    applies on the next request instead of when the token expires. The
    principal's role comes from the store, not from the token.
    """

    def __init__(self, store: UserStore, codec: TokenCodec) -> None:
        self._store = store
        self._codec = codec

    def verify(self, token: str | None) -> Result[Principal, AuthError]:
        if not token:
            return Err(AuthError.unauthorized())
        try:
            claims = self._codec.verify_access(token)
        except InvalidTokenError:
            return Err(AuthError.unauthorized())

        user = self._store.find_by_id(claims.subject)
        if user is None or not user.is_active:
            logger.info("Access token rejected: user missing or inactive (sub=%s)", claims.subject)
            return Err(AuthError.unauthorized())

        return Ok(
            Principal(
                id=str(user.id),
                username=user.username,
                email=user.email,
                role=UserRole(user.role),
            )
        )
