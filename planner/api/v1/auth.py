"""Auth endpoints and dependencies (get_current_user, require_roles)."""

from collections.abc import Callable
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from planner.core.config import Settings, get_settings
from planner.core.database import get_db
from planner.core.tokens import TokenCodec
from planner.schemas.auth import (
    AuthResponse,
    LoginRequest,
    Principal,
    RefreshRequest,
    RegisterRequest,
    UsersListResponse,
)
from planner.services.access import AccessVerifier
from planner.services.authorization import authorize, roles_for
from planner.services.results import AuthError, AuthErrorKind, Err
from planner.services.sessions import SessionManager, public_user
from planner.stores.user_store import SqlAlchemyUserStore

router = APIRouter()
security = HTTPBearer(auto_error=False)

_STATUS_BY_KIND = {
    AuthErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def _raise_for(error: AuthError) -> NoReturn:
    headers = (
        {"WWW-Authenticate": "Bearer"} if error.kind is AuthErrorKind.UNAUTHORIZED else None
    )
    raise HTTPException(
        status_code=_STATUS_BY_KIND[error.kind],
        detail=error.message,
        headers=headers,
    )


def get_user_store(db: Annotated[Session, Depends(get_db)]) -> SqlAlchemyUserStore:
    return SqlAlchemyUserStore(db)


def get_session_manager(
    store: Annotated[SqlAlchemyUserStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionManager:
    return SessionManager(store, settings)


def get_access_verifier(
    store: Annotated[SqlAlchemyUserStore, Depends(get_user_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessVerifier:
    return AccessVerifier(store, TokenCodec.from_settings(settings))


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    verifier: Annotated[AccessVerifier, Depends(get_access_verifier)],
) -> Principal:
    """Dependency: require a valid Bearer access token and return the principal. Raises 401."""
    token = credentials.credentials if credentials is not None else None
    result = verifier.verify(token)
    if isinstance(result, Err):
        _raise_for(result.error)
    return result.value


def require_roles(operation: str) -> Callable[[Principal], Principal]:
    """Build a dependency that enforces the roles configured for `operation`. Raises 403."""
    required = roles_for(operation)

    def dependency(
        current_user: Annotated[Principal, Depends(get_current_user)],
    ) -> Principal:
        if not authorize(current_user, required):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return current_user

    return dependency


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> AuthResponse:
    """Create an account and sign it in. 409 if the username or email is taken."""
    result = sessions.register(body)
    if isinstance(result, Err):
        _raise_for(result.error)
    return result.value


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> AuthResponse:
    """
    Authenticate with username (or email) and password; returns access and refresh tokens.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    result = sessions.login(body.username, body.password)
    if isinstance(result, Err):
        _raise_for(result.error)
    return result.value


@router.post("/refresh", response_model=AuthResponse)
def refresh(
    body: RefreshRequest,
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> AuthResponse:
    """Exchange a refresh token for a new token pair. The old refresh token stops working."""
    result = sessions.refresh(body.refresh_token)
    if isinstance(result, Err):
        _raise_for(result.error)
    return result.value


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(
    current_user: Annotated[Principal, Depends(require_roles("auth.logout"))],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> None:
    """Invalidate the caller's refresh token. Access tokens stay valid until they expire."""
    sessions.logout(current_user.id)


@router.get("/me", response_model=Principal)
@router.post("/me", response_model=Principal)
def me(
    current_user: Annotated[Principal, Depends(require_roles("auth.me"))],
) -> Principal:
    """Return the verified caller."""
    return current_user


@router.get("/users", response_model=UsersListResponse)
def list_users(
    _user: Annotated[Principal, Depends(require_roles("users.list"))],
    store: Annotated[SqlAlchemyUserStore, Depends(get_user_store)],
) -> UsersListResponse:
    """List all users (admin or manager). Demonstrates RBAC."""
    return UsersListResponse(users=[public_user(u) for u in store.list_users()])
