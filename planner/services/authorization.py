"""Role-based authorization decisions for protected operations."""

from collections.abc import Collection, Mapping

from planner.models.user import UserRole
from planner.schemas.auth import Principal

# Operation name -> roles allowed to call it. None means "no restriction".
# An empty set is a restriction nobody satisfies.
OPERATION_ROLES: Mapping[str, frozenset[UserRole] | None] = {
    "auth.me": None,
    "auth.logout": None,
    "users.list": frozenset({UserRole.ADMIN, UserRole.MANAGER}),
}


def roles_for(
    operation: str,
    operation_roles: Mapping[str, frozenset[UserRole] | None] = OPERATION_ROLES,
) -> frozenset[UserRole] | None:
    """Required roles for an operation; unknown operations are unrestricted."""
    return operation_roles.get(operation)


def authorize(principal: Principal | None, required_roles: Collection[UserRole] | None) -> bool:
    """Allow when no roles are declared, otherwise only a principal holding one of them."""
    if required_roles is None:
        return True
    if not required_roles:
        return False
    if principal is None:
        return False
    return principal.role in required_roles
