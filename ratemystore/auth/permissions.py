"""Authorization policy: which roles may perform which operation.

permission() is a pure decision over (principal, operation) and never
touches the database, so it can be tested without any endpoint.
authorize() turns a denial into the matching domain error.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ratemystore.core.errors import ForbiddenError, UnauthenticatedError
from ratemystore.model.user import UserRole


@dataclass(frozen=True)
class Principal:
    """Authenticated identity attached to a request."""
    id: str
    role: UserRole
    email: str = ""
    name: str = ""

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(id=user.id, role=user.role, email=user.email, name=user.name)


class Operation(str, Enum):
    VIEW_PROFILE = "view_profile"
    UPDATE_PROFILE = "update_profile"
    CHANGE_PASSWORD = "change_password"
    LOGOUT = "logout"

    VIEW_OWNER_PROFILE = "view_owner_profile"
    UPDATE_OWNER_PROFILE = "update_owner_profile"
    CREATE_OWN_STORE = "create_own_store"
    UPDATE_OWN_STORE = "update_own_store"
    VIEW_OWNER_DASHBOARD = "view_owner_dashboard"

    VIEW_ADMIN_DASHBOARD = "view_admin_dashboard"
    LIST_USERS = "list_users"
    CREATE_USER = "create_user"
    UPDATE_USER_ROLE = "update_user_role"
    DELETE_USER = "delete_user"
    CREATE_STORE = "create_store"
    UPDATE_STORE = "update_store"
    DELETE_STORE = "delete_store"

    SUBMIT_RATING = "submit_rating"
    UPDATE_RATING = "update_rating"
    LIST_OWN_RATINGS = "list_own_ratings"
    VIEW_OWN_STORE_RATING = "view_own_store_rating"
    LIST_STORE_RATINGS = "list_store_ratings"


class Denial(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


ANY_ROLE = frozenset(UserRole)
ADMIN = frozenset({UserRole.SYSTEM_ADMIN})
OWNER = frozenset({UserRole.STORE_OWNER})
NORMAL = frozenset({UserRole.NORMAL_USER})

REQUIRED_ROLES: dict[Operation, frozenset] = {
    Operation.VIEW_PROFILE: ANY_ROLE,
    Operation.UPDATE_PROFILE: ANY_ROLE,
    Operation.CHANGE_PASSWORD: ANY_ROLE,
    Operation.LOGOUT: ANY_ROLE,
    Operation.VIEW_OWNER_PROFILE: OWNER,
    Operation.UPDATE_OWNER_PROFILE: OWNER,
    Operation.CREATE_OWN_STORE: OWNER,
    Operation.UPDATE_OWN_STORE: OWNER,
    Operation.VIEW_OWNER_DASHBOARD: OWNER,
    Operation.VIEW_ADMIN_DASHBOARD: ADMIN,
    Operation.LIST_USERS: ADMIN,
    Operation.CREATE_USER: ADMIN,
    Operation.UPDATE_USER_ROLE: ADMIN,
    Operation.DELETE_USER: ADMIN,
    Operation.CREATE_STORE: ADMIN,
    Operation.UPDATE_STORE: ADMIN,
    Operation.DELETE_STORE: ADMIN,
    Operation.SUBMIT_RATING: NORMAL,
    Operation.UPDATE_RATING: NORMAL,
    Operation.LIST_OWN_RATINGS: NORMAL,
    Operation.VIEW_OWN_STORE_RATING: NORMAL,
    Operation.LIST_STORE_RATINGS: OWNER,
}

FORBIDDEN_MESSAGES: dict[Operation, str] = {
    Operation.VIEW_OWNER_PROFILE: "Only store owners can access this endpoint",
    Operation.UPDATE_OWNER_PROFILE: "Only store owners can update their profile",
    Operation.CREATE_OWN_STORE: "Only store owners can create their own store",
    Operation.UPDATE_OWN_STORE: "Only store owners can update their store",
    Operation.VIEW_OWNER_DASHBOARD: "Only store owners can access dashboard",
    Operation.VIEW_ADMIN_DASHBOARD: "Only system administrators can access dashboard",
    Operation.LIST_USERS: "Only system administrators can view users",
    Operation.CREATE_USER: "Only system administrators can create users",
    Operation.UPDATE_USER_ROLE: "Only system administrators can update user roles",
    Operation.DELETE_USER: "Only system administrators can delete users",
    Operation.CREATE_STORE: "Only system administrators can create stores",
    Operation.UPDATE_STORE: "Only system administrators can update stores",
    Operation.DELETE_STORE: "Only system administrators can delete stores",
    Operation.SUBMIT_RATING: "Only normal users can submit ratings",
    Operation.UPDATE_RATING: "Only normal users can update ratings",
    Operation.LIST_OWN_RATINGS: "Only normal users can view their ratings",
    Operation.VIEW_OWN_STORE_RATING: "Only normal users can check their store ratings",
    Operation.LIST_STORE_RATINGS: "Only store owners can view store ratings",
}

SELF_DELETE_MESSAGE = "Cannot delete your own account"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    denial: Optional[Denial] = None
    reason: Optional[str] = None


ALLOW = Decision(allowed=True)


def permission(
    principal: Optional[Principal],
    operation: Operation,
    target_user_id: Optional[str] = None,
) -> Decision:
    if principal is None:
        return Decision(False, Denial.UNAUTHENTICATED, "Unauthorized")

    if principal.role not in REQUIRED_ROLES[operation]:
        reason = FORBIDDEN_MESSAGES.get(operation, "Forbidden")
        return Decision(False, Denial.FORBIDDEN, reason)

    if operation is Operation.DELETE_USER and target_user_id == principal.id:
        return Decision(False, Denial.FORBIDDEN, SELF_DELETE_MESSAGE)

    return ALLOW


def authorize(
    principal: Optional[Principal],
    operation: Operation,
    target_user_id: Optional[str] = None,
) -> Principal:
    """Raise for a denied operation, otherwise hand back the principal."""
    decision = permission(principal, operation, target_user_id)
    if decision.allowed:
        return principal
    if decision.denial is Denial.UNAUTHENTICATED:
        raise UnauthenticatedError(decision.reason)
    raise ForbiddenError(decision.reason)
