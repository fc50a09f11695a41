"""System administrator operations: dashboard, user directory, role and account management."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ratemystore.auth.permissions import Operation, Principal, authorize
from ratemystore.core.errors import NotFoundError
from ratemystore.db.session import transaction
from ratemystore.model.user import User, UserRole
from ratemystore.repository import directory
from ratemystore.repository import rating as rating_repository
from ratemystore.repository import store as store_repository
from ratemystore.repository import user as user_repository

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 5


def dashboard(db: Session, principal: Optional[Principal]) -> dict:
    """Counts are separate queries and may not reflect a single snapshot."""
    authorize(principal, Operation.VIEW_ADMIN_DASHBOARD)
    return {
        "statistics": {
            "total_users": user_repository.count_users(db),
            "total_stores": store_repository.count_stores(db),
            "total_ratings": rating_repository.count_ratings(db),
            "users_by_role": user_repository.count_users_by_role(db),
        },
        "recent_users": user_repository.get_recent_users(db, RECENT_USERS_LIMIT),
    }


def list_users(
    db: Session,
    principal: Optional[Principal],
    page: directory.PageRequest,
    name: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    role: Optional[UserRole] = None,
    sort_by: str = "created_at",
    sort_order: directory.SortOrder = "desc",
) -> tuple[list[User], int]:
    authorize(principal, Operation.LIST_USERS)
    predicates = directory.user_filters(name=name, email=email, address=address, role=role)
    return directory.list_users(db, predicates, page, sort_by=sort_by, sort_order=sort_order)


def update_user_role(db: Session, principal: Optional[Principal], user_id: str, role: UserRole) -> User:
    authorize(principal, Operation.UPDATE_USER_ROLE)
    user = user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    with transaction(db):
        user_repository.set_role(db, user, role)
    logger.info(f"Role set to {role.value} by admin {principal.id}", extra={"user_id": user_id})
    return user


def delete_user(db: Session, principal: Optional[Principal], user_id: str):
    """Delete a user with everything hanging off them, all or nothing.

    Order: the user's own ratings, the ratings of the user's store, the
    store, then the user row.
    """
    authorize(principal, Operation.DELETE_USER, target_user_id=user_id)
    user = user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    store = store_repository.get_store_by_owner(db, user_id)

    with transaction(db):
        rating_repository.delete_ratings_by_user(db, user_id)
        if store is not None:
            rating_repository.delete_ratings_by_store(db, store.id)
            store_repository.delete_store_row(db, store)
        user_repository.delete_user_row(db, user)
    logger.info(f"User deleted by admin {principal.id}", extra={"user_id": user_id})
