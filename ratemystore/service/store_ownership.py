"""Store lifecycle and the one-owner-one-store invariant.

Role side effects travel with the store row: assigning a store promotes its
owner to STORE_OWNER and deleting it demotes the owner to NORMAL_USER, each
inside the same transaction as the store mutation.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ratemystore.auth.permissions import Operation, Principal, authorize
from ratemystore.core.errors import ConflictError, NotFoundError
from ratemystore.db.session import transaction
from ratemystore.model.store import Store
from ratemystore.model.store_schema import AdminStoreCreate, StoreCreate, StoreUpdate
from ratemystore.model.user import UserRole
from ratemystore.repository import rating as rating_repository
from ratemystore.repository import store as store_repository
from ratemystore.repository import user as user_repository
from ratemystore.service.aggregates import average_rating, rating_distribution

logger = logging.getLogger(__name__)

DUPLICATE_STORE_EMAIL = "A store with this email already exists"
RECENT_RATINGS_LIMIT = 10


def _ensure_email_free(db: Session, email: str, store_id: Optional[str] = None):
    existing = store_repository.get_store_by_email(db, email)
    if existing is not None and existing.id != store_id:
        raise ConflictError(DUPLICATE_STORE_EMAIL)


def create_own_store(db: Session, principal: Optional[Principal], data: StoreCreate) -> Store:
    authorize(principal, Operation.CREATE_OWN_STORE)
    if store_repository.get_store_by_owner(db, principal.id):
        raise ConflictError("You already have a store. Each store owner can only have one store.")
    _ensure_email_free(db, data.email)

    # owner_id and email are both unique columns, so a lost race lands here as a conflict
    with transaction(db, conflict_message="Store could not be created: owner or email already taken"):
        store = store_repository.create_store(
            db, name=data.name, email=data.email, address=data.address, owner_id=principal.id,
        )
    logger.info("Store created by owner", extra={"store_id": store.id, "user_id": principal.id})
    return store


def admin_create_store(db: Session, principal: Optional[Principal], data: AdminStoreCreate) -> Store:
    authorize(principal, Operation.CREATE_STORE)
    owner = user_repository.get_user_by_id(db, data.owner_id)
    if owner is None:
        raise NotFoundError("Selected owner not found")
    if store_repository.get_store_by_owner(db, owner.id):
        raise ConflictError(f'User "{owner.name}" already owns a store')
    _ensure_email_free(db, data.email)

    with transaction(db, conflict_message="Store could not be created: owner or email already taken"):
        store = store_repository.create_store(
            db, name=data.name, email=data.email, address=data.address, owner_id=owner.id,
        )
        if owner.role != UserRole.STORE_OWNER:
            user_repository.set_role(db, owner, UserRole.STORE_OWNER)
    logger.info(f"Store created by admin {principal.id}", extra={"store_id": store.id, "user_id": owner.id})
    return store


def _apply_update(db: Session, store: Store, data: StoreUpdate) -> Store:
    if data.email is not None and data.email != store.email:
        _ensure_email_free(db, data.email, store_id=store.id)
    with transaction(db, conflict_message=DUPLICATE_STORE_EMAIL):
        store_repository.update_store(db, store, name=data.name, email=data.email, address=data.address)
    return store


def update_store(db: Session, principal: Optional[Principal], store_id: str, data: StoreUpdate) -> Store:
    authorize(principal, Operation.UPDATE_STORE)
    store = store_repository.get_store_by_id(db, store_id)
    if store is None:
        raise NotFoundError("Store not found")
    return _apply_update(db, store, data)


def update_own_store(db: Session, principal: Optional[Principal], data: StoreUpdate) -> Store:
    authorize(principal, Operation.UPDATE_OWN_STORE)
    store = store_repository.get_store_by_owner(db, principal.id)
    if store is None:
        raise NotFoundError("You don't have a store to update")
    return _apply_update(db, store, data)


def admin_delete_store(db: Session, principal: Optional[Principal], store_id: str):
    authorize(principal, Operation.DELETE_STORE)
    store = store_repository.get_store_by_id(db, store_id)
    if store is None:
        raise NotFoundError("Store not found")
    owner_id = store.owner_id
    owner = user_repository.get_user_by_id(db, owner_id)

    with transaction(db):
        removed = rating_repository.delete_ratings_by_store(db, store_id)
        store_repository.delete_store_row(db, store)
        if owner is not None:
            user_repository.set_role(db, owner, UserRole.NORMAL_USER)
    logger.info(
        f"Store deleted by admin {principal.id} with {removed} ratings",
        extra={"store_id": store_id, "user_id": owner_id},
    )


def get_store(db: Session, store_id: str) -> tuple[Store, float, int]:
    store = store_repository.get_store_detail(db, store_id)
    if store is None:
        raise NotFoundError("Store not found")
    values = [rating.value for rating in store.ratings]
    return store, average_rating(values), len(values)


def owner_dashboard(db: Session, principal: Optional[Principal]) -> dict:
    authorize(principal, Operation.VIEW_OWNER_DASHBOARD)
    store = store_repository.get_store_by_owner(db, principal.id)
    if store is None:
        raise NotFoundError("No store found for this user")

    ratings = rating_repository.get_ratings_by_store(db, store.id)
    values = [rating.value for rating in ratings]
    return {
        "store": store,
        "statistics": {
            "average_rating": average_rating(values),
            "total_ratings": len(values),
            "rating_distribution": rating_distribution(values),
        },
        "recent_ratings": ratings[:RECENT_RATINGS_LIMIT],
        "customers": [rating.user for rating in ratings],
    }
