"""Rating submission and lookups; one rating per (user, store)."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ratemystore.auth.permissions import Operation, Principal, authorize
from ratemystore.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ratemystore.db.session import transaction
from ratemystore.model.rating import MAX_RATING, MIN_RATING, Rating
from ratemystore.repository import rating as rating_repository
from ratemystore.repository import store as store_repository
from ratemystore.service.aggregates import average_rating

logger = logging.getLogger(__name__)

ALREADY_RATED = "You have already rated this store. Use update instead."


def _check_value(value: int):
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}", field="value")


def submit_rating(db: Session, principal: Optional[Principal], store_id: str, value: int) -> Rating:
    authorize(principal, Operation.SUBMIT_RATING)
    _check_value(value)
    if store_repository.get_store_by_id(db, store_id) is None:
        raise NotFoundError("Store not found")
    if rating_repository.get_user_store_rating(db, principal.id, store_id) is not None:
        raise ConflictError(ALREADY_RATED)

    # a concurrent submission for the same pair fails on the unique constraint
    with transaction(db, conflict_message=ALREADY_RATED):
        rating = rating_repository.create_rating(db, principal.id, store_id, value)
    logger.info("Rating submitted", extra={"rating_id": rating.id, "store_id": store_id, "user_id": principal.id})
    return rating


def update_rating(db: Session, principal: Optional[Principal], rating_id: str, value: int) -> Rating:
    authorize(principal, Operation.UPDATE_RATING)
    _check_value(value)
    rating = rating_repository.get_rating_by_id(db, rating_id)
    if rating is None:
        raise NotFoundError("Rating not found")
    if rating.user_id != principal.id:
        raise ForbiddenError("You can only update your own ratings")

    with transaction(db):
        rating_repository.update_rating_value(db, rating, value)
    return rating


def get_user_ratings(db: Session, principal: Optional[Principal]) -> list[Rating]:
    authorize(principal, Operation.LIST_OWN_RATINGS)
    return rating_repository.get_ratings_by_user(db, principal.id)


def get_user_store_rating(db: Session, principal: Optional[Principal], store_id: str) -> Optional[Rating]:
    """The caller's rating of a store, or None; absence is not an error."""
    authorize(principal, Operation.VIEW_OWN_STORE_RATING)
    return rating_repository.get_user_store_rating(db, principal.id, store_id)


def get_store_ratings(db: Session, principal: Optional[Principal]) -> dict:
    authorize(principal, Operation.LIST_STORE_RATINGS)
    store = store_repository.get_store_by_owner(db, principal.id)
    if store is None:
        raise NotFoundError("No store found for this user")

    ratings = rating_repository.get_ratings_by_store(db, store.id)
    return {
        "ratings": ratings,
        "average_rating": average_rating(rating.value for rating in ratings),
        "total_ratings": len(ratings),
    }
