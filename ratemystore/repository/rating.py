from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ratemystore.model.rating import Rating
from ratemystore.model.store import Store  # noqa: F401  (mapper registration)
from ratemystore.model.user import User  # noqa: F401


def get_rating_by_id(db: Session, id: str) -> Optional[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.store))
        .filter(Rating.id == id)
        .first()
    )


def get_user_store_rating(db: Session, user_id: str, store_id: str) -> Optional[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.store))
        .filter(Rating.user_id == user_id, Rating.store_id == store_id)
        .first()
    )


def create_rating(db: Session, user_id: str, store_id: str, value: int) -> Rating:
    new_rating = Rating(
        value=value,
        user_id=user_id,
        store_id=store_id,
    )
    db.add(new_rating)
    db.flush()
    return new_rating


def update_rating_value(db: Session, rating: Rating, value: int) -> Rating:
    rating.value = value
    db.flush()
    return rating


def get_ratings_by_user(db: Session, user_id: str) -> list[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.store))
        .filter(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc())
        .all()
    )


def get_ratings_by_store(db: Session, store_id: str) -> list[Rating]:
    return (
        db.query(Rating)
        .options(joinedload(Rating.user))
        .filter(Rating.store_id == store_id)
        .order_by(Rating.created_at.desc())
        .all()
    )


def delete_ratings_by_user(db: Session, user_id: str) -> int:
    deleted = (
        db.query(Rating)
        .filter(Rating.user_id == user_id)
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted


def delete_ratings_by_store(db: Session, store_id: str) -> int:
    deleted = (
        db.query(Rating)
        .filter(Rating.store_id == store_id)
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted


def count_ratings(db: Session) -> int:
    return db.query(func.count(Rating.id)).scalar()
