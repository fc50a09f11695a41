from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from ratemystore.model.rating import Rating
from ratemystore.model.store import Store
from ratemystore.model.user import User  # noqa: F401  (mapper registration)


def get_store_by_id(db: Session, id: str) -> Optional[Store]:
    return db.query(Store).filter(Store.id == id).first()


def get_store_by_email(db: Session, email: str) -> Optional[Store]:
    return db.query(Store).filter(Store.email == email).first()


def get_store_by_owner(db: Session, owner_id: str) -> Optional[Store]:
    return db.query(Store).filter(Store.owner_id == owner_id).first()


def get_store_detail(db: Session, id: str) -> Optional[Store]:
    """Store with its owner and every rating (plus rater) eagerly loaded."""
    return (
        db.query(Store)
        .options(
            joinedload(Store.owner),
            selectinload(Store.ratings).joinedload(Rating.user),
        )
        .filter(Store.id == id)
        .first()
    )


def create_store(db: Session, name: str, email: str, address: str, owner_id: str) -> Store:
    new_store = Store(
        name=name,
        email=email,
        address=address,
        owner_id=owner_id,
    )
    db.add(new_store)
    db.flush()
    return new_store


def update_store(db: Session, store: Store, name: Optional[str] = None, email: Optional[str] = None,
                 address: Optional[str] = None) -> Store:
    if name is not None:
        store.name = name
    if email is not None:
        store.email = email
    if address is not None:
        store.address = address
    db.flush()
    return store


def delete_store_row(db: Session, store: Store):
    db.delete(store)
    db.flush()


def count_stores(db: Session) -> int:
    return db.query(func.count(Store.id)).scalar()
