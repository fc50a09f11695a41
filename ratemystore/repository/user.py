from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ratemystore.model.rating import Rating  # noqa: F401  (mapper registration)
from ratemystore.model.store import Store  # noqa: F401
from ratemystore.model.user import User, UserRole


def get_user_by_id(db: Session, id: str) -> Optional[User]:
    return db.query(User).filter(User.id == id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_user_with_store(db: Session, id: str) -> Optional[User]:
    return (
        db.query(User)
        .options(joinedload(User.store))
        .filter(User.id == id)
        .first()
    )


def create_user(db: Session, name: str, email: str, password_hash: str, address: str, role: UserRole) -> User:
    new_user = User(
        name=name,
        email=email,
        password=password_hash,
        address=address,
        role=role,
    )
    db.add(new_user)
    db.flush()
    return new_user


def update_profile(db: Session, user: User, name: Optional[str] = None, address: Optional[str] = None) -> User:
    if name is not None:
        user.name = name
    if address is not None:
        user.address = address
    db.flush()
    return user


def set_role(db: Session, user: User, role: UserRole) -> User:
    user.role = role
    db.flush()
    return user


def set_password(db: Session, user: User, password_hash: str) -> User:
    user.password = password_hash
    db.flush()
    return user


def set_refresh_token(db: Session, user: User, refresh_token: Optional[str]) -> User:
    user.refresh_token = refresh_token
    db.flush()
    return user


def delete_user_row(db: Session, user: User):
    db.delete(user)
    db.flush()


def count_users(db: Session) -> int:
    return db.query(func.count(User.id)).scalar()


def get_recent_users(db: Session, limit: int = 5) -> list[User]:
    return db.query(User).order_by(User.created_at.desc()).limit(limit).all()


def count_users_by_role(db: Session) -> dict[str, int]:
    rows = db.query(User.role, func.count(User.id)).group_by(User.role).all()
    return {role.value: count for role, count in rows}
