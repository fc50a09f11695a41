"""Registration, login, refresh-token rotation and profile maintenance."""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ratemystore.auth.permissions import Operation, Principal, authorize
from ratemystore.auth.utils import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from ratemystore.core.errors import ConflictError, NotFoundError, UnauthenticatedError
from ratemystore.db.session import transaction
from ratemystore.model.user import User, UserRole
from ratemystore.model.user_schema import AdminUserCreate, PasswordUpdate, UserCreate, UserLogin, UserUpdate
from ratemystore.repository import user as user_repository

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "User with this email already exists"
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class AuthResult:
    user: User
    access_token: str
    refresh_token: str


def _issue_tokens(db: Session, user: User) -> AuthResult:
    """Issue a fresh token pair and persist the refresh token server-side."""
    access_token = create_access_token(user.id)
    refresh_token = create_refresh_token(user.id)
    user_repository.set_refresh_token(db, user, refresh_token)
    return AuthResult(user=user, access_token=access_token, refresh_token=refresh_token)


def _create_user(db: Session, data: UserCreate, role: UserRole) -> User:
    if user_repository.get_user_by_email(db, data.email):
        raise ConflictError(DUPLICATE_EMAIL)
    return user_repository.create_user(
        db,
        name=data.name,
        email=data.email,
        password_hash=hash_password(data.password),
        address=data.address,
        role=role,
    )


def register_user(db: Session, data: UserCreate, role: UserRole) -> AuthResult:
    """Self-registration: the role comes from the endpoint, never the payload."""
    with transaction(db, conflict_message=DUPLICATE_EMAIL):
        user = _create_user(db, data, role)
        result = _issue_tokens(db, user)
    logger.info("User registered", extra={"user_id": user.id})
    return result


def create_user(db: Session, principal: Optional[Principal], data: AdminUserCreate) -> User:
    authorize(principal, Operation.CREATE_USER)
    with transaction(db, conflict_message=DUPLICATE_EMAIL):
        user = _create_user(db, data, data.role)
    logger.info(f"User created by admin {principal.id} with role {user.role.value}", extra={"user_id": user.id})
    return user


def login(db: Session, data: UserLogin, required_role: Optional[UserRole] = None) -> AuthResult:
    """Verify credentials; unknown email, wrong role and wrong password fail identically."""
    user = user_repository.get_user_by_email(db, data.email)
    if user is None or (required_role is not None and user.role != required_role):
        raise UnauthenticatedError(INVALID_CREDENTIALS)
    if not verify_password(data.password, user.password):
        raise UnauthenticatedError(INVALID_CREDENTIALS)

    with transaction(db):
        result = _issue_tokens(db, user)
    logger.info("User logged in", extra={"user_id": user.id})
    return result


def refresh_session(db: Session, refresh_token: Optional[str]) -> AuthResult:
    """Exchange the server-held refresh token for a new pair (rotation)."""
    if not refresh_token:
        raise UnauthenticatedError("Refresh token missing")
    user_id = decode_token(refresh_token, REFRESH_TOKEN)
    user = user_repository.get_user_by_id(db, user_id)
    if user is None or user.refresh_token != refresh_token:
        raise UnauthenticatedError("Invalid refresh token")

    with transaction(db):
        result = _issue_tokens(db, user)
    return result


def logout(db: Session, principal: Optional[Principal]):
    authorize(principal, Operation.LOGOUT)
    user = _load(db, principal.id)
    with transaction(db):
        user_repository.set_refresh_token(db, user, None)
    logger.info("User logged out", extra={"user_id": user.id})


def _load(db: Session, user_id: str) -> User:
    user = user_repository.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_profile(db: Session, principal: Optional[Principal]) -> User:
    authorize(principal, Operation.VIEW_PROFILE)
    return _load(db, principal.id)


def update_profile(db: Session, principal: Optional[Principal], data: UserUpdate) -> User:
    authorize(principal, Operation.UPDATE_PROFILE)
    user = _load(db, principal.id)
    with transaction(db):
        user_repository.update_profile(db, user, name=data.name, address=data.address)
    return user


def get_owner_profile(db: Session, principal: Optional[Principal]) -> User:
    authorize(principal, Operation.VIEW_OWNER_PROFILE)
    user = user_repository.get_user_with_store(db, principal.id)
    if user is None:
        raise NotFoundError("Store owner not found")
    return user


def update_owner_profile(db: Session, principal: Optional[Principal], data: UserUpdate) -> User:
    authorize(principal, Operation.UPDATE_OWNER_PROFILE)
    user = _load(db, principal.id)
    with transaction(db):
        user_repository.update_profile(db, user, name=data.name, address=data.address)
    return user


def change_password(db: Session, principal: Optional[Principal], data: PasswordUpdate):
    """Replace the password hash and drop the refresh token so other sessions must log in again."""
    authorize(principal, Operation.CHANGE_PASSWORD)
    user = _load(db, principal.id)
    if not verify_password(data.current_password, user.password):
        raise UnauthenticatedError("Current password is incorrect")
    with transaction(db):
        user_repository.set_password(db, user, hash_password(data.new_password))
        user_repository.set_refresh_token(db, user, None)
    logger.info("Password changed", extra={"user_id": user.id})
