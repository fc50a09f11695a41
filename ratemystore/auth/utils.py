import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from ratemystore.core.config import settings
from ratemystore.core.errors import UnauthenticatedError

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

# PBKDF2-SHA256: slow one-way hash with no native build dependency
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(subject: str, token_type: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(subject),
        "exp": now + expires_delta,
        "iat": now,
        "type": token_type,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(subject, ACCESS_TOKEN, expires_delta)


def create_refresh_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(subject, REFRESH_TOKEN, expires_delta)


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> str:
    """Verify signature, expiry and token type; return the subject (user id)."""
    try:
        # jose rejects expired tokens on decode
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthenticatedError("Invalid or expired token")

    if payload.get("type") != expected_type:
        raise UnauthenticatedError("Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError("Invalid token: no subject")
    return user_id


def set_refresh_cookie(response: Response, refresh_token: str):
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path=settings.REFRESH_COOKIE_PATH,
    )


def clear_refresh_cookie(response: Response):
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=settings.REFRESH_COOKIE_PATH,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
