from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.orm import Session

from ratemystore.auth.dependencies import get_principal
from ratemystore.auth.permissions import Principal
from ratemystore.auth.utils import clear_refresh_cookie, set_refresh_cookie
from ratemystore.core.config import settings
from ratemystore.db.session import get_db
from ratemystore.model.response import api_response
from ratemystore.model.user import UserRole
from ratemystore.model.user_schema import AuthResponse, PasswordUpdate, UserCreate, UserLogin, UserResponse, UserUpdate
from ratemystore.service import identity
from ratemystore.service.identity import AuthResult

router = APIRouter(prefix="/users", tags=["User"])


def auth_payload(response: Response, result: AuthResult) -> AuthResponse:
    set_refresh_cookie(response, result.refresh_token)
    return AuthResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.access_token,
        refresh_token=result.refresh_token,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, response: Response, db: Session = Depends(get_db)):
    result = identity.register_user(db, data, UserRole.NORMAL_USER)
    return api_response(201, auth_payload(response, result), "User registered successfully")


@router.post("/login")
def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    result = identity.login(db, data)
    return api_response(200, auth_payload(response, result), "Login successful")


@router.post("/refresh")
def refresh(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    db: Session = Depends(get_db),
):
    result = identity.refresh_session(db, refresh_token)
    return api_response(200, auth_payload(response, result), "Token refreshed successfully")


@router.post("/logout")
def logout(response: Response, principal: Optional[Principal] = Depends(get_principal),
           db: Session = Depends(get_db)):
    identity.logout(db, principal)
    clear_refresh_cookie(response)
    return api_response(200, None, "Logged out successfully")


@router.get("/profile")
def get_profile(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    user = identity.get_profile(db, principal)
    return api_response(200, {"user": UserResponse.model_validate(user)}, "Profile retrieved successfully")


@router.put("/profile")
def update_profile(data: UserUpdate, principal: Optional[Principal] = Depends(get_principal),
                   db: Session = Depends(get_db)):
    user = identity.update_profile(db, principal, data)
    return api_response(200, {"user": UserResponse.model_validate(user)}, "Profile updated successfully")


@router.put("/password")
def change_password(data: PasswordUpdate, response: Response,
                    principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    identity.change_password(db, principal, data)
    clear_refresh_cookie(response)
    return api_response(200, None, "Password updated successfully")
