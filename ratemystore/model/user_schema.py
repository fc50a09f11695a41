import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ratemystore.model.user import UserRole

_UPPERCASE = re.compile(r"[A-Z]")
_SPECIAL = re.compile(r"[^A-Za-z0-9]")


def check_password_strength(value: str) -> str:
    if not 8 <= len(value) <= 16:
        raise ValueError("Password must be between 8 and 16 characters")
    if not _UPPERCASE.search(value):
        raise ValueError("Password must contain at least one uppercase letter")
    if not _SPECIAL.search(value):
        raise ValueError("Password must contain at least one special character")
    return value


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    address: str = Field("", max_length=400)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_strength(value)


class AdminUserCreate(UserCreate):
    role: UserRole = UserRole.NORMAL_USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=60)
    address: Optional[str] = Field(None, max_length=400)


class PasswordUpdate(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password_strength(value)


class RoleUpdate(BaseModel):
    role: UserRole


class StoreBrief(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    address: str
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListItem(UserResponse):
    store: Optional[StoreBrief] = None


class UserBrief(BaseModel):
    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
