from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ratemystore.auth.dependencies import get_principal
from ratemystore.auth.permissions import Principal
from ratemystore.core.config import settings
from ratemystore.core.errors import ForbiddenError
from ratemystore.db.session import get_db
from ratemystore.model.response import Pagination, api_response
from ratemystore.model.user import UserRole
from ratemystore.model.user_schema import (
    AdminUserCreate,
    RoleUpdate,
    UserCreate,
    UserListItem,
    UserLogin,
    UserResponse,
)
from ratemystore.repository.directory import DEFAULT_LIMIT, MAX_LIMIT, PageRequest, SortOrder
from ratemystore.routers.user_router import auth_payload
from ratemystore.service import admin, identity

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, response: Response, db: Session = Depends(get_db)):
    if not settings.ADMIN_SIGNUP_ENABLED:
        raise ForbiddenError("Administrator registration is disabled")
    result = identity.register_user(db, data, UserRole.SYSTEM_ADMIN)
    return api_response(201, auth_payload(response, result), "Admin registered successfully")


@router.post("/login")
def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    result = identity.login(db, data, required_role=UserRole.SYSTEM_ADMIN)
    return api_response(200, auth_payload(response, result), "Login successful")


@router.get("/dashboard")
def get_dashboard(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    data = admin.dashboard(db, principal)
    data["recent_users"] = [UserResponse.model_validate(user) for user in data["recent_users"]]
    return api_response(200, data, "Admin dashboard data retrieved successfully")


@router.get("/users")
def list_users(
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    sort_by: str = Query("created_at", pattern="^(name|email|address|created_at)$"),
    sort_order: SortOrder = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    principal: Optional[Principal] = Depends(get_principal),
    db: Session = Depends(get_db),
):
    page_request = PageRequest(page=page, limit=limit)
    users, total = admin.list_users(
        db, principal, page_request,
        name=name, email=email, address=address, role=role,
        sort_by=sort_by, sort_order=sort_order,
    )
    return api_response(200, {
        "users": [UserListItem.model_validate(user) for user in users],
        "pagination": Pagination.build(page, limit, total),
    }, "Users retrieved successfully")


@router.post("/users", status_code=status.HTTP_201_CREATED)
def create_user(data: AdminUserCreate, principal: Optional[Principal] = Depends(get_principal),
                db: Session = Depends(get_db)):
    user = identity.create_user(db, principal, data)
    return api_response(201, UserResponse.model_validate(user), "User created successfully")


@router.put("/users/{user_id}/role")
def update_user_role(user_id: str, data: RoleUpdate, principal: Optional[Principal] = Depends(get_principal),
                     db: Session = Depends(get_db)):
    user = admin.update_user_role(db, principal, user_id, data.role)
    return api_response(200, UserResponse.model_validate(user), "User role updated successfully")


@router.delete("/users/{user_id}")
def delete_user(user_id: str, principal: Optional[Principal] = Depends(get_principal),
                db: Session = Depends(get_db)):
    admin.delete_user(db, principal, user_id)
    return api_response(200, None, "User deleted successfully")
