from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ratemystore.auth.dependencies import get_principal
from ratemystore.auth.permissions import Principal
from ratemystore.db.session import get_db
from ratemystore.model.response import api_response
from ratemystore.model.store_schema import StoreCreate, StoreOwnerProfile, StoreResponse, StoreUpdate
from ratemystore.model.user import UserRole
from ratemystore.model.user_schema import UserCreate, UserLogin, UserResponse, UserUpdate
from ratemystore.routers.user_router import auth_payload
from ratemystore.service import identity, store_ownership

router = APIRouter(prefix="/storeowner", tags=["Store Owner"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, response: Response, db: Session = Depends(get_db)):
    result = identity.register_user(db, data, UserRole.STORE_OWNER)
    return api_response(201, auth_payload(response, result), "Store owner registered successfully")


@router.post("/login")
def login(data: UserLogin, response: Response, db: Session = Depends(get_db)):
    result = identity.login(db, data, required_role=UserRole.STORE_OWNER)
    return api_response(200, auth_payload(response, result), "Login successful")


@router.get("/profile")
def get_profile(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    user = identity.get_owner_profile(db, principal)
    return api_response(200, StoreOwnerProfile.model_validate(user), "Store owner profile retrieved successfully")


@router.put("/profile")
def update_profile(data: UserUpdate, principal: Optional[Principal] = Depends(get_principal),
                   db: Session = Depends(get_db)):
    user = identity.update_owner_profile(db, principal, data)
    return api_response(200, UserResponse.model_validate(user), "Profile updated successfully")


@router.post("/store", status_code=status.HTTP_201_CREATED)
def create_store(data: StoreCreate, principal: Optional[Principal] = Depends(get_principal),
                 db: Session = Depends(get_db)):
    store = store_ownership.create_own_store(db, principal, data)
    return api_response(201, StoreResponse.model_validate(store), "Store created successfully")


@router.put("/store")
def update_store(data: StoreUpdate, principal: Optional[Principal] = Depends(get_principal),
                 db: Session = Depends(get_db)):
    store = store_ownership.update_own_store(db, principal, data)
    return api_response(200, StoreResponse.model_validate(store), "Store updated successfully")
