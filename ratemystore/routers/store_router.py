from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ratemystore.auth.dependencies import get_principal
from ratemystore.auth.permissions import Principal
from ratemystore.db.session import get_db
from ratemystore.model.rating_schema import StoreRatingResponse
from ratemystore.model.response import Pagination, api_response
from ratemystore.model.store_schema import (
    AdminStoreCreate,
    OwnedStore,
    StoreDetail,
    StoreRatingEntry,
    StoreResponse,
    StoreUpdate,
    to_store_item,
)
from ratemystore.model.user_schema import UserBrief
from ratemystore.repository import directory
from ratemystore.repository.directory import DEFAULT_LIMIT, MAX_LIMIT, PageRequest, SortOrder
from ratemystore.service import store_ownership

router = APIRouter(prefix="/stores", tags=["Store"])


@router.get("/")
def list_stores(
    name: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, pattern="^(name|email|address|created_at|rating)$"),
    sort_order: SortOrder = Query("asc"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
):
    predicates = directory.store_filters(name=name, email=email, address=address)
    rows, total = directory.list_stores(
        db, predicates, PageRequest(page=page, limit=limit), sort_by=sort_by, sort_order=sort_order,
    )
    return api_response(200, {
        "stores": [to_store_item(row.store, row.average_rating, row.total_ratings) for row in rows],
        "pagination": Pagination.build(page, limit, total),
    }, "Stores retrieved successfully")


@router.get("/search")
def search_stores(
    query: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    db: Session = Depends(get_db),
):
    search_query, rows, total = directory.search_stores(db, query, PageRequest(page=page, limit=limit))
    return api_response(200, {
        "stores": [to_store_item(row.store, row.average_rating, row.total_ratings) for row in rows],
        "pagination": Pagination.build(page, limit, total),
        "search_query": search_query,
    }, "Store search completed successfully")


@router.get("/dashboard")
def owner_dashboard(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    data = store_ownership.owner_dashboard(db, principal)
    data["store"] = OwnedStore.model_validate(data["store"])
    data["recent_ratings"] = [StoreRatingResponse.model_validate(rating) for rating in data["recent_ratings"]]
    data["customers"] = [UserBrief.model_validate(user) for user in data["customers"]]
    return api_response(200, data, "Store dashboard data retrieved successfully")


@router.get("/{store_id}")
def get_store(store_id: str, db: Session = Depends(get_db)):
    store, average, total = store_ownership.get_store(db, store_id)
    item = to_store_item(store, average, total)
    detail = StoreDetail(
        **item.model_dump(),
        ratings=[StoreRatingEntry.model_validate(rating) for rating in store.ratings],
    )
    return api_response(200, detail, "Store retrieved successfully")


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_store(data: AdminStoreCreate, principal: Optional[Principal] = Depends(get_principal),
                 db: Session = Depends(get_db)):
    store = store_ownership.admin_create_store(db, principal, data)
    return api_response(201, StoreResponse.model_validate(store), "Store created successfully")


@router.put("/{store_id}")
def update_store(store_id: str, data: StoreUpdate, principal: Optional[Principal] = Depends(get_principal),
                 db: Session = Depends(get_db)):
    store = store_ownership.update_store(db, principal, store_id, data)
    return api_response(200, StoreResponse.model_validate(store), "Store updated successfully")


@router.delete("/{store_id}")
def delete_store(store_id: str, principal: Optional[Principal] = Depends(get_principal),
                 db: Session = Depends(get_db)):
    store_ownership.admin_delete_store(db, principal, store_id)
    return api_response(200, None, "Store deleted successfully")
