from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ratemystore.auth.dependencies import get_principal
from ratemystore.auth.permissions import Principal
from ratemystore.db.session import get_db
from ratemystore.model.rating_schema import (
    RatingCreate,
    RatingResponse,
    RatingUpdate,
    StoreRatingResponse,
    StoreRatingsSummary,
)
from ratemystore.model.response import api_response
from ratemystore.service import rating as rating_service

router = APIRouter(prefix="/ratings", tags=["Rating"])


@router.post("/", status_code=status.HTTP_201_CREATED)
def submit_rating(data: RatingCreate, principal: Optional[Principal] = Depends(get_principal),
                  db: Session = Depends(get_db)):
    rating = rating_service.submit_rating(db, principal, data.store_id, data.value)
    return api_response(201, RatingResponse.model_validate(rating), "Rating submitted successfully")


@router.put("/{rating_id}")
def update_rating(rating_id: str, data: RatingUpdate, principal: Optional[Principal] = Depends(get_principal),
                  db: Session = Depends(get_db)):
    rating = rating_service.update_rating(db, principal, rating_id, data.value)
    return api_response(200, RatingResponse.model_validate(rating), "Rating updated successfully")


@router.get("/user")
def get_user_ratings(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    ratings = rating_service.get_user_ratings(db, principal)
    return api_response(
        200, [RatingResponse.model_validate(rating) for rating in ratings], "User ratings retrieved successfully",
    )


@router.get("/store")
def get_store_ratings(principal: Optional[Principal] = Depends(get_principal), db: Session = Depends(get_db)):
    summary = rating_service.get_store_ratings(db, principal)
    data = StoreRatingsSummary(
        ratings=[StoreRatingResponse.model_validate(rating) for rating in summary["ratings"]],
        average_rating=summary["average_rating"],
        total_ratings=summary["total_ratings"],
    )
    return api_response(200, data, "Store ratings retrieved successfully")


@router.get("/store/{store_id}")
def get_user_store_rating(store_id: str, principal: Optional[Principal] = Depends(get_principal),
                          db: Session = Depends(get_db)):
    rating = rating_service.get_user_store_rating(db, principal, store_id)
    data = RatingResponse.model_validate(rating) if rating is not None else None
    return api_response(200, data, "User store rating retrieved successfully")
