from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ratemystore.model.rating import MAX_RATING, MIN_RATING
from ratemystore.model.user_schema import UserBrief


class RatingCreate(BaseModel):
    store_id: str = Field(min_length=1)
    value: int = Field(ge=MIN_RATING, le=MAX_RATING)


class RatingUpdate(BaseModel):
    value: int = Field(ge=MIN_RATING, le=MAX_RATING)


class RatedStore(BaseModel):
    id: str
    name: str
    address: str

    model_config = ConfigDict(from_attributes=True)


class RatingResponse(BaseModel):
    id: str
    value: int
    user_id: str
    store_id: str
    created_at: datetime
    store: Optional[RatedStore] = None

    model_config = ConfigDict(from_attributes=True)


class StoreRatingResponse(BaseModel):
    id: str
    value: int
    user_id: str
    store_id: str
    created_at: datetime
    user: UserBrief

    model_config = ConfigDict(from_attributes=True)


class StoreRatingsSummary(BaseModel):
    ratings: List[StoreRatingResponse]
    average_rating: float
    total_ratings: int
