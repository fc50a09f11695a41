from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ratemystore.model.user_schema import UserBrief, UserResponse


class StoreCreate(BaseModel):
    name: str = Field(min_length=2, max_length=60)
    email: EmailStr
    address: str = Field(min_length=1, max_length=400)


class AdminStoreCreate(StoreCreate):
    owner_id: str


class StoreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=60)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, min_length=1, max_length=400)


class StoreResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    address: str
    owner_id: str
    created_at: datetime
    owner: Optional[UserBrief] = None

    model_config = ConfigDict(from_attributes=True)


class StoreListItem(StoreResponse):
    average_rating: float = 0
    total_ratings: int = 0


class RaterBrief(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class StoreRatingEntry(BaseModel):
    id: str
    value: int
    created_at: datetime
    user: RaterBrief

    model_config = ConfigDict(from_attributes=True)


class StoreDetail(StoreListItem):
    ratings: List[StoreRatingEntry] = []


class OwnedStore(BaseModel):
    id: str
    name: str
    email: EmailStr
    address: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StoreOwnerProfile(UserResponse):
    store: Optional[OwnedStore] = None


def to_store_item(store, average_rating: float, total_ratings: int) -> StoreListItem:
    item = StoreResponse.model_validate(store)
    return StoreListItem(**item.model_dump(), average_rating=average_rating, total_ratings=total_ratings)
