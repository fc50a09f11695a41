"""Filtered, paginated and sorted listings of stores and users.

Literal columns are sorted by the database. The derived "rating" sort
cannot be pushed down: the page is fetched first with each store's
ratings, averages are computed, and only that page is re-ordered in
memory. A rating-sorted listing is therefore ordered within a page, not
across pages.
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ratemystore.core.errors import ValidationError
from ratemystore.model.rating import Rating  # noqa: F401  (mapper registration)
from ratemystore.model.store import Store
from ratemystore.model.user import User, UserRole
from ratemystore.service.aggregates import average_rating

MAX_LIMIT = 100
DEFAULT_LIMIT = 10
MIN_SEARCH_LENGTH = 2

SortOrder = Literal["asc", "desc"]
STORE_SORT_COLUMNS = {
    "name": Store.name,
    "email": Store.email,
    "address": Store.address,
    "created_at": Store.created_at,
}
RATING_SORT = "rating"
USER_SORT_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "address": User.address,
    "created_at": User.created_at,
}


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if self.page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}", field="limit")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class StoreRow:
    store: Store
    average_rating: float
    total_ratings: int


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(column, value: str):
    """Case-insensitive substring predicate."""
    return column.ilike(f"%{_escape_like(value)}%", escape="\\")


def store_filters(name: Optional[str] = None, email: Optional[str] = None,
                  address: Optional[str] = None) -> list[Any]:
    predicates = []
    if name:
        predicates.append(contains(Store.name, name))
    if email:
        predicates.append(contains(Store.email, email))
    if address:
        predicates.append(contains(Store.address, address))
    return predicates


def search_filter(query: Optional[str]) -> tuple[str, Any]:
    search_query = (query or "").strip()
    if not search_query:
        raise ValidationError("Search query is required", field="query")
    if len(search_query) < MIN_SEARCH_LENGTH:
        raise ValidationError(
            f"Search query must be at least {MIN_SEARCH_LENGTH} characters", field="query",
        )
    return search_query, or_(contains(Store.name, search_query), contains(Store.address, search_query))


def user_filters(name: Optional[str] = None, email: Optional[str] = None,
                 address: Optional[str] = None, role: Optional[UserRole] = None) -> list[Any]:
    predicates = []
    if name:
        predicates.append(contains(User.name, name))
    if email:
        predicates.append(contains(User.email, email))
    if address:
        predicates.append(contains(User.address, address))
    if role:
        predicates.append(User.role == role)
    return predicates


def _ordering(column, sort_order: SortOrder):
    return column.desc() if sort_order == "desc" else column.asc()


def sort_rows_by_average(rows: list[StoreRow], sort_order: SortOrder) -> list[StoreRow]:
    # sorted() is stable for reverse=True as well, so equal averages keep
    # the order in which the page was fetched
    return sorted(rows, key=lambda row: row.average_rating, reverse=sort_order == "desc")


def to_store_rows(stores: list[Store]) -> list[StoreRow]:
    rows = []
    for store in stores:
        values = [rating.value for rating in store.ratings]
        rows.append(StoreRow(store=store, average_rating=average_rating(values), total_ratings=len(values)))
    return rows


def list_stores(
    db: Session,
    predicates: list[Any],
    page: PageRequest,
    sort_by: Optional[str] = None,
    sort_order: SortOrder = "asc",
) -> tuple[list[StoreRow], int]:
    """Return one page of stores with their averages, and the total match count."""
    if sort_by is not None and sort_by != RATING_SORT and sort_by not in STORE_SORT_COLUMNS:
        raise ValidationError(f"Cannot sort stores by '{sort_by}'", field="sort_by")

    query = (
        db.query(Store)
        .options(joinedload(Store.owner), selectinload(Store.ratings))
        .filter(*predicates)
    )
    if sort_by in STORE_SORT_COLUMNS:
        query = query.order_by(_ordering(STORE_SORT_COLUMNS[sort_by], sort_order), Store.id)
    else:
        # stable page boundaries when nothing can be pushed down
        query = query.order_by(Store.created_at.asc(), Store.id)

    stores = query.offset(page.skip).limit(page.limit).all()
    total = db.query(func.count(Store.id)).filter(*predicates).scalar()

    rows = to_store_rows(stores)
    if sort_by == RATING_SORT:
        rows = sort_rows_by_average(rows, sort_order)
    return rows, total


def search_stores(db: Session, query: Optional[str], page: PageRequest) -> tuple[str, list[StoreRow], int]:
    search_query, predicate = search_filter(query)
    stores = (
        db.query(Store)
        .options(joinedload(Store.owner), selectinload(Store.ratings))
        .filter(predicate)
        .order_by(Store.name.asc(), Store.id)
        .offset(page.skip)
        .limit(page.limit)
        .all()
    )
    total = db.query(func.count(Store.id)).filter(predicate).scalar()
    return search_query, to_store_rows(stores), total


def list_users(
    db: Session,
    predicates: list[Any],
    page: PageRequest,
    sort_by: str = "created_at",
    sort_order: SortOrder = "desc",
) -> tuple[list[User], int]:
    if sort_by not in USER_SORT_COLUMNS:
        raise ValidationError(f"Cannot sort users by '{sort_by}'", field="sort_by")

    users = (
        db.query(User)
        .options(joinedload(User.store))
        .filter(*predicates)
        .order_by(_ordering(USER_SORT_COLUMNS[sort_by], sort_order), User.id)
        .offset(page.skip)
        .limit(page.limit)
        .all()
    )
    total = db.query(func.count(User.id)).filter(*predicates).scalar()
    return users, total
