"""Store lifecycle: creation, promotion, demotion and the one-store-per-owner rule."""

import pytest

from conftest import principal_of
from ratemystore.core.errors import ConflictError, ForbiddenError, NotFoundError
from ratemystore.model.rating import Rating
from ratemystore.model.store import Store
from ratemystore.model.store_schema import AdminStoreCreate, StoreCreate, StoreUpdate
from ratemystore.model.user import UserRole
from ratemystore.repository import store as store_repository
from ratemystore.repository import user as user_repository
from ratemystore.service import store_ownership


def _admin_payload(owner_id, email="shop@example.com", name="Corner Shop"):
    return AdminStoreCreate(name=name, email=email, address="9 High Street", owner_id=owner_id)


# ==============================================================================
# Admin creation and owner promotion
# ==============================================================================

def test_admin_create_store_promotes_owner(db, make_user):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    user = make_user(role=UserRole.NORMAL_USER)

    store = store_ownership.admin_create_store(db, principal_of(admin), _admin_payload(user.id))

    db.refresh(user)
    assert store.owner_id == user.id
    assert user.role == UserRole.STORE_OWNER


def test_admin_create_store_unknown_owner(db, make_user):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    with pytest.raises(NotFoundError):
        store_ownership.admin_create_store(db, principal_of(admin), _admin_payload("missing-id"))


def test_admin_create_store_owner_already_has_one(db, make_user, make_store):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    store = make_store()
    with pytest.raises(ConflictError) as excinfo:
        store_ownership.admin_create_store(db, principal_of(admin), _admin_payload(store.owner_id))
    assert "already owns a store" in excinfo.value.message


def test_admin_create_store_duplicate_email(db, make_user, make_store):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    make_store(email="dup@example.com")
    user = make_user()
    with pytest.raises(ConflictError):
        store_ownership.admin_create_store(db, principal_of(admin), _admin_payload(user.id, email="dup@example.com"))
    db.refresh(user)
    assert user.role == UserRole.NORMAL_USER


def test_promotion_failure_leaves_no_store(db, make_user, monkeypatch):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    user = make_user()

    def fail_set_role(db, user, role):
        raise RuntimeError("role update failed")

    monkeypatch.setattr(user_repository, "set_role", fail_set_role)
    with pytest.raises(RuntimeError):
        store_ownership.admin_create_store(db, principal_of(admin), _admin_payload(user.id))

    assert db.query(Store).count() == 0
    db.refresh(user)
    assert user.role == UserRole.NORMAL_USER


def test_insert_failure_leaves_owner_unpromoted(db, make_user, make_store, monkeypatch):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    make_store(email="race@example.com")
    user = make_user()

    # a concurrent creation that passed the pre-check hits the unique column instead
    monkeypatch.setattr(store_repository, "get_store_by_email", lambda db, email: None)
    with pytest.raises(ConflictError):
        store_ownership.admin_create_store(db, principal_of(admin), _admin_payload(user.id, email="race@example.com"))

    db.refresh(user)
    assert user.role == UserRole.NORMAL_USER
    assert store_repository.get_store_by_owner(db, user.id) is None


def test_only_admin_creates_stores_for_others(db, make_user):
    owner = make_user(role=UserRole.STORE_OWNER)
    with pytest.raises(ForbiddenError):
        store_ownership.admin_create_store(db, principal_of(owner), _admin_payload(owner.id))


# ==============================================================================
# Owner self-service
# ==============================================================================

def test_owner_creates_single_store(db, make_user):
    owner = make_user(role=UserRole.STORE_OWNER)
    data = StoreCreate(name="Bakery", email="bakery@example.com", address="3 Bread Lane")

    store = store_ownership.create_own_store(db, principal_of(owner), data)
    assert store.owner_id == owner.id

    second = StoreCreate(name="Second Bakery", email="bakery2@example.com", address="4 Bread Lane")
    with pytest.raises(ConflictError):
        store_ownership.create_own_store(db, principal_of(owner), second)
    assert db.query(Store).filter(Store.owner_id == owner.id).count() == 1


def test_normal_user_cannot_create_own_store(db, make_user):
    user = make_user()
    data = StoreCreate(name="Bakery", email="bakery@example.com", address="4 Bread Lane")
    with pytest.raises(ForbiddenError):
        store_ownership.create_own_store(db, principal_of(user), data)


def test_owner_store_rejects_taken_email(db, make_user, make_store):
    make_store(email="taken@example.com")
    owner = make_user(role=UserRole.STORE_OWNER)
    data = StoreCreate(name="Bakery", email="taken@example.com", address="4 Bread Lane")

    with pytest.raises(ConflictError):
        store_ownership.create_own_store(db, principal_of(owner), data)
    assert store_repository.get_store_by_owner(db, owner.id) is None


def test_concurrent_owner_store_creation_keeps_one_store(db, make_user, make_store, monkeypatch):
    owner = make_user(role=UserRole.STORE_OWNER)
    make_store(owner=owner, email="first@example.com")

    # a second request that passed the pre-check hits the unique owner column instead
    monkeypatch.setattr(store_repository, "get_store_by_owner", lambda db, owner_id: None)
    data = StoreCreate(name="Second Bakery", email="second@example.com", address="4 Bread Lane")
    with pytest.raises(ConflictError):
        store_ownership.create_own_store(db, principal_of(owner), data)

    assert db.query(Store).filter(Store.owner_id == owner.id).count() == 1
    assert db.query(Store).filter(Store.email == "second@example.com").count() == 0


def test_update_own_store_without_store(db, make_user):
    owner = make_user(role=UserRole.STORE_OWNER)
    with pytest.raises(NotFoundError):
        store_ownership.update_own_store(db, principal_of(owner), StoreUpdate(name="New Name"))


def test_update_own_store_rejects_taken_email(db, make_user, make_store):
    owner = make_user(role=UserRole.STORE_OWNER)
    store = make_store(owner=owner, email="mine@example.com")
    make_store(email="theirs@example.com")

    with pytest.raises(ConflictError):
        store_ownership.update_own_store(db, principal_of(owner), StoreUpdate(email="theirs@example.com"))

    # keeping the current email is not a conflict
    updated = store_ownership.update_own_store(
        db, principal_of(owner), StoreUpdate(email="mine@example.com", address="New Address"),
    )
    assert updated.id == store.id
    assert updated.address == "New Address"


def test_admin_update_missing_store(db, make_user):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    with pytest.raises(NotFoundError):
        store_ownership.update_store(db, principal_of(admin), "missing-id", StoreUpdate(name="Name"))


# ==============================================================================
# Deletion and demotion
# ==============================================================================

def test_admin_delete_store_removes_ratings_and_demotes_owner(db, make_user, make_store, make_rating):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    owner = make_user(role=UserRole.STORE_OWNER)
    store = make_store(owner=owner)
    store_id = store.id
    for value in (5, 4):
        make_rating(store, value)

    store_ownership.admin_delete_store(db, principal_of(admin), store_id)

    assert db.query(Store).filter(Store.id == store_id).count() == 0
    assert db.query(Rating).filter(Rating.store_id == store_id).count() == 0
    db.refresh(owner)
    assert owner.role == UserRole.NORMAL_USER


def test_admin_delete_store_rolls_back_on_failure(db, make_user, make_store, make_rating, monkeypatch):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    owner = make_user(role=UserRole.STORE_OWNER)
    store = make_store(owner=owner)
    store_id = store.id
    make_rating(store, 3)

    def fail_set_role(db, user, role):
        raise RuntimeError("role update failed")

    monkeypatch.setattr(user_repository, "set_role", fail_set_role)
    with pytest.raises(RuntimeError):
        store_ownership.admin_delete_store(db, principal_of(admin), store_id)

    assert db.query(Store).filter(Store.id == store_id).count() == 1
    assert db.query(Rating).filter(Rating.store_id == store_id).count() == 1
    db.refresh(owner)
    assert owner.role == UserRole.STORE_OWNER


def test_delete_missing_store(db, make_user):
    admin = make_user(role=UserRole.SYSTEM_ADMIN)
    with pytest.raises(NotFoundError):
        store_ownership.admin_delete_store(db, principal_of(admin), "missing-id")


# ==============================================================================
# Reads
# ==============================================================================

def test_get_store_includes_average(db, make_store, make_rating):
    store = make_store()
    for value in (4, 5, 4, 4):
        make_rating(store, value)

    found, average, total = store_ownership.get_store(db, store.id)
    assert found.id == store.id
    assert average == 4.3
    assert total == 4


def test_owner_dashboard_statistics(db, make_user, make_store, make_rating):
    owner = make_user(role=UserRole.STORE_OWNER)
    store = make_store(owner=owner)
    for value in (5, 5, 2):
        make_rating(store, value)

    result = store_ownership.owner_dashboard(db, principal_of(owner))
    assert result["store"].id == store.id
    assert result["statistics"]["average_rating"] == 4.0
    assert result["statistics"]["total_ratings"] == 3
    assert result["statistics"]["rating_distribution"] == {5: 2, 4: 0, 3: 0, 2: 1, 1: 0}
    assert len(result["recent_ratings"]) == 3
    assert len(result["customers"]) == 3


def test_owner_dashboard_without_store(db, make_user):
    owner = make_user(role=UserRole.STORE_OWNER)
    with pytest.raises(NotFoundError):
        store_ownership.owner_dashboard(db, principal_of(owner))
