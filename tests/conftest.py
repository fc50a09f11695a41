"""Shared fixtures: in-memory SQLite database, sessions, API client and factories.

Every test gets a fresh schema. get_db is overridden so routes share the
test engine; SQLite foreign keys are switched on so orphaned rows fail.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ratemystore.auth.permissions import Principal  # noqa: E402
from ratemystore.auth.utils import hash_password  # noqa: E402
from ratemystore.db.base import Base  # noqa: E402
from ratemystore.db.session import get_db  # noqa: E402
from ratemystore.main import app  # noqa: E402
from ratemystore.model.rating import Rating  # noqa: E402
from ratemystore.model.store import Store  # noqa: E402
from ratemystore.model.user import User, UserRole  # noqa: E402

PASSWORD = "Secret#123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with_client = TestClient(app)
    yield with_client
    app.dependency_overrides.clear()


_counter = {"n": 0}


def _next() -> int:
    _counter["n"] += 1
    return _counter["n"]


@pytest.fixture
def make_user(db):
    def _make_user(role: UserRole = UserRole.NORMAL_USER, name: str = None, email: str = None,
                   address: str = "1 Main Street", password: str = PASSWORD) -> User:
        n = _next()
        user = User(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password=hash_password(password),
            address=address,
            role=role,
        )
        db.add(user)
        db.commit()
        return user
    return _make_user


@pytest.fixture
def make_store(db, make_user):
    def _make_store(owner: User = None, name: str = None, email: str = None,
                    address: str = "42 Market Road") -> Store:
        n = _next()
        owner = owner or make_user(role=UserRole.STORE_OWNER)
        store = Store(
            name=name or f"Store {n}",
            email=email or f"store{n}@example.com",
            address=address,
            owner_id=owner.id,
        )
        db.add(store)
        db.commit()
        return store
    return _make_store


@pytest.fixture
def make_rating(db, make_user):
    def _make_rating(store: Store, value: int, user: User = None) -> Rating:
        user = user or make_user()
        rating = Rating(value=value, user_id=user.id, store_id=store.id)
        db.add(rating)
        db.commit()
        return rating
    return _make_rating


def principal_of(user: User) -> Principal:
    return Principal.from_user(user)


def login_headers(client: TestClient, email: str, password: str = PASSWORD, path: str = "/v1/api/users/login") -> dict:
    response = client.post(path, json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    token = response.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}
