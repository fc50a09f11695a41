import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ratemystore.core.config import settings
from ratemystore.core.errors import ConflictError

logger = logging.getLogger(__name__)


def get_database_url():
    """Build a full SQLAlchemy URL from granular env settings."""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return (
        f"postgresql+psycopg2://{settings.DB_USER}:{settings.DB_PASSWORD}"
        f"@{settings.DB_HOST}:{settings.DB_PORT}/{settings.DB_NAME}"
        "?options=-csearch_path%3Dpublic"
    )


engine = create_engine(get_database_url(), pool_pre_ping=True)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, conflict_message: str = "Resource already exists") -> Iterator[Session]:
    """Run the enclosed statements as one unit: commit all or roll back all.

    A unique-constraint violation surfaces as ConflictError so that races
    lost at the database look the same as conflicts caught up front.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
        raise ConflictError(conflict_message)
    except Exception:
        db.rollback()
        raise


def test_connection() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
