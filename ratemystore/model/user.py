import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.orm import relationship

from ratemystore.db.base import Base


class UserRole(str, enum.Enum):
    SYSTEM_ADMIN = "SYSTEM_ADMIN"
    STORE_OWNER = "STORE_OWNER"
    NORMAL_USER = "NORMAL_USER"


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)
    address = Column(String(400), nullable=False, default="")
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.NORMAL_USER)
    refresh_token = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # passive_deletes="all": dependents are removed by explicit steps in the
    # owning transaction, the ORM never nulls or deletes them on its own.
    store = relationship("Store", back_populates="owner", uselist=False, passive_deletes="all")
    ratings = relationship("Rating", back_populates="user", passive_deletes="all")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
