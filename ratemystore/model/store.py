import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from ratemystore.db.base import Base
from ratemystore.model.user import utcnow


class Store(Base):
    __tablename__ = "stores"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(60), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    address = Column(String(400), nullable=False)
    # unique: one store per owner
    owner_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    owner = relationship("User", back_populates="store")
    ratings = relationship("Rating", back_populates="store", passive_deletes="all")

    def __repr__(self):
        return f"<Store(id={self.id}, name={self.name}, owner_id={self.owner_id})>"
