import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ratemystore.db.base import Base
from ratemystore.model.user import utcnow

MIN_RATING = 1
MAX_RATING = 5


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("user_id", "store_id", name="uq_rating_user_store"),
        CheckConstraint(f"value >= {MIN_RATING} AND value <= {MAX_RATING}", name="ck_rating_value"),
    )

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    value = Column(Integer, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    store_id = Column(String(36), ForeignKey("stores.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="ratings")
    store = relationship("Store", back_populates="ratings")

    def __repr__(self):
        return f"<Rating(id={self.id}, value={self.value}, user_id={self.user_id}, store_id={self.store_id})>"
