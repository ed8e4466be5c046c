"""
Reviews SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint, UniqueConstraint

from salon.db.postgres_bootstrap import Base
from salon.models.review_documents import ReviewStatus

_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in ReviewStatus)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        # One review per user, enforced by the store instead of a lookup before insert
        UniqueConstraint("user_id", name="uq_reviews_user_id"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        CheckConstraint("helpful >= 0", name="ck_reviews_helpful"),
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_reviews_status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False, index=True)
    comment = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, server_default=ReviewStatus.PENDING.value, index=True)
    helpful = Column(Integer, nullable=False, server_default="0")

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="review")
    replies = relationship(
        "ReviewReply",
        back_populates="review",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ReviewReply.created_at",
    )

    def __repr__(self):
        return f"<Review(id={self.id}, user_id={self.user_id}, rating={self.rating}, status={self.status}, helpful={self.helpful})>"
