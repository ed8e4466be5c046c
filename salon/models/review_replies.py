"""
ReviewReplies SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from salon.db.postgres_bootstrap import Base


class ReviewReply(Base):
    __tablename__ = "review_replies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    review_id = Column(Integer, ForeignKey("reviews.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reply = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    review = relationship("Review", back_populates="replies")
    user = relationship("User")

    def __repr__(self):
        return f"<ReviewReply(id={self.id}, review_id={self.review_id}, user_id={self.user_id})>"
