"""
Init file for the models: SQLAlchemy tables plus the pydantic documents.
"""

from .review_replies import ReviewReply
from .reviews import Review
from .users import User

__all__ = [
    "Review",
    "ReviewReply",
    "User",
]
