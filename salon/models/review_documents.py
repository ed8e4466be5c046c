"""
Pydantic models for review documents as the client stores and displays them.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class ReplyDocument(BaseModel):
    author: str
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_admin: bool = False

    @field_validator("created_at")
    @classmethod
    def created_at_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class ReviewDocument(BaseModel):
    id: int
    author: str
    email: str | None = None
    rating: int = Field(ge=1, le=5)
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    verified: bool = False
    helpful: int = Field(0, ge=0)
    status: ReviewStatus = ReviewStatus.APPROVED
    replies: list[ReplyDocument] = []

    @field_validator("created_at")
    @classmethod
    def created_at_as_utc(cls, value: datetime) -> datetime:
        return _as_utc(value)


class StarBreakdown(BaseModel):
    count: int = 0
    percentage: float = 0.0


class RatingStatistics(BaseModel):
    total_reviews: int = 0
    average_rating: float = 0.0
    rating_breakdown: dict[int, StarBreakdown] = Field(
        default_factory=lambda: {star: StarBreakdown() for star in range(5, 0, -1)}
    )
    recent_reviews: int = 0
    recent_average: float = 0.0
    verified_reviews: int = 0
    total_helpful_votes: int = 0

    @classmethod
    def empty(cls) -> "RatingStatistics":
        return cls()
