"""
Client-side review widget logic: local store, aggregation engine and API client.
"""

from .api_client import ReviewApiClient
from .context import AppContext
from .engine import FilterKind, ReviewAggregationEngine, ReviewFilter, has_more, paginate
from .repository import (
    InMemoryReviewRepository,
    JsonFileReviewRepository,
    RedisReviewRepository,
    ReviewRepository,
)

__all__ = [
    "AppContext",
    "FilterKind",
    "InMemoryReviewRepository",
    "JsonFileReviewRepository",
    "RedisReviewRepository",
    "ReviewAggregationEngine",
    "ReviewApiClient",
    "ReviewFilter",
    "ReviewRepository",
    "has_more",
    "paginate",
]
