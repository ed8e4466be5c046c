"""Application context for the client side.

One object owns the review store, the engine and the API client, so nothing
has to live in module-level globals. Use it as a context manager or call
open() and close() yourself.
"""

import logging

from salon.client.api_client import ReviewApiClient
from salon.client.engine import ReviewAggregationEngine
from salon.client.repository import JsonFileReviewRepository, RedisReviewRepository, ReviewRepository
from salon.config import API_BASE_URL, RECENT_WINDOW_DAYS, REVIEW_STORE, REVIEW_STORE_KEY, REVIEW_STORE_PATH
from salon.errors import ReviewError
from salon.models.review_documents import RatingStatistics

logger = logging.getLogger(__name__)


class AppContext:
    def __init__(
        self,
        repository: ReviewRepository,
        api_client: ReviewApiClient | None = None,
        recent_window_days: int = RECENT_WINDOW_DAYS,
    ):
        self.repository = repository
        self.api_client = api_client
        self.recent_window_days = recent_window_days
        self._engine: ReviewAggregationEngine | None = None

    @classmethod
    def from_config(cls, token: str | None = None, store: str = REVIEW_STORE) -> "AppContext":
        if store == "redis":
            repository = RedisReviewRepository(REVIEW_STORE_KEY)
        else:
            repository = JsonFileReviewRepository(REVIEW_STORE_PATH)
        return cls(
            repository=repository,
            api_client=ReviewApiClient(API_BASE_URL, token=token),
        )

    @property
    def engine(self) -> ReviewAggregationEngine:
        if self._engine is None:
            raise RuntimeError("AppContext is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "AppContext":
        if self._engine is None:
            self._engine = ReviewAggregationEngine(self.repository, recent_window_days=self.recent_window_days)
            logger.info(f"Review engine loaded with {len(self._engine)} reviews")
        return self

    def close(self):
        if self._engine is not None:
            self._engine.clear_subscribers()
            self._engine = None
        if self.api_client is not None:
            self.api_client.close()

    def remote_statistics(self) -> RatingStatistics:
        """Server snapshot, or local statistics when there is no server to ask."""
        if self.api_client is None:
            return self.engine.statistics
        return self.api_client.get_statistics()

    def statistics(self, prefer_remote: bool = False) -> RatingStatistics:
        """Local statistics, or the server's when asked and reachable."""
        if prefer_remote and self.api_client is not None:
            try:
                return self.api_client.get_statistics()
            except ReviewError as e:
                logger.warning(f"Falling back to local statistics: {e.message}")
        return self.engine.statistics

    def __enter__(self) -> "AppContext":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
