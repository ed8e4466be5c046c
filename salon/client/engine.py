"""Client-side review aggregation engine.

Holds the working set of reviews, answers filtered and paginated queries and
keeps a statistics summary in sync with the collection. UI code subscribes to
change notifications instead of being called by the engine directly.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from salon.client.repository import ReviewRepository
from salon.config import RECENT_WINDOW_DAYS
from salon.errors import NotFoundError, ValidationError
from salon.models.review_documents import RatingStatistics, ReplyDocument, ReviewDocument
from salon.utils.rating_statistics import statistics_from_reviews

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Any], None]


class FilterKind(str, Enum):
    ALL = "all"
    BY_RATING = "by_rating"
    VERIFIED = "verified"
    RECENT = "recent"


@dataclass(frozen=True)
class ReviewFilter:
    kind: FilterKind = FilterKind.ALL
    rating: int | None = None

    @classmethod
    def all(cls) -> "ReviewFilter":
        return cls(FilterKind.ALL)

    @classmethod
    def by_rating(cls, rating: int) -> "ReviewFilter":
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", field="rating")
        return cls(FilterKind.BY_RATING, rating)

    @classmethod
    def verified_only(cls) -> "ReviewFilter":
        return cls(FilterKind.VERIFIED)

    @classmethod
    def recent_only(cls) -> "ReviewFilter":
        return cls(FilterKind.RECENT)


def paginate(items: Iterable[ReviewDocument], page: int, page_size: int) -> list[ReviewDocument]:
    """Slice [(page - 1) * page_size, page * page_size). Past the end is an empty list."""
    if page < 1:
        raise ValidationError("Page must be 1 or greater", field="page")
    if page_size < 1:
        raise ValidationError("Page size must be 1 or greater", field="page_size")

    items = list(items)
    start = (page - 1) * page_size
    return items[start : start + page_size]


def has_more(items: Iterable[ReviewDocument], page: int, page_size: int) -> bool:
    """Whether a page after `page` would contain anything."""
    return len(list(items)) > page * page_size


class ReviewAggregationEngine:
    def __init__(self, repository: ReviewRepository, recent_window_days: int = RECENT_WINDOW_DAYS):
        self.repository = repository
        self.recent_window_days = recent_window_days
        self._subscribers: list[Subscriber] = []
        self._reviews: list[ReviewDocument] = repository.load()
        self.statistics: RatingStatistics = self.compute_statistics()

    @property
    def reviews(self) -> list[ReviewDocument]:
        """Snapshot of the collection, newest first."""
        return list(self._reviews)

    def __len__(self) -> int:
        return len(self._reviews)

    # Subscriptions
    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def clear_subscribers(self):
        self._subscribers.clear()

    def _notify(self, event: str, payload: Any):
        for callback in list(self._subscribers):
            try:
                callback(event, payload)
            except Exception as e:
                logger.error(f"Review subscriber failed on {event}: {e}")

    def _commit(self, event: str, payload: Any):
        """Persist the whole collection, refresh statistics and tell subscribers."""
        if not self.repository.save(self._reviews):
            logger.warning("Review collection kept in memory only; save failed")
        self.statistics = self.compute_statistics()
        self._notify(event, payload)
        self._notify("statistics_changed", self.statistics)

    # Mutations
    def submit(
        self,
        author: str,
        text: str,
        rating: int,
        email: str | None = None,
        verified: bool = False,
    ) -> ReviewDocument:
        """Validate and prepend a new review."""
        author = (author or "").strip()
        text = (text or "").strip()

        if not author:
            raise ValidationError("Name is required", field="author")
        if not text:
            raise ValidationError("Review text is required", field="text")
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", field="rating")

        review = ReviewDocument(
            id=self._next_id(),
            author=author,
            email=email or None,
            rating=rating,
            text=text,
            verified=verified,
        )
        self._reviews.insert(0, review)
        self._commit("review_submitted", review)
        return review

    def mark_helpful(self, review_id: int) -> ReviewDocument:
        """Add one helpful vote. Repeated calls keep counting."""
        review = self.get(review_id)
        review.helpful += 1
        self._commit("review_updated", review)
        return review

    def append_reply(self, review_id: int, author: str, text: str, is_admin: bool = False) -> ReplyDocument:
        review = self.get(review_id)

        author = (author or "").strip()
        text = (text or "").strip()
        if not author:
            raise ValidationError("Name is required", field="author")
        if not text:
            raise ValidationError("Reply text is required", field="text")

        reply = ReplyDocument(author=author, text=text, is_admin=is_admin)
        review.replies.append(reply)
        self._commit("review_updated", review)
        return reply

    def delete(self, review_id: int) -> ReviewDocument:
        review = self.get(review_id)
        self._reviews.remove(review)
        self._commit("review_deleted", review)
        return review

    def replace_all(self, reviews: Iterable[ReviewDocument]):
        """Swap the collection for another one, e.g. a listing fetched from the server."""
        self._reviews = list(reviews)
        if not self.repository.save(self._reviews):
            logger.warning("Review collection kept in memory only; save failed")
        self.statistics = self.compute_statistics()
        self._notify("statistics_changed", self.statistics)

    # Queries
    def get(self, review_id: int) -> ReviewDocument:
        for review in self._reviews:
            if review.id == review_id:
                return review
        raise NotFoundError(f"Review {review_id} not found")

    def filter(self, criterion: ReviewFilter | None = None) -> Iterator[ReviewDocument]:
        """Lazily yield matching reviews in collection order."""
        criterion = criterion or ReviewFilter.all()
        predicate = self._predicate(criterion)
        return (review for review in list(self._reviews) if predicate(review))

    def page(self, criterion: ReviewFilter | None, page: int, page_size: int) -> dict[str, Any]:
        """Filter then paginate, with the flag the UI needs for its "load more" button."""
        matching = list(self.filter(criterion))
        return {
            "reviews": paginate(matching, page, page_size),
            "page": page,
            "page_size": page_size,
            "total": len(matching),
            "has_more": has_more(matching, page, page_size),
        }

    def compute_statistics(self) -> RatingStatistics:
        return statistics_from_reviews(self._reviews, window_days=self.recent_window_days)

    def _predicate(self, criterion: ReviewFilter) -> Callable[[ReviewDocument], bool]:
        if criterion.kind == FilterKind.BY_RATING:
            return lambda review: review.rating == criterion.rating
        if criterion.kind == FilterKind.VERIFIED:
            return lambda review: review.verified
        if criterion.kind == FilterKind.RECENT:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self.recent_window_days)
            return lambda review: review.created_at >= cutoff
        return lambda review: True

    def _next_id(self) -> int:
        return max((review.id for review in self._reviews), default=0) + 1
