"""Review statistics, listings and moderation backed by PostgreSQL."""

import logging
import math
from datetime import datetime
from typing import Any

from salon.config import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RECENT_WINDOW_DAYS,
    REVIEW_MAX_LENGTH,
    REVIEW_MIN_LENGTH,
    REVIEWS_AUTO_APPROVE,
    STATS_CACHE_TTL,
)
from salon.db.postgres_client import db
from salon.db.redis_client import redis_client
from salon.errors import (
    AuthorizationError,
    DuplicateError,
    InvalidStatusError,
    NotFoundError,
    ValidationError,
)
from salon.models.review_documents import RatingStatistics, ReviewStatus
from salon.services.audit_service import audit_service
from salon.utils.rating_statistics import STARS, breakdown_from_counts, round_one

logger = logging.getLogger(__name__)

_REVIEW_COLUMNS = """
    r.id,
    r.user_id,
    r.rating,
    r.comment,
    r.status,
    r.helpful,
    r.created_at,
    r.updated_at,
    u.name AS user_name,
    u.avatar AS user_avatar,
    u.verified AS user_verified
"""

_REVIEW_FROM = """
    FROM reviews r
    JOIN users u ON r.user_id = u.id
"""

SORTABLE_COLUMNS = {"created_at", "rating", "helpful"}
SORT_ORDERS = {"ASC", "DESC"}
FILTER_KINDS = {"by_rating", "verified", "recent", "search"}


def _serialize(row: dict[str, Any]) -> dict[str, Any]:
    """Convert a DB row to a JSON-friendly dict."""
    data = dict(row)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat()
    return data


def _like_pattern(query: str) -> str:
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _pagination(page: int, limit: int, total: int) -> dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit) if total else 0}


def _check_page(page: int, limit: int):
    if page < 1:
        raise ValidationError("Page must be 1 or greater", field="page")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}", field="limit")


def _check_days(days) -> int:
    if isinstance(days, bool) or not isinstance(days, int) or days < 1:
        raise ValidationError("Days must be 1 or greater", field="days")
    return days


def _check_rating(rating) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")
    return rating


def _check_text(text: str | None, field: str = "comment") -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("Comment is required", field=field)
    if not REVIEW_MIN_LENGTH <= len(text) <= REVIEW_MAX_LENGTH:
        raise ValidationError(
            f"Comment must be between {REVIEW_MIN_LENGTH} and {REVIEW_MAX_LENGTH} characters", field=field
        )
    return text


class ReviewService:
    def __init__(self, auto_approve: bool = REVIEWS_AUTO_APPROVE):
        self.auto_approve = auto_approve
        self.stats_cache_key = "review_stats"
        self.stats_cache_ttl = STATS_CACHE_TTL
        self.featured_cache_prefix = "featured_reviews:"

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------
    def _invalidate_cache(self) -> bool:
        """Drop cached statistics and featured listings after a write."""
        try:
            redis_client.delete_pattern(f"{self.stats_cache_key}*", f"{self.featured_cache_prefix}*")
            return True
        except Exception as e:
            logger.error(f"Error invalidating review cache: {e}")
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _fetch_review(self, cursor, review_id: int) -> dict[str, Any] | None:
        cursor.execute(f"SELECT {_REVIEW_COLUMNS} {_REVIEW_FROM} WHERE r.id = %s", (review_id,))
        row = cursor.fetchone()
        return _serialize(row) if row else None

    def _attach_replies(self, cursor, reviews: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Load replies for all given reviews in one query, oldest first."""
        for review in reviews:
            review["replies"] = []
        if not reviews:
            return reviews

        cursor.execute(
            """
            SELECT
                rr.id,
                rr.review_id,
                rr.user_id,
                rr.reply,
                rr.created_at,
                u.name AS user_name,
                u.avatar AS user_avatar,
                u.is_admin AS user_is_admin
            FROM review_replies rr
            JOIN users u ON rr.user_id = u.id
            WHERE rr.review_id = ANY(%s)
            ORDER BY rr.created_at ASC, rr.id ASC
            """,
            ([review["id"] for review in reviews],),
        )

        by_review = {review["id"]: review for review in reviews}
        for row in cursor.fetchall():
            reply = _serialize(row)
            by_review[reply["review_id"]]["replies"].append(reply)
        return reviews

    def _owner_of(self, cursor, review_id: int) -> str:
        cursor.execute("SELECT user_id FROM reviews WHERE id = %s", (review_id,))
        row = cursor.fetchone()
        if not row:
            raise NotFoundError("Comment not found")
        return row["user_id"]

    def _paged_query(
        self,
        where: str,
        params: dict[str, Any],
        page: int,
        limit: int,
        order_by: str = "r.created_at DESC",
    ) -> dict[str, Any]:
        _check_page(page, limit)
        params = {**params, "limit": limit, "offset": (page - 1) * limit}

        with db.get_cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) AS total {_REVIEW_FROM} WHERE {where}", params)
            total = cursor.fetchone()["total"]

            cursor.execute(
                f"""
                SELECT {_REVIEW_COLUMNS}
                {_REVIEW_FROM}
                WHERE {where}
                ORDER BY {order_by}
                LIMIT %(limit)s OFFSET %(offset)s
                """,
                params,
            )
            reviews = [_serialize(row) for row in cursor.fetchall()]

        return {"data": reviews, "pagination": _pagination(page, limit, total)}

    # ------------------------------------------------------------------
    # Create / read / update / delete
    # ------------------------------------------------------------------
    def create_review(self, user_id: str, rating: int, text: str) -> dict[str, Any]:
        """
        Create the user's review.

        The unique constraint on reviews.user_id decides duplicates; the
        insert either lands or returns nothing.

        Args:
            user_id: Author
            rating: 1 to 5
            text: Review body

        Returns:
            The new review joined with the author's public profile
        """
        rating = _check_rating(rating)
        text = _check_text(text)
        status = ReviewStatus.APPROVED if self.auto_approve else ReviewStatus.PENDING

        with db.get_cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO reviews (user_id, rating, comment, status)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (user_id) DO NOTHING
                RETURNING id
                """,
                (user_id, rating, text, status.value),
            )
            inserted = cursor.fetchone()
            if not inserted:
                raise DuplicateError("You have already submitted a review")

            review = self._fetch_review(cursor, inserted["id"])

        logger.info(f"Review {inserted['id']} created by user {user_id} with status {status.value}")
        self._invalidate_cache()
        return review

    def get_review(self, review_id: int) -> dict[str, Any]:
        with db.get_cursor() as cursor:
            review = self._fetch_review(cursor, review_id)
            if not review:
                raise NotFoundError("Comment not found")
            self._attach_replies(cursor, [review])
        return review

    def list_reviews(
        self,
        status: str = ReviewStatus.APPROVED.value,
        rating: int | None = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        sort: str = "created_at",
        order: str = "DESC",
    ) -> dict[str, Any]:
        """Listing with replies attached. Sort column and direction are whitelisted."""
        if status not in {s.value for s in ReviewStatus}:
            raise InvalidStatusError("Invalid status. Must be: approved, rejected, or pending")
        if sort not in SORTABLE_COLUMNS:
            raise ValidationError(f"Cannot sort by {sort}", field="sort")
        order = order.upper()
        if order not in SORT_ORDERS:
            raise ValidationError("Order must be ASC or DESC", field="order")

        where = "r.status = %(status)s"
        params: dict[str, Any] = {"status": status}
        if rating is not None:
            where += " AND r.rating = %(rating)s"
            params["rating"] = _check_rating(rating)

        result = self._paged_query(where, params, page, limit, order_by=f"r.{sort} {order}, r.id {order}")
        with db.get_cursor() as cursor:
            self._attach_replies(cursor, result["data"])
        return result

    def update_review(self, review_id: int, user_id: str, rating: int, text: str) -> dict[str, Any]:
        """Owner-only edit of rating and text."""
        rating = _check_rating(rating)
        text = _check_text(text)

        with db.get_cursor() as cursor:
            if self._owner_of(cursor, review_id) != user_id:
                raise AuthorizationError("Not authorized to update this comment")

            cursor.execute(
                "UPDATE reviews SET rating = %s, comment = %s, updated_at = NOW() WHERE id = %s",
                (rating, text, review_id),
            )
            review = self._fetch_review(cursor, review_id)

        self._invalidate_cache()
        return review

    def delete_review(self, review_id: int, user_id: str, is_admin: bool = False) -> bool:
        """Hard delete by the owner or an admin. Replies go with it."""
        with db.get_cursor() as cursor:
            if self._owner_of(cursor, review_id) != user_id and not is_admin:
                raise AuthorizationError("Not authorized to delete this comment")
            cursor.execute("DELETE FROM reviews WHERE id = %s", (review_id,))

        logger.info(f"Review {review_id} deleted by user {user_id}")
        self._invalidate_cache()
        return True

    def get_user_reviews(self, user_id: str) -> list[dict[str, Any]]:
        with db.get_cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {_REVIEW_COLUMNS}
                {_REVIEW_FROM}
                WHERE r.user_id = %s
                ORDER BY r.created_at DESC
                """,
                (user_id,),
            )
            return [_serialize(row) for row in cursor.fetchall()]

    # ------------------------------------------------------------------
    # Engagement
    # ------------------------------------------------------------------
    def mark_helpful(self, review_id: int) -> dict[str, Any]:
        """Unconditional +1; retries and repeat voters all count."""
        with db.get_cursor() as cursor:
            cursor.execute(
                "UPDATE reviews SET helpful = helpful + 1 WHERE id = %s RETURNING id, helpful",
                (review_id,),
            )
            row = cursor.fetchone()
            if not row:
                raise NotFoundError("Comment not found")

        self._invalidate_cache()
        return dict(row)

    def reply(self, review_id: int, user_id: str, text: str) -> dict[str, Any]:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Reply is required", field="reply")

        with db.get_cursor() as cursor:
            cursor.execute("SELECT id FROM reviews WHERE id = %s", (review_id,))
            if not cursor.fetchone():
                raise NotFoundError("Comment not found")

            cursor.execute(
                """
                INSERT INTO review_replies (review_id, user_id, reply)
                VALUES (%s, %s, %s)
                RETURNING id
                """,
                (review_id, user_id, text),
            )
            reply_id = cursor.fetchone()["id"]

            cursor.execute(
                """
                SELECT
                    rr.*,
                    u.name AS user_name,
                    u.avatar AS user_avatar
                FROM review_replies rr
                JOIN users u ON rr.user_id = u.id
                WHERE rr.id = %s
                """,
                (reply_id,),
            )
            return _serialize(cursor.fetchone())

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def get_statistics(self, window_days: int = RECENT_WINDOW_DAYS) -> RatingStatistics:
        """
        Aggregate statistics over approved reviews.

        Returns:
            RatingStatistics; all zeros when nothing is approved yet
        """
        cache_key = f"{self.stats_cache_key}:{window_days}"
        cached = redis_client.get_json(cache_key)
        if cached:
            return RatingStatistics.model_validate(cached)

        star_columns = ",\n".join(f"COUNT(*) FILTER (WHERE r.rating = {star}) AS star_{star}" for star in STARS)

        with db.get_cursor() as cursor:
            cursor.execute(
                f"""
                SELECT
                    COUNT(*) AS total_reviews,
                    AVG(r.rating) AS average_rating,
                    {star_columns},
                    COALESCE(SUM(r.helpful), 0) AS total_helpful_votes,
                    COUNT(*) FILTER (
                        WHERE r.created_at >= NOW() - %(days)s * INTERVAL '1 day'
                    ) AS recent_reviews,
                    AVG(r.rating) FILTER (
                        WHERE r.created_at >= NOW() - %(days)s * INTERVAL '1 day'
                    ) AS recent_average,
                    COUNT(*) FILTER (WHERE u.verified) AS verified_reviews
                {_REVIEW_FROM}
                WHERE r.status = %(status)s
                """,
                {"days": window_days, "status": ReviewStatus.APPROVED.value},
            )
            row = cursor.fetchone() or {}

        total = int(row.get("total_reviews") or 0)
        if total == 0:
            stats = RatingStatistics.empty()
        else:
            counts = {star: int(row.get(f"star_{star}") or 0) for star in STARS}
            stats = RatingStatistics(
                total_reviews=total,
                average_rating=round_one(row.get("average_rating")),
                rating_breakdown=breakdown_from_counts(counts, total),
                recent_reviews=int(row.get("recent_reviews") or 0),
                recent_average=round_one(row.get("recent_average")),
                verified_reviews=int(row.get("verified_reviews") or 0),
                total_helpful_votes=int(row.get("total_helpful_votes") or 0),
            )

        redis_client.set_json(cache_key, stats.model_dump(mode="json"), self.stats_cache_ttl)
        return stats

    def get_featured(self, limit: int = 3) -> list[dict[str, Any]]:
        """Approved 5-star reviews, most helpful first, newest first on ties."""
        cache_key = f"{self.featured_cache_prefix}{limit}"
        cached = redis_client.get_json(cache_key)
        if cached is not None:
            return cached

        with db.get_cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {_REVIEW_COLUMNS}
                {_REVIEW_FROM}
                WHERE r.status = %s AND r.rating = 5
                ORDER BY r.helpful DESC, r.created_at DESC, r.id DESC
                LIMIT %s
                """,
                (ReviewStatus.APPROVED.value, limit),
            )
            reviews = [_serialize(row) for row in cursor.fetchall()]

        redis_client.set_json(cache_key, reviews, self.stats_cache_ttl)
        return reviews

    def get_recent(self, limit: int = 5, days: int = RECENT_WINDOW_DAYS) -> list[dict[str, Any]]:
        days = _check_days(days)
        with db.get_cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {_REVIEW_COLUMNS}
                {_REVIEW_FROM}
                WHERE r.status = %s
                AND r.created_at >= NOW() - %s * INTERVAL '1 day'
                ORDER BY r.created_at DESC
                LIMIT %s
                """,
                (ReviewStatus.APPROVED.value, days, limit),
            )
            return [_serialize(row) for row in cursor.fetchall()]

    def get_top_reviewers(self, limit: int = 10) -> list[dict[str, Any]]:
        with db.get_cursor() as cursor:
            cursor.execute(
                """
                SELECT
                    u.id,
                    u.name,
                    u.avatar,
                    u.verified,
                    COUNT(r.id) AS review_count,
                    ROUND(AVG(r.rating), 1) AS average_rating,
                    COALESCE(SUM(r.helpful), 0) AS total_helpful_received
                FROM users u
                JOIN reviews r ON u.id = r.user_id
                WHERE r.status = %s
                GROUP BY u.id
                ORDER BY review_count DESC, total_helpful_received DESC
                LIMIT %s
                """,
                (ReviewStatus.APPROVED.value, limit),
            )
            reviewers = [dict(row) for row in cursor.fetchall()]

        for reviewer in reviewers:
            reviewer["average_rating"] = round_one(reviewer["average_rating"])
        return reviewers

    def list_by_filter(self, kind: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, **params) -> dict[str, Any]:
        """
        Paginated approved-only listings.

        Args:
            kind: by_rating (rating=), verified, recent (days=), search (query=)
            page: 1-based page
            limit: page size

        Returns:
            Dict with "data" and a {page, limit, total, pages} "pagination"
        """
        where = "r.status = %(status)s"
        query_params: dict[str, Any] = {"status": ReviewStatus.APPROVED.value}

        if kind == "by_rating":
            rating = params.get("rating")
            if rating is None:
                raise ValidationError("Valid rating (1-5) required", field="rating")
            where += " AND r.rating = %(rating)s"
            query_params["rating"] = _check_rating(rating)
        elif kind == "verified":
            where += " AND u.verified = TRUE"
        elif kind == "recent":
            where += " AND r.created_at >= NOW() - %(days)s * INTERVAL '1 day'"
            days = params.get("days")
            query_params["days"] = RECENT_WINDOW_DAYS if days is None else _check_days(days)
        elif kind == "search":
            query = (params.get("query") or "").strip()
            if not query:
                raise ValidationError("Search query required", field="query")
            where += " AND (r.comment ILIKE %(pattern)s OR u.name ILIKE %(pattern)s)"
            query_params["pattern"] = _like_pattern(query)
        else:
            raise ValidationError(f"Unknown filter: {kind}", field="kind")

        return self._paged_query(where, query_params, page, limit)

    # ------------------------------------------------------------------
    # Moderation
    # ------------------------------------------------------------------
    def moderate(
        self,
        review_id: int,
        status: str,
        moderator_id: str | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """
        Move a review to any moderation status, whatever its current one.

        The audit entry is best-effort and never fails the call.
        """
        try:
            new_status = ReviewStatus(status)
        except ValueError:
            raise InvalidStatusError("Invalid status. Must be: approved, rejected, or pending")

        with db.get_cursor() as cursor:
            cursor.execute(
                "UPDATE reviews SET status = %s, updated_at = NOW() WHERE id = %s RETURNING id, status",
                (new_status.value, review_id),
            )
            row = cursor.fetchone()
            if not row:
                raise NotFoundError("Comment not found")

        logger.info(f"Review {review_id} moderated to {new_status.value} by {moderator_id}")
        audit_service.record(
            action="moderate_review",
            table_name="reviews",
            record_id=review_id,
            new_values={"status": new_status.value, "notes": notes},
            user_id=moderator_id,
        )
        self._invalidate_cache()
        return dict(row)

    def get_pending(self) -> list[dict[str, Any]]:
        """Moderation queue, newest first."""
        with db.get_cursor() as cursor:
            cursor.execute(
                f"""
                SELECT {_REVIEW_COLUMNS}, u.email AS user_email
                {_REVIEW_FROM}
                WHERE r.status = %s
                ORDER BY r.created_at DESC
                """,
                (ReviewStatus.PENDING.value,),
            )
            return [_serialize(row) for row in cursor.fetchall()]


# Singleton instance
review_service = ReviewService()
