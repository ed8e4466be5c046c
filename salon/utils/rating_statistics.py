"""Rating statistics shared by the client engine and the review service."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta, timezone

from salon.models.review_documents import RatingStatistics, ReviewDocument, StarBreakdown

STARS = (5, 4, 3, 2, 1)


def round_one(value) -> float:
    """Round to one decimal place; None and zero both come back as 0.0."""
    if not value:
        return 0.0
    return round(float(value), 1)


def percentages(counts: Mapping[int, int], total: int) -> dict[int, float]:
    """
    Per-star share of total at one decimal, summing to exactly 100.0.

    Shares are floored in tenths of a percent and the leftover tenths go to
    the largest remainders, higher stars first on ties.
    """
    if total <= 0:
        return dict.fromkeys(STARS, 0.0)

    tenths = {}
    remainders = {}
    for star in STARS:
        tenths[star], remainders[star] = divmod(int(counts.get(star) or 0) * 1000, total)

    leftover = 1000 - sum(tenths.values())
    for star in sorted(STARS, key=lambda s: remainders[s], reverse=True)[:leftover]:
        tenths[star] += 1

    return {star: tenths[star] / 10 for star in STARS}


def breakdown_from_counts(counts: Mapping[int, int], total: int) -> dict[int, StarBreakdown]:
    """Per-star count and share of total, keyed 5 down to 1."""
    shares = percentages(counts, total)
    return {star: StarBreakdown(count=int(counts.get(star) or 0), percentage=shares[star]) for star in STARS}


def statistics_from_reviews(
    reviews: Iterable[ReviewDocument],
    window_days: int = 30,
    now: datetime | None = None,
) -> RatingStatistics:
    """Single pass over the collection."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=window_days)

    total = 0
    rating_sum = 0
    counts = dict.fromkeys(STARS, 0)
    recent_count = 0
    recent_sum = 0
    verified = 0
    helpful = 0

    for review in reviews:
        total += 1
        rating_sum += review.rating
        counts[review.rating] += 1
        helpful += review.helpful
        if review.verified:
            verified += 1
        if review.created_at >= cutoff:
            recent_count += 1
            recent_sum += review.rating

    if total == 0:
        return RatingStatistics.empty()

    return RatingStatistics(
        total_reviews=total,
        average_rating=round_one(rating_sum / total),
        rating_breakdown=breakdown_from_counts(counts, total),
        recent_reviews=recent_count,
        recent_average=round_one(recent_sum / recent_count) if recent_count else 0.0,
        verified_reviews=verified,
        total_helpful_votes=helpful,
    )
