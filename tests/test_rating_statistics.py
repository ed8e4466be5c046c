"""Tests for the shared rating statistics helpers."""

import itertools
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from salon.models.review_documents import ReviewDocument
from salon.utils.rating_statistics import (
    breakdown_from_counts,
    percentages,
    round_one,
    statistics_from_reviews,
)


class TestRatingStatistics:
    def test_round_one(self):
        assert round_one(None) == 0.0
        assert round_one(0) == 0.0
        assert round_one(Decimal("4.6666")) == 4.7
        assert round_one(4.25) == 4.2

    def test_percentages_of_nothing(self):
        assert percentages({}, 0) == {5: 0.0, 4: 0.0, 3: 0.0, 2: 0.0, 1: 0.0}

    def test_percentages_sum_to_100_for_every_distribution(self):
        """Test every mix of up to seven reviews per star sums to 100 and stays within a tenth of the true share."""
        for combination in itertools.product(range(8), repeat=5):
            counts = dict(zip((5, 4, 3, 2, 1), combination))
            total = sum(combination)
            if not total:
                continue

            shares = percentages(counts, total)

            assert abs(sum(shares.values()) - 100) <= 1e-9, combination
            for star, share in shares.items():
                assert abs(share - counts[star] * 100 / total) < 0.1 + 1e-9, combination

    @pytest.mark.parametrize(
        "counts,expected",
        [
            ({4: 1, 3: 5, 2: 5, 1: 5}, {5: 0.0, 4: 6.3, 3: 31.3, 2: 31.2, 1: 31.2}),
            ({4: 3, 3: 3, 2: 3, 1: 7}, {5: 0.0, 4: 18.8, 3: 18.8, 2: 18.7, 1: 43.7}),
            ({5: 2, 4: 1}, {5: 66.7, 4: 33.3, 3: 0.0, 2: 0.0, 1: 0.0}),
        ],
    )
    def test_percentages_hand_leftover_to_largest_remainders(self, counts, expected):
        assert percentages(counts, sum(counts.values())) == expected

    def test_breakdown_keys_are_five_to_one(self):
        breakdown = breakdown_from_counts({5: 1, 1: 1}, 2)

        assert list(breakdown) == [5, 4, 3, 2, 1]
        assert breakdown[5].percentage == 50.0
        assert breakdown[3].count == 0

    def test_window_boundary(self):
        """Test the recent window is measured from the given time."""
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        reviews = [
            ReviewDocument(id=1, author="A", rating=5, text="x", created_at=now - timedelta(days=6, hours=23)),
            ReviewDocument(id=2, author="B", rating=2, text="x", created_at=now - timedelta(days=8)),
        ]

        stats = statistics_from_reviews(reviews, window_days=7, now=now)

        assert stats.recent_reviews == 1
        assert stats.recent_average == 5.0
        assert stats.average_rating == 3.5

    def test_no_recent_reviews(self):
        """Test the recent average is zero, not an error, when the window is empty."""
        now = datetime(2026, 10, 19, tzinfo=timezone.utc)
        reviews = [ReviewDocument(id=1, author="A", rating=4, text="x", created_at=now - timedelta(days=100))]

        stats = statistics_from_reviews(reviews, now=now)

        assert stats.recent_reviews == 0
        assert stats.recent_average == 0.0
        assert stats.total_reviews == 1
