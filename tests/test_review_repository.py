"""Tests for the client review stores."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from salon.client.engine import ReviewAggregationEngine
from salon.client.repository import JsonFileReviewRepository, RedisReviewRepository
from salon.models.review_documents import ReplyDocument, ReviewDocument, ReviewStatus


class TestJsonFileReviewRepository:
    @pytest.fixture
    def store_path(self, tmp_path):
        return tmp_path / "store" / "reviews.json"

    @pytest.fixture
    def repository(self, store_path):
        return JsonFileReviewRepository(store_path)

    @pytest.fixture
    def sample_reviews(self):
        return [
            ReviewDocument(
                id=2,
                author="Tom",
                rating=4,
                text="Quick and friendly",
                created_at=datetime(2026, 10, 10, 15, 0, tzinfo=timezone.utc),
                helpful=2,
                replies=[ReplyDocument(author="Salon Owner", text="Thanks Tom!", is_admin=True)],
            ),
            ReviewDocument(
                id=1,
                author="Mai",
                email="mai@example.com",
                rating=5,
                text="Best balayage in town",
                created_at=datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc),
                verified=True,
            ),
        ]

    def test_load_missing_file(self, repository):
        """Test a store that was never written loads as empty."""
        assert repository.load() == []

    def test_save_and_load(self, repository, store_path, sample_reviews):
        """Test the collection survives a save and reload in order."""
        assert repository.save(sample_reviews) is True

        loaded = JsonFileReviewRepository(store_path).load()

        assert loaded == sample_reviews
        assert loaded[0].replies[0].is_admin is True
        assert loaded[1].status == ReviewStatus.APPROVED

    def test_save_replaces_whole_document(self, repository, store_path, sample_reviews):
        """Test each save overwrites the previous collection."""
        repository.save(sample_reviews)
        repository.save(sample_reviews[1:])

        assert [review.id for review in repository.load()] == [1]
        assert [path.name for path in store_path.parent.iterdir()] == ["reviews.json"]

    def test_stored_format(self, repository, store_path, sample_reviews):
        """Test the file holds a plain JSON list."""
        repository.save(sample_reviews)

        with open(store_path, encoding="utf-8") as f:
            raw = json.load(f)

        assert isinstance(raw, list)
        assert raw[1]["author"] == "Mai"
        assert raw[1]["created_at"].startswith("2026-10-01T09:00:00")

    def test_load_corrupt_file(self, repository, store_path):
        """Test unreadable JSON loads as an empty collection."""
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json", encoding="utf-8")

        assert repository.load() == []

    def test_load_invalid_documents(self, repository, store_path):
        """Test documents that fail validation load as an empty collection."""
        store_path.parent.mkdir(parents=True)
        store_path.write_text(json.dumps([{"id": 1, "author": "Mai", "rating": 9, "text": "x"}]), encoding="utf-8")

        assert repository.load() == []

    def test_load_invalid_utf8(self, repository, store_path):
        """Test bytes that are not UTF-8 load as an empty collection."""
        store_path.parent.mkdir(parents=True)
        store_path.write_bytes(b"[\xff\xfe]")

        assert repository.load() == []
        assert len(ReviewAggregationEngine(repository)) == 0

    def test_replace_failure_removes_temp_file(self, repository, store_path, sample_reviews):
        """Test a failed rename leaves neither a temp file nor a store behind."""
        with patch("salon.client.repository.os.replace", side_effect=OSError("disk full")):
            assert repository.save(sample_reviews) is False

        assert list(store_path.parent.iterdir()) == []

    def test_serialization_failure_removes_temp_file(self, repository, store_path, sample_reviews):
        """Test an encoding error is reported and cleans up after itself."""
        repository.save(sample_reviews)

        with patch("salon.client.repository.json.dump", side_effect=TypeError("not serializable")):
            assert repository.save(sample_reviews[1:]) is False

        assert [path.name for path in store_path.parent.iterdir()] == ["reviews.json"]
        assert [review.id for review in repository.load()] == [2, 1]

    def test_save_failure_returns_false(self, tmp_path, sample_reviews):
        """Test a write error is reported instead of raised."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        repository = JsonFileReviewRepository(blocker / "reviews.json")

        assert repository.save(sample_reviews) is False


class TestRedisReviewRepository:
    @pytest.fixture
    def mock_redis(self):
        return MagicMock()

    @pytest.fixture
    def repository(self, mock_redis):
        return RedisReviewRepository("salon:reviews", client=mock_redis)

    def test_load_empty_key(self, repository, mock_redis):
        """Test a missing key loads as empty."""
        mock_redis.get_json.return_value = None

        assert repository.load() == []
        mock_redis.get_json.assert_called_once_with("salon:reviews")

    def test_load(self, repository, mock_redis):
        """Test stored documents are parsed."""
        mock_redis.get_json.return_value = [
            {"id": 1, "author": "Mai", "rating": 5, "text": "Great", "created_at": "2026-10-01T09:00:00"}
        ]

        reviews = repository.load()

        assert reviews[0].author == "Mai"
        assert reviews[0].created_at.tzinfo is not None

    def test_load_unreachable_redis(self, repository, mock_redis):
        """Test a Redis outage loads as an empty collection."""
        mock_redis.get_json.side_effect = ConnectionError("connection refused")

        assert repository.load() == []
        assert len(ReviewAggregationEngine(repository)) == 0

    def test_load_malformed_document(self, repository, mock_redis):
        """Test a stored document that fails validation loads as empty."""
        mock_redis.get_json.return_value = [{"id": 1, "author": "Mai", "rating": 9, "text": "x"}]

        assert repository.load() == []

    def test_save_without_expiry(self, repository, mock_redis):
        """Test the collection is written as one document with no TTL."""
        mock_redis.set_json.return_value = True
        review = ReviewDocument(id=1, author="Mai", rating=5, text="Great")

        assert repository.save([review]) is True

        key, payload = mock_redis.set_json.call_args.args
        assert key == "salon:reviews"
        assert payload[0]["id"] == 1
        assert mock_redis.set_json.call_args.kwargs == {"ttl": None}

    def test_save_failure(self, repository, mock_redis):
        """Test a Redis error is reported instead of raised."""
        mock_redis.set_json.side_effect = Exception("connection refused")

        assert repository.save([]) is False
