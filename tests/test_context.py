"""Tests for AppContext."""

from unittest.mock import MagicMock

import pytest

from salon.client.context import AppContext
from salon.client.repository import InMemoryReviewRepository, JsonFileReviewRepository, RedisReviewRepository
from salon.errors import ReviewError
from salon.models.review_documents import RatingStatistics


class TestAppContext:
    @pytest.fixture
    def mock_api_client(self):
        return MagicMock()

    @pytest.fixture
    def context(self, mock_api_client):
        return AppContext(InMemoryReviewRepository(), api_client=mock_api_client)

    def test_engine_requires_open(self, context):
        with pytest.raises(RuntimeError):
            context.engine

        assert context.is_open is False

    def test_context_manager(self, context, mock_api_client):
        """Test the engine lives exactly as long as the with block."""
        with context as ctx:
            ctx.engine.submit("Mai", "Great", 5)
            assert ctx.is_open is True

        assert context.is_open is False
        mock_api_client.close.assert_called_once()

    def test_close_drops_subscribers(self, context):
        events = []
        context.open()
        engine = context.engine
        engine.subscribe(lambda event, payload: events.append(event))

        context.close()
        engine.submit("Mai", "Great", 5)

        assert events == []

    def test_reopen_reloads_from_repository(self, context):
        with context:
            context.engine.submit("Mai", "Great", 5)

        with context:
            assert len(context.engine) == 1

    def test_remote_statistics(self, context, mock_api_client):
        remote = RatingStatistics(total_reviews=12, average_rating=4.4)
        mock_api_client.get_statistics.return_value = remote

        with context:
            assert context.remote_statistics() == remote

    def test_remote_statistics_without_client(self):
        with AppContext(InMemoryReviewRepository()) as context:
            context.engine.submit("Mai", "Great", 4)

            assert context.remote_statistics().total_reviews == 1

    def test_statistics_falls_back_to_local(self, context, mock_api_client):
        """Test an unreachable server falls back to the local summary."""
        mock_api_client.get_statistics.side_effect = ReviewError("Review service unavailable")

        with context:
            context.engine.submit("Mai", "Great", 4)
            stats = context.statistics(prefer_remote=True)

        assert stats.total_reviews == 1
        assert stats.average_rating == 4.0

    def test_statistics_local_by_default(self, context, mock_api_client):
        with context:
            context.statistics()

        mock_api_client.get_statistics.assert_not_called()

    def test_from_config_file_store(self):
        context = AppContext.from_config(token="abc", store="file")

        assert isinstance(context.repository, JsonFileReviewRepository)
        assert context.api_client.session.headers["Authorization"] == "Bearer abc"
        context.close()

    def test_from_config_redis_store(self):
        context = AppContext.from_config(store="redis")

        assert isinstance(context.repository, RedisReviewRepository)
        assert context.repository.key == "salon:reviews"
        context.close()
