"""Tests for ReviewApiClient."""

from unittest.mock import MagicMock

import pytest
import requests

from salon.client.api_client import ReviewApiClient
from salon.errors import (
    AuthError,
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ReviewError,
    ValidationError,
)


def _response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = body if body is not None else {}
    return response


class TestReviewApiClient:
    @pytest.fixture
    def api_client(self):
        client = ReviewApiClient("http://salon.test/api/", token="secret-token")
        client.session = MagicMock()
        return client

    def test_token_sent_as_bearer(self):
        client = ReviewApiClient("http://salon.test/api", token="abc")

        assert client.session.headers["Authorization"] == "Bearer abc"
        client.close()

    def test_no_token_no_header(self):
        client = ReviewApiClient("http://salon.test/api")

        assert "Authorization" not in client.session.headers
        client.close()

    def test_get_statistics(self, api_client):
        """Test the stats envelope is parsed into RatingStatistics."""
        api_client.session.request.return_value = _response(
            body={
                "success": True,
                "data": {
                    "total_reviews": 3,
                    "average_rating": 4.7,
                    "rating_breakdown": {
                        "5": {"count": 2, "percentage": 66.7},
                        "4": {"count": 1, "percentage": 33.3},
                        "3": {"count": 0, "percentage": 0.0},
                        "2": {"count": 0, "percentage": 0.0},
                        "1": {"count": 0, "percentage": 0.0},
                    },
                },
            }
        )

        stats = api_client.get_statistics()

        method, url = api_client.session.request.call_args.args
        assert (method, url) == ("GET", "http://salon.test/api/comments/stats")
        assert stats.total_reviews == 3
        assert stats.rating_breakdown[5].percentage == 66.7

    def test_submit_review(self, api_client):
        api_client.session.request.return_value = _response(201, {"success": True, "data": {"id": 7}})

        result = api_client.submit_review(5, "Lovely colour work")

        assert result == {"id": 7}
        assert api_client.session.request.call_args.kwargs["json"] == {"rating": 5, "comment": "Lovely colour work"}

    def test_duplicate_review(self, api_client):
        """Test the duplicate message maps to DuplicateError."""
        api_client.session.request.return_value = _response(
            400, {"success": False, "message": "You have already submitted a review"}
        )

        with pytest.raises(DuplicateError):
            api_client.submit_review(5, "Lovely colour work")

    @pytest.mark.parametrize(
        "status_code,error",
        [(400, ValidationError), (401, AuthError), (403, AuthorizationError), (404, NotFoundError), (500, ReviewError)],
    )
    def test_error_statuses(self, api_client, status_code, error):
        api_client.session.request.return_value = _response(status_code, {"success": False, "message": "Nope"})

        with pytest.raises(error) as exc_info:
            api_client.mark_helpful(1)

        assert exc_info.value.message == "Nope"

    def test_non_json_error_body(self, api_client):
        response = _response(502)
        response.json.side_effect = ValueError("no json")
        api_client.session.request.return_value = response

        with pytest.raises(ReviewError) as exc_info:
            api_client.get_featured()

        assert "502" in exc_info.value.message

    def test_connection_error(self, api_client):
        """Test network failures surface as ReviewError."""
        api_client.session.request.side_effect = requests.ConnectionError("refused")

        with pytest.raises(ReviewError) as exc_info:
            api_client.get_recent()

        assert exc_info.value.message == "Review service unavailable"
