"""HTTP client for the review endpoints of the salon API."""

import logging
from typing import Any

import requests

from salon.errors import (
    AuthError,
    AuthorizationError,
    DuplicateError,
    NotFoundError,
    ReviewError,
    ValidationError,
)
from salon.models.review_documents import RatingStatistics

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_MESSAGE = "You have already submitted a review"

_STATUS_ERRORS = {
    401: AuthError,
    403: AuthorizationError,
    404: NotFoundError,
    400: ValidationError,
}


class ReviewApiClient:
    """Thin wrapper around the /comments endpoints.

    No timeout is applied unless one is passed in; callers that give up on
    a request simply stop waiting for it.
    """

    def __init__(self, base_url: str, token: str | None = None, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def close(self):
        self.session.close()

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        url = f"{self.base_url}/comments{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise ReviewError("Review service unavailable") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.ok and body.get("success", True):
            return body

        message = body.get("message") or f"Request failed with status {response.status_code}"
        if message == DUPLICATE_REVIEW_MESSAGE:
            raise DuplicateError(message)
        raise _STATUS_ERRORS.get(response.status_code, ReviewError)(message)

    def get_statistics(self) -> RatingStatistics:
        body = self._request("GET", "/stats")
        return RatingStatistics.model_validate(body.get("data") or {})

    def get_featured(self, limit: int = 3) -> list[dict[str, Any]]:
        return self._request("GET", "/featured", params={"limit": limit}).get("data", [])

    def get_recent(self, limit: int = 5, days: int = 30) -> list[dict[str, Any]]:
        return self._request("GET", "/recent", params={"limit": limit, "days": days}).get("data", [])

    def submit_review(self, rating: int, comment: str) -> dict[str, Any]:
        return self._request("POST", "", json={"rating": rating, "comment": comment}).get("data", {})

    def mark_helpful(self, review_id: int) -> dict[str, Any]:
        return self._request("POST", f"/{review_id}/helpful").get("data", {})
