"""Error kinds raised by the review engine and the review service."""


class ReviewError(Exception):
    """Base class for errors that are surfaced to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReviewError):
    """Missing or out-of-range input."""

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class DuplicateError(ReviewError):
    """A user tried to submit a second review."""

    status_code = 400


class NotFoundError(ReviewError):
    status_code = 404


class InvalidStatusError(ReviewError):
    """Moderation target is not one of the known statuses."""

    status_code = 400


class AuthError(ReviewError):
    """Missing, expired or invalid credentials."""

    status_code = 401


class AuthorizationError(ReviewError):
    """Authenticated, but not allowed to touch the resource."""

    status_code = 403
