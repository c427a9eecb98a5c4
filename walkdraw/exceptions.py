"""Domain errors raised by the CRUD layer and the prompt relay.

Each error carries the HTTP status and machine-readable code the API maps it
to, so handlers never need to know about individual error types.
"""

from typing import Any


class WalkDrawError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInput(WalkDrawError):
    """A required field is missing or has the wrong type."""

    status_code = 400
    error_code = "INVALID_INPUT"


class DuplicateVote(WalkDrawError):
    status_code = 409
    error_code = "DUPLICATE_VOTE"


class NotFound(WalkDrawError):
    status_code = 404
    error_code = "NOT_FOUND"


class Forbidden(WalkDrawError):
    status_code = 403
    error_code = "FORBIDDEN"


class UpstreamError(WalkDrawError):
    """The generative text service failed or timed out."""

    status_code = 502
    error_code = "UPSTREAM_ERROR"


class StoreError(WalkDrawError):
    """Any database failure, connection failures included."""

    status_code = 500
    error_code = "STORE_ERROR"
