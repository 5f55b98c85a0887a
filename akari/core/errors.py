"""
Domain errors shared by all services.

Each error carries the HTTP status it maps to; the handler registered in
`akari.main` renders them as `{"reason": ...}`.
"""

from fastapi import status


class AkariError(Exception):
    """Base exception for domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFoundError(AkariError):
    """Entity absent, or not owned by the caller."""
    status_code = status.HTTP_404_NOT_FOUND


class InvalidStateError(AkariError):
    """Entity is in a state that forbids the operation."""
    status_code = status.HTTP_409_CONFLICT


class InvalidArgumentError(AkariError):
    """Malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AkariError):
    """Missing or invalid caller identity."""
    status_code = status.HTTP_401_UNAUTHORIZED


class InternalError(AkariError):
    """Unexpected persistence failure."""
    pass
