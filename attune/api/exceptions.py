"""API exception hierarchy for consistent error handling.

All API exceptions inherit from AttuneAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses. Domain errors raised by
the reconciliation engine are translated with from_domain_error.
"""

from attune.api.models.errors import ErrorCode
from attune.reconciliation.exceptions import (
    ContentRequiredError,
    DirectionNotFoundError,
    InvalidDirectionError,
    InvalidTransitionError,
    NoPendingOfferError,
    ReconciliationError,
    StoreConnectionError,
)


class AttuneAPIError(Exception):
    """Base exception for all API errors."""

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(AttuneAPIError):
    """Raised when a request is malformed or names an impossible direction."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class ExchangeNotFoundError(AttuneAPIError):
    """Raised when the direction has no shared attempt yet."""

    status_code = 404
    error_code = ErrorCode.DIRECTION_NOT_FOUND


class TransitionConflictError(AttuneAPIError):
    """Raised when the operation does not fit the direction's state."""

    status_code = 409
    error_code = ErrorCode.INVALID_TRANSITION

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class NoOpenOfferError(AttuneAPIError):
    """Raised when responding to or acting on an offer that is not open."""

    status_code = 409
    error_code = ErrorCode.NO_PENDING_OFFER


class StoreUnavailableError(AttuneAPIError):
    """Raised when the store cannot be reached."""

    status_code = 503
    error_code = ErrorCode.STORE_UNAVAILABLE


def from_domain_error(exc: ReconciliationError | StoreConnectionError) -> AttuneAPIError:
    """Translate an engine error into its API error."""
    if isinstance(exc, StoreConnectionError):
        return StoreUnavailableError("The exchange is temporarily unavailable")
    if isinstance(exc, DirectionNotFoundError):
        return ExchangeNotFoundError(exc.message)
    if isinstance(exc, InvalidTransitionError):
        return TransitionConflictError(exc.message, status=exc.status)
    if isinstance(exc, NoPendingOfferError):
        return NoOpenOfferError(exc.message)
    if isinstance(exc, (InvalidDirectionError, ContentRequiredError)):
        return InvalidRequestError(exc.message)
    return AttuneAPIError(exc.message)
