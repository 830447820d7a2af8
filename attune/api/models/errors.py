"""Error response models for consistent API error handling."""

from enum import Enum

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    INVALID_REQUEST = "INVALID_REQUEST"
    """Request validation failed (malformed JSON, missing fields, empty text)."""

    DIRECTION_NOT_FOUND = "DIRECTION_NOT_FOUND"
    """No attempt has been shared for the requested direction."""

    INVALID_TRANSITION = "INVALID_TRANSITION"
    """The operation is not allowed in the direction's current state."""

    NO_PENDING_OFFER = "NO_PENDING_OFFER"
    """There is no open share offer for the direction."""

    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    """The reconciliation store could not be reached."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""


class ErrorDetail(BaseModel):
    """Field-level error information for validation failures."""

    field: str | None = None
    """The field that caused the error, if applicable."""

    message: str
    """Human-readable error description."""


class ErrorBody(BaseModel):
    """Error body content for API error responses."""

    code: ErrorCode
    """Machine-readable error code."""

    message: str
    """Human-readable error message."""

    details: list[ErrorDetail] | None = None
    """Additional error details for validation failures."""

    status: str | None = None
    """Direction status when the error is an invalid transition."""


class ErrorResponse(BaseModel):
    """Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "NO_PENDING_OFFER",
                "message": "There is no open share offer to respond to"
            }
        }
    """

    error: ErrorBody
