"""API request and response models."""

from attune.api.models.empathy import (
    ExchangeSummaryResponse,
    ExpressedContentRequest,
    OfferResponseRequest,
    ShareAttemptRequest,
    ShareContextRequest,
    ShareDraftRequest,
    ShareDraftResponse,
    ValidationFeedbackRequest,
    ValidationFeedbackResponse,
)
from attune.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from attune.api.models.health import ComponentHealth, HealthResponse

__all__ = [
    "ComponentHealth",
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "ExchangeSummaryResponse",
    "ExpressedContentRequest",
    "HealthResponse",
    "OfferResponseRequest",
    "ShareAttemptRequest",
    "ShareContextRequest",
    "ShareDraftRequest",
    "ShareDraftResponse",
    "ValidationFeedbackRequest",
    "ValidationFeedbackResponse",
]
