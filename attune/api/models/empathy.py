"""Request and response models for the empathy exchange endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from attune.reconciliation.models import ExchangeSummary, ShareDraft, ValidationVerdict


class ExpressedContentRequest(BaseModel):
    """Something the caller said about their own feelings."""

    content: str = Field(..., min_length=1, description="Expressed text")


class ShareAttemptRequest(BaseModel):
    """The caller's attempt to describe the subject's experience."""

    subject_id: UUID = Field(..., description="Participant the attempt is about")
    content: str = Field(..., min_length=1, description="Attempt text")


class OfferResponseRequest(BaseModel):
    """The caller's answer to a share offer about the guesser's attempt."""

    guesser_id: UUID = Field(..., description="Participant who wrote the attempt")
    accepted: bool = Field(..., description="Whether the caller will share more")


class ShareContextRequest(BaseModel):
    """Context the caller shares after accepting an offer."""

    guesser_id: UUID = Field(..., description="Participant who wrote the attempt")
    content: str = Field(..., min_length=1, description="Context text")


class ShareDraftRequest(BaseModel):
    """Ask for a suggested message for an open share offer."""

    guesser_id: UUID = Field(..., description="Participant who wrote the attempt")


class ShareDraftResponse(BaseModel):
    """Suggested context, when available."""

    available: bool = Field(..., description="Whether a draft could be produced")
    draft: ShareDraft | None = None


class ValidationFeedbackRequest(BaseModel):
    """The caller's judgment of a revealed attempt about them."""

    guesser_id: UUID = Field(..., description="Participant who wrote the attempt")
    verdict: ValidationVerdict = Field(..., description="accurate, partial or inaccurate")
    note: str | None = Field(default=None, max_length=2000, description="Optional note")


class ValidationFeedbackResponse(BaseModel):
    """Recorded validation feedback."""

    feedback_id: UUID
    verdict: ValidationVerdict
    revision: int
    created_at: datetime


class ExchangeSummaryResponse(BaseModel):
    """Closing summary, when available."""

    available: bool = Field(..., description="Whether a summary could be produced")
    summary: ExchangeSummary | None = None
