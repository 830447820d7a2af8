"""Empathy attempts and the subject's validation feedback."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from attune.reconciliation.models.direction import Direction, utc_now
from attune.reconciliation.models.enums import AttemptStatus, ValidationVerdict


class EmpathyAttempt(BaseModel):
    """One revision of a guesser's interpretation of the subject.

    Shared revisions are never edited; a refinement is a new revision.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    attempt_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    direction: Direction = Field(..., description="Direction the attempt belongs to")
    revision: int = Field(..., ge=1, description="Monotonic revision number")
    content: str = Field(..., min_length=1, description="Attempt text")
    status: AttemptStatus = Field(
        default=AttemptStatus.SHARED, description="Attempt lifecycle status"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    shared_at: datetime | None = Field(default=None, description="When shared")
    revealed_at: datetime | None = Field(default=None, description="When revealed")


class ValidationFeedback(BaseModel):
    """Subject's judgment of a revealed attempt."""

    feedback_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    direction: Direction = Field(..., description="Direction judged")
    revision: int = Field(..., ge=1, description="Attempt revision judged")
    verdict: ValidationVerdict = Field(..., description="Subject's verdict")
    note: str | None = Field(default=None, description="Optional free-text note")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
