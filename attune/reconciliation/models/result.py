"""Gap analysis verdicts and persisted reconciler results."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from attune.reconciliation.models.direction import Direction, utc_now
from attune.reconciliation.models.enums import Action, GapSeverity


class AbstractGuidance(BaseModel):
    """Refinement hint for the guesser.

    Names an area to reflect on without quoting anything the subject said.
    """

    area_hint: str | None = Field(default=None, description="e.g. 'work and effort'")
    guidance_type: str | None = Field(
        default=None, description="e.g. 'explore_deeper_feelings'"
    )
    prompt_seed: str | None = Field(
        default=None, description="e.g. 'what might be underneath'"
    )


class GapAnalysis(BaseModel):
    """Normalized output of the gap-analysis service."""

    severity: GapSeverity = Field(..., description="How far the attempt diverges")
    suggested_share_focus: str | None = Field(
        default=None, description="What the subject might add"
    )
    alignment_score: int | None = Field(
        default=None, ge=0, le=100, description="0-100 alignment"
    )
    alignment_summary: str | None = Field(default=None, description="What was understood")
    correctly_identified: list[str] = Field(
        default_factory=list, description="Feelings/needs the guesser got right"
    )
    gap_summary: str | None = Field(default=None, description="What was missed")
    missed_feelings: list[str] = Field(default_factory=list, description="Missed feelings")
    misattributions: list[str] = Field(
        default_factory=list, description="Incorrect assumptions"
    )
    most_important_gap: str | None = Field(
        default=None, description="Single most important missed point"
    )
    rationale: str | None = Field(default=None, description="Why this verdict")
    guidance: AbstractGuidance | None = Field(
        default=None, description="Abstract refinement guidance for the guesser"
    )


class ReconcilerResult(BaseModel):
    """Verdict of one analysis pass for a direction.

    Passes skipped by the circuit breaker or failed open carry no analysis.
    """

    result_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    direction: Direction = Field(..., description="Direction analyzed")
    revision: int = Field(..., ge=1, description="Attempt revision analyzed")
    attempt_number: int = Field(..., ge=1, description="Circuit breaker attempt number")
    action: Action = Field(..., description="Interpreted action")
    severity: GapSeverity | None = Field(default=None, description="Gap severity")
    suggested_share_focus: str | None = Field(
        default=None, description="What the subject might add"
    )
    analysis: GapAnalysis | None = Field(default=None, description="Full analysis")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    superseded_at: datetime | None = Field(
        default=None, description="Set when a newer result replaces this one"
    )
