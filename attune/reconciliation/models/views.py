"""Participant-facing projections of direction state.

A guesser only ever receives a GuesserView of their own direction. It is
built from public fields alone, so a declined offer and a clean reveal
produce the same view.
"""

from uuid import UUID

from pydantic import BaseModel, Field

from attune.reconciliation.models.direction import Direction
from attune.reconciliation.models.enums import (
    DirectionStatus,
    GuesserStatus,
    OfferStrength,
    ShareOfferStatus,
    ValidationVerdict,
)
from attune.reconciliation.models.result import AbstractGuidance


class GuesserView(BaseModel):
    """The guesser's view of their own attempt."""

    direction: Direction
    status: GuesserStatus = Field(..., description="Status as the guesser sees it")
    revision: int = Field(default=0, description="Latest attempt revision")
    attempt_content: str | None = Field(default=None, description="Latest attempt text")
    shared_context: str | None = Field(
        default=None, description="Context the subject chose to share"
    )
    refinement_guidance: AbstractGuidance | None = Field(
        default=None, description="Abstract hint while a refinement is available"
    )
    moved_forward: bool = Field(
        default=False, description="Exchange moved on after the pass budget was used"
    )


class SubjectView(BaseModel):
    """The subject's view of the partner's attempt about them."""

    direction: Direction
    status: DirectionStatus
    revision: int = 0
    revealed_content: str | None = Field(
        default=None, description="Partner's attempt once revealed"
    )
    validation_verdict: ValidationVerdict | None = Field(
        default=None, description="Feedback already given on the revealed attempt"
    )


class PendingOfferView(BaseModel):
    """A share offer addressed to the viewing participant."""

    offer_id: UUID
    direction: Direction
    strength: OfferStrength
    status: ShareOfferStatus
    message: str
    suggested_share_focus: str | None = None


class ExchangeStatus(BaseModel):
    """Everything one participant may see about a session's exchange."""

    session_id: UUID
    participant_id: UUID
    my_attempt: GuesserView | None = None
    partner_attempt: SubjectView | None = None
    pending_offer: PendingOfferView | None = None
    ready_to_proceed: bool = False


class ExchangeSummary(BaseModel):
    """Closing summary once both directions are ready."""

    summary: str = Field(..., description="How the exchange went overall")
    highlights: list[str] = Field(default_factory=list, description="Key moments")
    next_step: str | None = Field(default=None, description="Framing for what comes next")


class ShareDraft(BaseModel):
    """Suggested context for the subject to review before sharing.

    Only ever returned to the subject; nothing is shared until they
    submit context themselves.
    """

    offer_id: UUID
    suggested_share_focus: str
    draft: str = Field(..., description="First-person message the subject could share")
