"""Share offers made to the subject of a direction."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from attune.reconciliation.models.direction import Direction, utc_now
from attune.reconciliation.models.enums import OfferStrength, ShareOfferStatus


class ShareOffer(BaseModel):
    """Invitation for the subject to add context for the guesser.

    At most one offer per direction is open at a time; the open offer id
    lives on the DirectionState.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    offer_id: UUID = Field(default_factory=uuid4, description="Unique identifier")
    direction: Direction = Field(..., description="Direction the offer belongs to")
    revision: int = Field(..., ge=1, description="Attempt revision that prompted it")
    strength: OfferStrength = Field(..., description="Optional or recommended")
    status: ShareOfferStatus = Field(
        default=ShareOfferStatus.OFFERED, description="Subject's response"
    )
    suggested_share_focus: str | None = Field(
        default=None, description="What the subject might add"
    )
    message: str = Field(..., description="Invitation shown to the subject")
    shared_content: str | None = Field(default=None, description="Context the subject shared")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    responded_at: datetime | None = Field(default=None, description="When answered")
    shared_at: datetime | None = Field(default=None, description="When context was shared")
