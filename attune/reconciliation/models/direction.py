"""Direction identity and authoritative per-direction state."""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from attune.reconciliation.models.enums import DirectionStatus, ReadyReason


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class Direction(BaseModel):
    """An ordered (guesser, subject) pair scoped to one session.

    The two directions of a session share nothing but the session id.
    """

    model_config = ConfigDict(frozen=True)

    session_id: UUID = Field(..., description="Owning session")
    guesser_id: UUID = Field(..., description="Participant writing the attempt")
    subject_id: UUID = Field(..., description="Participant being understood")

    @model_validator(mode="after")
    def _distinct_participants(self) -> "Direction":
        if self.guesser_id == self.subject_id:
            raise ValueError("guesser and subject must be different participants")
        return self

    @property
    def key(self) -> str:
        """Stable composite key: session#guesser->subject."""
        return f"{self.session_id}#{self.guesser_id}->{self.subject_id}"

    def reversed(self) -> "Direction":
        """The opposite direction of the same session."""
        return Direction(
            session_id=self.session_id,
            guesser_id=self.subject_id,
            subject_id=self.guesser_id,
        )

    @classmethod
    def from_key(cls, key: str) -> "Direction":
        """Parse a composite key produced by `key`."""
        session_part, _, pair = key.partition("#")
        guesser_part, _, subject_part = pair.partition("->")
        if not (session_part and guesser_part and subject_part):
            raise ValueError(f"Malformed direction key: {key}")
        return cls(
            session_id=UUID(session_part),
            guesser_id=UUID(guesser_part),
            subject_id=UUID(subject_part),
        )


class DirectionState(BaseModel):
    """Authoritative status of one direction.

    Writes go through compare-and-set on `version`; every successful
    write increments it by one.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    direction: Direction = Field(..., description="Direction this state belongs to")
    status: DirectionStatus = Field(
        default=DirectionStatus.DRAFTING, description="Current status"
    )
    revision: int = Field(default=0, ge=0, description="Latest attempt revision")
    open_offer_id: UUID | None = Field(
        default=None, description="Share offer awaiting a response or context"
    )
    ready_reason: ReadyReason | None = Field(
        default=None, description="Why the direction became ready (audit only)"
    )
    version: int = Field(default=0, ge=0, description="Optimistic concurrency version")
    created_at: datetime = Field(default_factory=utc_now, description="Creation time")
    updated_at: datetime = Field(default_factory=utc_now, description="Last write")

    @property
    def key(self) -> str:
        """Composite key of the underlying direction."""
        return self.direction.key
