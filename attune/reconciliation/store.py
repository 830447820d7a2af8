"""ReconciliationStore abstract interface."""

from abc import ABC, abstractmethod
from uuid import UUID

from attune.reconciliation.models import (
    DirectionState,
    EmpathyAttempt,
    ReconcilerResult,
    ShareOffer,
    ValidationFeedback,
)


class ReconciliationStore(ABC):
    """Abstract interface for reconciliation persistence.

    Pure data layer: no policy lives here. Everything is keyed by the
    direction key (session#guesser->subject) except expressed content,
    which belongs to a participant rather than a direction.

    The refinement counter, the context-shared guard flag and direction
    compare-and-set must be atomic read-modify-write operations.
    """

    # ------------------------------------------------------------------
    # Direction state
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_direction(self, key: str) -> DirectionState | None:
        """Get the state of a direction."""
        pass

    @abstractmethod
    async def create_direction(self, state: DirectionState) -> bool:
        """Create a direction if it does not exist yet.

        Returns:
            True if this call created it, False if it already existed
        """
        pass

    @abstractmethod
    async def compare_and_set_direction(
        self, state: DirectionState, expected_version: int
    ) -> bool:
        """Replace a direction's state if its stored version matches.

        The caller is responsible for setting state.version to the new
        version (normally expected_version + 1).

        Returns:
            True if the write happened, False if another writer got there first
        """
        pass

    @abstractmethod
    async def list_directions(self, session_id: UUID) -> list[DirectionState]:
        """List all directions of a session."""
        pass

    # ------------------------------------------------------------------
    # Empathy attempts
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_attempt(self, attempt: EmpathyAttempt) -> UUID:
        """Save an attempt revision, returning its ID."""
        pass

    @abstractmethod
    async def get_attempt(self, key: str, revision: int) -> EmpathyAttempt | None:
        """Get one revision of a direction's attempt."""
        pass

    @abstractmethod
    async def list_attempts(self, key: str) -> list[EmpathyAttempt]:
        """List all revisions of a direction's attempt, oldest first."""
        pass

    # ------------------------------------------------------------------
    # Refinement attempt counter
    # ------------------------------------------------------------------

    @abstractmethod
    async def increment_refinement_attempts(
        self, key: str, revision: int | None = None
    ) -> tuple[int, bool]:
        """Atomically create-or-increment the counter for a direction.

        When revision is given and that revision (or a later one) already
        claimed a slot, nothing is incremented.

        Returns:
            Tuple of (attempts after the call, whether a slot was claimed)
        """
        pass

    @abstractmethod
    async def get_refinement_attempts(self, key: str) -> int:
        """Read the counter without modifying it (0 if absent)."""
        pass

    # ------------------------------------------------------------------
    # Context-shared guard flag
    # ------------------------------------------------------------------

    @abstractmethod
    async def mark_context_shared(self, key: str) -> bool:
        """Set the guard flag permanently.

        Returns:
            True if this call flipped it, False if it was already set
        """
        pass

    @abstractmethod
    async def is_context_shared(self, key: str) -> bool:
        """Read the guard flag."""
        pass

    # ------------------------------------------------------------------
    # Reconciler results
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_result(self, result: ReconcilerResult) -> UUID:
        """Save a result as the current one, superseding the previous one."""
        pass

    @abstractmethod
    async def get_current_result(self, key: str) -> ReconcilerResult | None:
        """Get the latest result for a direction."""
        pass

    @abstractmethod
    async def list_results(self, key: str) -> list[ReconcilerResult]:
        """List all results for a direction, oldest first."""
        pass

    # ------------------------------------------------------------------
    # Share offers
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_offer(self, offer: ShareOffer) -> UUID:
        """Create or update a share offer."""
        pass

    @abstractmethod
    async def get_offer(self, offer_id: UUID) -> ShareOffer | None:
        """Get a share offer by ID."""
        pass

    @abstractmethod
    async def list_offers(self, key: str) -> list[ShareOffer]:
        """List all offers made for a direction, oldest first."""
        pass

    # ------------------------------------------------------------------
    # Subject expressed content
    # ------------------------------------------------------------------

    @abstractmethod
    async def append_expressed_content(
        self, session_id: UUID, participant_id: UUID, content: str
    ) -> None:
        """Append something a participant expressed about themselves."""
        pass

    @abstractmethod
    async def get_expressed_content(
        self, session_id: UUID, participant_id: UUID
    ) -> list[str]:
        """Get everything a participant expressed, oldest first."""
        pass

    # ------------------------------------------------------------------
    # Validation feedback
    # ------------------------------------------------------------------

    @abstractmethod
    async def save_validation_feedback(self, feedback: ValidationFeedback) -> UUID:
        """Record the subject's judgment of a revealed attempt."""
        pass

    @abstractmethod
    async def list_validation_feedback(self, key: str) -> list[ValidationFeedback]:
        """List feedback recorded for a direction, oldest first."""
        pass
