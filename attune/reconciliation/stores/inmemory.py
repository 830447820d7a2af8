"""In-memory implementation of ReconciliationStore."""

from collections import defaultdict
from uuid import UUID

from attune.reconciliation.models import (
    DirectionState,
    EmpathyAttempt,
    ReconcilerResult,
    ShareOffer,
    ValidationFeedback,
    utc_now,
)
from attune.reconciliation.store import ReconciliationStore


class InMemoryReconciliationStore(ReconciliationStore):
    """In-memory implementation of ReconciliationStore for testing and development.

    Atomic operations never await between their read and their write, so
    they cannot interleave on a single event loop. Records are copied on
    the way in and out so callers cannot mutate stored state.
    Not suitable for production use: counters do not survive a restart.
    """

    def __init__(self) -> None:
        """Initialize empty storage."""
        self._directions: dict[str, DirectionState] = {}
        self._attempts: dict[str, dict[int, EmpathyAttempt]] = defaultdict(dict)
        self._counters: dict[str, int] = {}
        self._claimed_revisions: dict[str, int] = {}
        self._context_shared: set[str] = set()
        self._results: dict[str, list[ReconcilerResult]] = defaultdict(list)
        self._offers: dict[UUID, ShareOffer] = {}
        self._offers_by_direction: dict[str, list[UUID]] = defaultdict(list)
        self._expressed: dict[tuple[UUID, UUID], list[str]] = defaultdict(list)
        self._feedback: dict[str, list[ValidationFeedback]] = defaultdict(list)

    # Direction state

    async def get_direction(self, key: str) -> DirectionState | None:
        """Get the state of a direction."""
        state = self._directions.get(key)
        return state.model_copy(deep=True) if state else None

    async def create_direction(self, state: DirectionState) -> bool:
        """Create a direction if it does not exist yet."""
        if state.key in self._directions:
            return False
        self._directions[state.key] = state.model_copy(deep=True)
        return True

    async def compare_and_set_direction(
        self, state: DirectionState, expected_version: int
    ) -> bool:
        """Replace a direction's state if its stored version matches."""
        current = self._directions.get(state.key)
        if current is None or current.version != expected_version:
            return False
        self._directions[state.key] = state.model_copy(deep=True)
        return True

    async def list_directions(self, session_id: UUID) -> list[DirectionState]:
        """List all directions of a session."""
        return [
            state.model_copy(deep=True)
            for state in self._directions.values()
            if state.direction.session_id == session_id
        ]

    # Empathy attempts

    async def save_attempt(self, attempt: EmpathyAttempt) -> UUID:
        """Save an attempt revision, returning its ID."""
        self._attempts[attempt.direction.key][attempt.revision] = attempt.model_copy(
            deep=True
        )
        return attempt.attempt_id

    async def get_attempt(self, key: str, revision: int) -> EmpathyAttempt | None:
        """Get one revision of a direction's attempt."""
        attempt = self._attempts.get(key, {}).get(revision)
        return attempt.model_copy(deep=True) if attempt else None

    async def list_attempts(self, key: str) -> list[EmpathyAttempt]:
        """List all revisions of a direction's attempt, oldest first."""
        revisions = self._attempts.get(key, {})
        return [revisions[r].model_copy(deep=True) for r in sorted(revisions)]

    # Refinement attempt counter

    async def increment_refinement_attempts(
        self, key: str, revision: int | None = None
    ) -> tuple[int, bool]:
        """Atomically create-or-increment the counter for a direction."""
        current = self._counters.get(key, 0)
        if revision is not None and self._claimed_revisions.get(key, 0) >= revision:
            return current, False

        self._counters[key] = current + 1
        if revision is not None:
            self._claimed_revisions[key] = revision
        return current + 1, True

    async def get_refinement_attempts(self, key: str) -> int:
        """Read the counter without modifying it (0 if absent)."""
        return self._counters.get(key, 0)

    # Context-shared guard flag

    async def mark_context_shared(self, key: str) -> bool:
        """Set the guard flag permanently."""
        if key in self._context_shared:
            return False
        self._context_shared.add(key)
        return True

    async def is_context_shared(self, key: str) -> bool:
        """Read the guard flag."""
        return key in self._context_shared

    # Reconciler results

    async def save_result(self, result: ReconcilerResult) -> UUID:
        """Save a result as the current one, superseding the previous one."""
        history = self._results[result.direction.key]
        if history and history[-1].superseded_at is None:
            history[-1].superseded_at = utc_now()
        history.append(result.model_copy(deep=True))
        return result.result_id

    async def get_current_result(self, key: str) -> ReconcilerResult | None:
        """Get the latest result for a direction."""
        history = self._results.get(key)
        return history[-1].model_copy(deep=True) if history else None

    async def list_results(self, key: str) -> list[ReconcilerResult]:
        """List all results for a direction, oldest first."""
        return [r.model_copy(deep=True) for r in self._results.get(key, [])]

    # Share offers

    async def save_offer(self, offer: ShareOffer) -> UUID:
        """Create or update a share offer."""
        if offer.offer_id not in self._offers:
            self._offers_by_direction[offer.direction.key].append(offer.offer_id)
        self._offers[offer.offer_id] = offer.model_copy(deep=True)
        return offer.offer_id

    async def get_offer(self, offer_id: UUID) -> ShareOffer | None:
        """Get a share offer by ID."""
        offer = self._offers.get(offer_id)
        return offer.model_copy(deep=True) if offer else None

    async def list_offers(self, key: str) -> list[ShareOffer]:
        """List all offers made for a direction, oldest first."""
        return [
            self._offers[offer_id].model_copy(deep=True)
            for offer_id in self._offers_by_direction.get(key, [])
        ]

    # Subject expressed content

    async def append_expressed_content(
        self, session_id: UUID, participant_id: UUID, content: str
    ) -> None:
        """Append something a participant expressed about themselves."""
        self._expressed[(session_id, participant_id)].append(content)

    async def get_expressed_content(
        self, session_id: UUID, participant_id: UUID
    ) -> list[str]:
        """Get everything a participant expressed, oldest first."""
        return list(self._expressed.get((session_id, participant_id), []))

    # Validation feedback

    async def save_validation_feedback(self, feedback: ValidationFeedback) -> UUID:
        """Record the subject's judgment of a revealed attempt."""
        self._feedback[feedback.direction.key].append(feedback.model_copy(deep=True))
        return feedback.feedback_id

    async def list_validation_feedback(self, key: str) -> list[ValidationFeedback]:
        """List feedback recorded for a direction, oldest first."""
        return [f.model_copy(deep=True) for f in self._feedback.get(key, [])]
