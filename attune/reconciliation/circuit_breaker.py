"""Circuit breaker bounding the refine-and-resubmit loop.

Every analysis pass for a direction first claims a slot on the
direction's persisted attempt counter. The first MAX_ANALYSIS_PASSES
claims may run gap analysis; every later claim is told to skip, which
forces the direction to READY.
"""

from dataclasses import dataclass

from attune.observability.logging import get_logger
from attune.observability.metrics import CIRCUIT_BREAKER_TRIPS
from attune.reconciliation.models import Direction
from attune.reconciliation.store import ReconciliationStore

logger = get_logger(__name__)

MAX_ANALYSIS_PASSES = 3


@dataclass(frozen=True)
class BreakerVerdict:
    """Outcome of one circuit breaker check."""

    attempts: int
    should_skip: bool
    claimed: bool = True


class CircuitBreaker:
    """Atomic check-and-increment over the refinement attempt counter."""

    def __init__(
        self,
        store: ReconciliationStore,
        max_passes: int = MAX_ANALYSIS_PASSES,
    ) -> None:
        self._store = store
        self._max_passes = max_passes

    @property
    def max_passes(self) -> int:
        return self._max_passes

    async def check_and_increment(
        self, direction: Direction, revision: int | None = None
    ) -> BreakerVerdict:
        """Claim the next attempt slot for a direction.

        Args:
            direction: Direction about to be analyzed
            revision: Attempt revision being analyzed; a revision that
                already claimed a slot does not claim another

        Returns:
            BreakerVerdict with the attempt number after the call. When
            claimed is False nothing was incremented and the caller lost
            a duplicate-submission race.
        """
        attempts, claimed = await self._store.increment_refinement_attempts(
            direction.key, revision
        )
        should_skip = attempts > self._max_passes

        if claimed and should_skip:
            CIRCUIT_BREAKER_TRIPS.inc()
            logger.info(
                "circuit_breaker_tripped",
                direction=direction.key,
                attempts=attempts,
                max_passes=self._max_passes,
            )
        elif claimed:
            logger.debug(
                "circuit_breaker_slot_claimed",
                direction=direction.key,
                attempts=attempts,
            )

        return BreakerVerdict(attempts=attempts, should_skip=should_skip, claimed=claimed)

    async def attempts(self, direction: Direction) -> int:
        """Current attempt count without claiming a slot."""
        return await self._store.get_refinement_attempts(direction.key)
