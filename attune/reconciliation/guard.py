"""Context share guard.

A per-direction flag that flips once, when the subject shares context
through an accepted offer, and never reverts.
"""

from attune.observability.logging import get_logger
from attune.reconciliation.exceptions import ReconciliationInvariantError
from attune.reconciliation.models import Action, Direction
from attune.reconciliation.store import ReconciliationStore

logger = get_logger(__name__)


class ContextShareGuard:
    """Tracks whether context was already shared for a direction."""

    def __init__(self, store: ReconciliationStore) -> None:
        self._store = store

    async def is_set(self, direction: Direction) -> bool:
        return await self._store.is_context_shared(direction.key)

    async def mark_shared(self, direction: Direction) -> bool:
        """Flip the flag for a direction.

        Must happen before the direction leaves CONTEXT_DRAFTING, so that
        any pass analyzing a resubmission already sees the flag. Marking
        an already set flag is a no-op.

        Returns:
            True if this call flipped the flag
        """
        flipped = await self._store.mark_context_shared(direction.key)
        if flipped:
            logger.info("context_share_guard_set", direction=direction.key)
        return flipped

    async def assert_can_offer(self, direction: Direction, action: Action) -> None:
        """Refuse to open an offer on a direction whose flag is set.

        Raises:
            ReconciliationInvariantError: If action is an offer and the flag is set
        """
        if action.is_offer and await self.is_set(direction):
            raise ReconciliationInvariantError(
                f"{action.value} requested after context was shared for {direction.key}"
            )
