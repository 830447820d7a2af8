"""Reconciliation: the per-direction empathy exchange.

Each session has two independent directions (A understanding B, and B
understanding A). For each one the engine analyzes the guesser's
attempt, may invite the subject to share more context, and guarantees
the direction reaches READY within a bounded number of passes.

Import the engine from attune.reconciliation.engine and stores from
attune.reconciliation.stores.
"""

from attune.reconciliation.exceptions import (
    ContentRequiredError,
    DirectionNotFoundError,
    GapAnalysisUnavailableError,
    InvalidDirectionError,
    InvalidTransitionError,
    NoPendingOfferError,
    ReconciliationError,
    ReconciliationInvariantError,
    StoreConnectionError,
)

__all__ = [
    "ContentRequiredError",
    "DirectionNotFoundError",
    "GapAnalysisUnavailableError",
    "InvalidDirectionError",
    "InvalidTransitionError",
    "NoPendingOfferError",
    "ReconciliationError",
    "ReconciliationInvariantError",
    "StoreConnectionError",
]
