"""ReconciliationStore implementations."""

from attune.reconciliation.stores.inmemory import InMemoryReconciliationStore
from attune.reconciliation.stores.redis import RedisReconciliationStore

__all__ = [
    "InMemoryReconciliationStore",
    "RedisReconciliationStore",
]
