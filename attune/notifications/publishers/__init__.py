"""EventPublisher implementations."""

from attune.notifications.publishers.inmemory import InMemoryEventPublisher
from attune.notifications.publishers.redis import RedisEventPublisher

__all__ = [
    "InMemoryEventPublisher",
    "RedisEventPublisher",
]
