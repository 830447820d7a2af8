"""Real-time notifications for the empathy exchange."""

from attune.notifications.models import EventType, Notification
from attune.notifications.publisher import EventPublisher
from attune.notifications.publishers import InMemoryEventPublisher, RedisEventPublisher

__all__ = [
    "EventPublisher",
    "EventType",
    "InMemoryEventPublisher",
    "Notification",
    "RedisEventPublisher",
]
