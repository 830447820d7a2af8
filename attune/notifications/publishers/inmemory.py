"""In-memory implementation of EventPublisher."""

from uuid import UUID

from attune.notifications.models import EventType, Notification
from attune.notifications.publisher import EventPublisher


class InMemoryEventPublisher(EventPublisher):
    """Records published notifications for testing and development."""

    def __init__(self) -> None:
        self.events: list[Notification] = []

    async def publish(self, notification: Notification) -> None:
        self.events.append(notification)

    def for_recipient(self, recipient_id: UUID) -> list[Notification]:
        """Notifications addressed to one participant, in publish order."""
        return [e for e in self.events if e.recipient_id == recipient_id]

    def of_type(self, event_type: EventType) -> list[Notification]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        self.events.clear()
