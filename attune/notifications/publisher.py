"""EventPublisher abstract interface."""

from abc import ABC, abstractmethod

from attune.notifications.models import Notification


class EventPublisher(ABC):
    """Fire-and-forget delivery of notifications to participants' clients."""

    @abstractmethod
    async def publish(self, notification: Notification) -> None:
        """Deliver one notification."""
        pass

    async def close(self) -> None:
        """Release any connection held by the publisher."""
        return None
