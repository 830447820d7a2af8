"""Redis pub/sub implementation of EventPublisher."""

import redis.asyncio as redis

from attune.notifications.models import Notification
from attune.notifications.publisher import EventPublisher
from attune.observability.logging import get_logger

logger = get_logger(__name__)


class RedisEventPublisher(EventPublisher):
    """Publishes notifications as JSON on per-participant session channels.

    Channel: {prefix}:session:{session_id}:participant:{recipient_id}
    """

    def __init__(self, client: redis.Redis, channel_prefix: str = "attune:events") -> None:
        """Initialize the publisher.

        Args:
            client: Redis client instance
            channel_prefix: Prefix for every channel name
        """
        self._client = client
        self._prefix = channel_prefix

    def channel_for(self, notification: Notification) -> str:
        return (
            f"{self._prefix}:session:{notification.session_id}"
            f":participant:{notification.recipient_id}"
        )

    async def publish(self, notification: Notification) -> None:
        """Publish a notification.

        Raises:
            redis.RedisError: If the publish failed
        """
        receivers = await self._client.publish(
            self.channel_for(notification), notification.model_dump_json()
        )
        logger.debug(
            "notification_published",
            event_type=notification.event_type.value,
            event_id=str(notification.event_id),
            receivers=receivers,
        )

    async def close(self) -> None:
        await self._client.aclose()
