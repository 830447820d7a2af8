"""Notification channel configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

PublisherBackend = Literal["inmemory", "redis"]


class NotificationsConfig(BaseModel):
    """Real-time event publisher configuration."""

    backend: PublisherBackend = Field(
        default="inmemory",
        description="Publisher backend",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis URL for pub/sub (defaults to the storage URL)",
    )
    channel_prefix: str = Field(
        default="attune:events",
        description="Prefix for per-session pub/sub channels",
    )
