"""Storage backend configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

BackendType = Literal["inmemory", "redis"]


class StorageConfig(BaseModel):
    """Reconciliation store configuration.

    The in-memory backend loses the refinement counters on restart and is
    only meant for development and tests.
    """

    backend: BackendType = Field(
        default="inmemory",
        description="Backend type",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    key_prefix: str = Field(
        default="attune",
        description="Prefix for all Redis keys",
    )
