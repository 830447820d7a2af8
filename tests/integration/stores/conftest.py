"""Pytest fixtures for store integration tests.

Provides Redis fixtures against the server at TEST_REDIS_URL.
Tests skip gracefully when Redis is unavailable.
"""

import os
from collections.abc import AsyncIterator
from uuid import uuid4

import pytest
import pytest_asyncio
import redis.asyncio as redis

from attune.reconciliation.stores import RedisReconciliationStore


@pytest.fixture(scope="session")
def redis_url() -> str:
    """Get Redis URL for tests."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/0")


@pytest_asyncio.fixture
async def redis_client(redis_url: str) -> AsyncIterator[redis.Redis]:
    """Create a Redis client, skipping if the server is unreachable."""
    client = redis.from_url(redis_url, decode_responses=True)
    try:
        await client.ping()
    except (redis.ConnectionError, redis.TimeoutError, OSError):
        await client.aclose()
        pytest.skip("Redis not available")

    yield client
    await client.aclose()


@pytest.fixture
def key_prefix() -> str:
    """Unique key namespace for a single test."""
    return f"test-attune-{uuid4().hex}"


@pytest_asyncio.fixture
async def redis_store(
    redis_client: redis.Redis, key_prefix: str
) -> AsyncIterator[RedisReconciliationStore]:
    """Redis store whose keys are deleted after the test."""
    yield RedisReconciliationStore(redis_client, key_prefix=key_prefix)

    async for key in redis_client.scan_iter(match=f"{key_prefix}:*"):
        await redis_client.delete(key)
