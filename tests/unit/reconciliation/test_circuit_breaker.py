"""Unit tests for CircuitBreaker."""

import asyncio

import pytest

from attune.reconciliation.circuit_breaker import (
    MAX_ANALYSIS_PASSES,
    BreakerVerdict,
    CircuitBreaker,
)
from attune.reconciliation.stores import InMemoryReconciliationStore
from tests.factories import DirectionFactory


@pytest.fixture
def store() -> InMemoryReconciliationStore:
    return InMemoryReconciliationStore()


@pytest.fixture
def breaker(store: InMemoryReconciliationStore) -> CircuitBreaker:
    return CircuitBreaker(store)


class TestCheckAndIncrement:
    """Tests for check_and_increment."""

    async def test_first_pass_runs(self, breaker: CircuitBreaker) -> None:
        """First claim is attempt 1 and does not skip."""
        verdict = await breaker.check_and_increment(DirectionFactory.create(), revision=1)

        assert verdict == BreakerVerdict(attempts=1, should_skip=False, claimed=True)

    async def test_trips_after_max_passes(self, breaker: CircuitBreaker) -> None:
        """The pass after MAX_ANALYSIS_PASSES is told to skip."""
        direction = DirectionFactory.create()
        verdicts = [
            await breaker.check_and_increment(direction, revision=r)
            for r in range(1, MAX_ANALYSIS_PASSES + 2)
        ]

        assert [v.should_skip for v in verdicts] == [False, False, False, True]
        assert verdicts[-1].attempts == MAX_ANALYSIS_PASSES + 1

    async def test_same_revision_claims_once(self, breaker: CircuitBreaker) -> None:
        """A revision that already claimed a slot does not claim another."""
        direction = DirectionFactory.create()
        first = await breaker.check_and_increment(direction, revision=1)
        second = await breaker.check_and_increment(direction, revision=1)

        assert first.claimed
        assert not second.claimed
        assert second.attempts == 1
        assert await breaker.attempts(direction) == 1

    async def test_concurrent_claims_for_one_revision(
        self, breaker: CircuitBreaker
    ) -> None:
        """Only one of many concurrent claims for a revision wins."""
        direction = DirectionFactory.create()
        verdicts = await asyncio.gather(
            *[breaker.check_and_increment(direction, revision=1) for _ in range(10)]
        )

        assert sum(v.claimed for v in verdicts) == 1
        assert await breaker.attempts(direction) == 1

    async def test_directions_count_independently(self, breaker: CircuitBreaker) -> None:
        """Each direction has its own counter."""
        direction = DirectionFactory.create()
        reverse = direction.reversed()

        for revision in range(1, 4):
            await breaker.check_and_increment(direction, revision=revision)

        verdict = await breaker.check_and_increment(reverse, revision=1)
        assert verdict.attempts == 1
        assert not verdict.should_skip

    async def test_custom_max_passes(self, store: InMemoryReconciliationStore) -> None:
        """max_passes changes where the breaker trips."""
        breaker = CircuitBreaker(store, max_passes=1)
        direction = DirectionFactory.create()

        await breaker.check_and_increment(direction, revision=1)
        verdict = await breaker.check_and_increment(direction, revision=2)

        assert verdict.should_skip
        assert breaker.max_passes == 1

    async def test_attempts_without_claim(self, breaker: CircuitBreaker) -> None:
        """attempts() reads 0 for an untouched direction."""
        assert await breaker.attempts(DirectionFactory.create()) == 0
