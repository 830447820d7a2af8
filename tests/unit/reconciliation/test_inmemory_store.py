"""Unit tests for InMemoryReconciliationStore."""

import asyncio
from uuid import uuid4

import pytest

from attune.reconciliation.models import (
    Action,
    DirectionStatus,
    ReconcilerResult,
    ShareOfferStatus,
    ValidationFeedback,
    ValidationVerdict,
)
from attune.reconciliation.stores import InMemoryReconciliationStore
from tests.factories import (
    DirectionFactory,
    DirectionStateFactory,
    EmpathyAttemptFactory,
    ShareOfferFactory,
)


@pytest.fixture
def store() -> InMemoryReconciliationStore:
    return InMemoryReconciliationStore()


class TestDirections:
    """Tests for direction state operations."""

    async def test_create_and_get(self, store: InMemoryReconciliationStore) -> None:
        state = DirectionStateFactory.create()

        assert await store.create_direction(state)
        retrieved = await store.get_direction(state.key)

        assert retrieved == state

    async def test_create_is_idempotent(self, store: InMemoryReconciliationStore) -> None:
        state = DirectionStateFactory.create()
        await store.create_direction(state)

        assert not await store.create_direction(DirectionStateFactory.create(
            direction=state.direction, status=DirectionStatus.READY
        ))
        retrieved = await store.get_direction(state.key)
        assert retrieved.status == DirectionStatus.DRAFTING

    async def test_get_missing(self, store: InMemoryReconciliationStore) -> None:
        assert await store.get_direction(DirectionFactory.create().key) is None

    async def test_compare_and_set(self, store: InMemoryReconciliationStore) -> None:
        state = DirectionStateFactory.create()
        await store.create_direction(state)

        updated = state.model_copy(update={"status": DirectionStatus.ANALYZING, "version": 1})
        assert await store.compare_and_set_direction(updated, expected_version=0)
        assert not await store.compare_and_set_direction(updated, expected_version=0)

        retrieved = await store.get_direction(state.key)
        assert retrieved.status == DirectionStatus.ANALYZING
        assert retrieved.version == 1

    async def test_compare_and_set_missing(self, store: InMemoryReconciliationStore) -> None:
        assert not await store.compare_and_set_direction(
            DirectionStateFactory.create(), expected_version=0
        )

    async def test_list_directions_by_session(
        self, store: InMemoryReconciliationStore
    ) -> None:
        direction = DirectionFactory.create()
        await store.create_direction(DirectionStateFactory.create(direction=direction))
        await store.create_direction(
            DirectionStateFactory.create(direction=direction.reversed())
        )
        await store.create_direction(DirectionStateFactory.create())

        states = await store.list_directions(direction.session_id)

        assert {s.key for s in states} == {direction.key, direction.reversed().key}

    async def test_returned_state_is_a_copy(
        self, store: InMemoryReconciliationStore
    ) -> None:
        state = DirectionStateFactory.create()
        await store.create_direction(state)

        retrieved = await store.get_direction(state.key)
        retrieved.status = DirectionStatus.READY

        assert (await store.get_direction(state.key)).status == DirectionStatus.DRAFTING


class TestAttemptsAndCounter:
    """Tests for attempt revisions and the refinement counter."""

    async def test_attempt_revisions(self, store: InMemoryReconciliationStore) -> None:
        direction = DirectionFactory.create()
        await store.save_attempt(EmpathyAttemptFactory.create(direction=direction, revision=2))
        await store.save_attempt(EmpathyAttemptFactory.create(direction=direction, revision=1))

        assert [a.revision for a in await store.list_attempts(direction.key)] == [1, 2]
        assert (await store.get_attempt(direction.key, 2)).revision == 2
        assert await store.get_attempt(direction.key, 3) is None

    async def test_counter_starts_at_zero(self, store: InMemoryReconciliationStore) -> None:
        assert await store.get_refinement_attempts("missing") == 0

    async def test_counter_increments(self, store: InMemoryReconciliationStore) -> None:
        assert await store.increment_refinement_attempts("k") == (1, True)
        assert await store.increment_refinement_attempts("k") == (2, True)
        assert await store.get_refinement_attempts("k") == 2

    async def test_revision_claimed_once(self, store: InMemoryReconciliationStore) -> None:
        assert await store.increment_refinement_attempts("k", revision=1) == (1, True)
        assert await store.increment_refinement_attempts("k", revision=1) == (1, False)
        assert await store.increment_refinement_attempts("k", revision=2) == (2, True)

    async def test_concurrent_increments(self, store: InMemoryReconciliationStore) -> None:
        await asyncio.gather(*[store.increment_refinement_attempts("k") for _ in range(25)])
        assert await store.get_refinement_attempts("k") == 25


class TestGuardFlag:
    """Tests for the context-shared flag."""

    async def test_flag_sets_once(self, store: InMemoryReconciliationStore) -> None:
        assert not await store.is_context_shared("k")
        assert await store.mark_context_shared("k")
        assert not await store.mark_context_shared("k")
        assert await store.is_context_shared("k")


class TestResults:
    """Tests for reconciler results."""

    async def test_new_result_supersedes_previous(
        self, store: InMemoryReconciliationStore
    ) -> None:
        direction = DirectionFactory.create()
        first = ReconcilerResult(
            direction=direction, revision=1, attempt_number=1, action=Action.OFFER_SHARING
        )
        second = ReconcilerResult(
            direction=direction, revision=2, attempt_number=2, action=Action.READY
        )
        await store.save_result(first)
        await store.save_result(second)

        history = await store.list_results(direction.key)
        current = await store.get_current_result(direction.key)

        assert current.result_id == second.result_id
        assert history[0].superseded_at is not None
        assert history[1].superseded_at is None


class TestOffers:
    """Tests for share offers."""

    async def test_save_update_and_list(self, store: InMemoryReconciliationStore) -> None:
        offer = ShareOfferFactory.create()
        await store.save_offer(offer)

        offer.status = ShareOfferStatus.ACCEPTED
        await store.save_offer(offer)

        offers = await store.list_offers(offer.direction.key)
        assert len(offers) == 1
        assert offers[0].status == ShareOfferStatus.ACCEPTED
        assert (await store.get_offer(offer.offer_id)).status == ShareOfferStatus.ACCEPTED

    async def test_get_missing_offer(self, store: InMemoryReconciliationStore) -> None:
        assert await store.get_offer(uuid4()) is None


class TestExpressedContentAndFeedback:
    """Tests for expressed content and validation feedback."""

    async def test_expressed_content_in_order(
        self, store: InMemoryReconciliationStore
    ) -> None:
        session_id, participant_id = uuid4(), uuid4()
        await store.append_expressed_content(session_id, participant_id, "first")
        await store.append_expressed_content(session_id, participant_id, "second")

        assert await store.get_expressed_content(session_id, participant_id) == [
            "first",
            "second",
        ]
        assert await store.get_expressed_content(session_id, uuid4()) == []

    async def test_feedback(self, store: InMemoryReconciliationStore) -> None:
        direction = DirectionFactory.create()
        feedback = ValidationFeedback(
            direction=direction, revision=1, verdict=ValidationVerdict.PARTIAL
        )
        await store.save_validation_feedback(feedback)

        stored = await store.list_validation_feedback(direction.key)
        assert [f.verdict for f in stored] == [ValidationVerdict.PARTIAL]
