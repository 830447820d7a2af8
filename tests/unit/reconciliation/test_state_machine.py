"""Unit tests for the direction state machine."""

import pytest

from attune.notifications import EventType
from attune.reconciliation import state_machine
from attune.reconciliation.exceptions import InvalidTransitionError
from attune.reconciliation.models import (
    AbstractGuidance,
    Action,
    AttemptStatus,
    DirectionStatus,
    GapSeverity,
    OfferStrength,
    ReadyReason,
    ReconcilerResult,
    ShareOfferStatus,
)
from tests.factories import (
    DirectionStateFactory,
    EmpathyAttemptFactory,
    GapAnalysisFactory,
    ShareOfferFactory,
)

S = DirectionStatus


def _analyzing_state():
    state = DirectionStateFactory.create(status=S.DRAFTING)
    transition = state_machine.submit_attempt(state, "You felt left out.")
    return transition.state, transition.attempt


def _offering_state(action: Action = Action.OFFER_SHARING):
    state, attempt = _analyzing_state()
    transition = state_machine.apply_action(
        state, attempt, action, suggested_share_focus="the long week"
    )
    return transition.state, attempt, transition.offer


class TestSubmitAttempt:
    """Tests for submit_attempt."""

    def test_first_share_moves_to_analyzing(self) -> None:
        state = DirectionStateFactory.create()
        transition = state_machine.submit_attempt(state, "You felt left out.")

        assert transition.state.status == S.ANALYZING
        assert transition.state.revision == 1
        assert transition.state.version == state.version + 1
        assert transition.expected_version == state.version
        assert transition.attempt.revision == 1
        assert transition.attempt.status == AttemptStatus.SHARED
        assert transition.notifications == []

    def test_reshare_after_refinement_bumps_revision(self) -> None:
        state = DirectionStateFactory.create(status=S.REFINEMENT_AVAILABLE, revision=1)
        transition = state_machine.submit_attempt(state, "You felt exhausted.")

        assert transition.state.status == S.ANALYZING
        assert transition.state.revision == 2

    @pytest.mark.parametrize(
        "status",
        [S.ANALYZING, S.OFFERING, S.CONTEXT_DRAFTING, S.READY],
    )
    def test_share_rejected_outside_submittable_statuses(
        self, status: DirectionStatus
    ) -> None:
        state = DirectionStateFactory.create(status=status, revision=1)

        with pytest.raises(InvalidTransitionError) as exc_info:
            state_machine.submit_attempt(state, "Another try")
        assert exc_info.value.status == status.value

    def test_input_state_not_mutated(self) -> None:
        state = DirectionStateFactory.create()
        state_machine.submit_attempt(state, "You felt left out.")

        assert state.status == S.DRAFTING
        assert state.version == 0


class TestApplyAction:
    """Tests for apply_action."""

    def test_ready_reveals_attempt(self) -> None:
        state, attempt = _analyzing_state()
        transition = state_machine.apply_action(state, attempt, Action.READY)

        assert transition.state.status == S.READY
        assert transition.state.ready_reason == ReadyReason.NO_GAP
        assert transition.attempt.status == AttemptStatus.REVEALED
        assert transition.attempt.revealed_at is not None
        assert {n.event_type for n in transition.notifications} == {
            EventType.EMPATHY_REVEALED
        }
        assert len(transition.notifications) == 2

    def test_force_ready_uses_moving_forward_event(self) -> None:
        state, attempt = _analyzing_state()
        transition = state_machine.apply_action(state, attempt, Action.FORCE_READY)

        assert transition.state.status == S.READY
        assert transition.state.ready_reason == ReadyReason.CIRCUIT_BREAKER
        assert [n.event_type for n in transition.notifications] == [
            EventType.RECONCILER_COMPLETED,
            EventType.RECONCILER_COMPLETED,
        ]

    @pytest.mark.parametrize(
        ("action", "strength"),
        [
            (Action.OFFER_OPTIONAL, OfferStrength.OPTIONAL),
            (Action.OFFER_SHARING, OfferStrength.SHARING),
        ],
    )
    def test_offer_opens_share_offer(
        self, action: Action, strength: OfferStrength
    ) -> None:
        state, attempt, offer = _offering_state(action)

        assert state.status == S.OFFERING
        assert state.open_offer_id == offer.offer_id
        assert offer.strength == strength
        assert offer.status == ShareOfferStatus.OFFERED
        assert "the long week" in offer.message

    def test_offer_notifies_subject_only(self) -> None:
        state, attempt = _analyzing_state()
        transition = state_machine.apply_action(state, attempt, Action.OFFER_OPTIONAL)

        assert len(transition.notifications) == 1
        notification = transition.notifications[0]
        assert notification.event_type == EventType.SHARE_OFFERED
        assert notification.recipient_id == state.direction.subject_id

    def test_refining_returns_attempt_to_guesser(self) -> None:
        state, attempt = _analyzing_state()
        guidance = AbstractGuidance(area_hint="special occasions")
        result = ReconcilerResult(
            direction=state.direction,
            revision=attempt.revision,
            attempt_number=2,
            action=Action.REFINING,
            analysis=GapAnalysisFactory.create(
                severity=GapSeverity.SIGNIFICANT, guidance=guidance
            ),
        )

        transition = state_machine.apply_action(
            state, attempt, Action.REFINING, result=result
        )

        assert transition.state.status == S.REFINEMENT_AVAILABLE
        assert transition.state.open_offer_id is None
        assert transition.offer is None
        assert transition.result is result
        assert [n.recipient_id for n in transition.notifications] == [
            state.direction.guesser_id
        ]
        notification = transition.notifications[0]
        assert notification.event_type == EventType.REFINEMENT_REQUESTED
        assert notification.payload["guidance"]["area_hint"] == "special occasions"

    def test_result_travels_with_transition(self) -> None:
        state, attempt = _analyzing_state()
        result = ReconcilerResult(
            direction=state.direction,
            revision=attempt.revision,
            attempt_number=1,
            action=Action.READY,
        )

        transition = state_machine.apply_action(state, attempt, Action.READY, result=result)

        assert transition.result is result

    def test_action_requires_analyzing(self) -> None:
        state = DirectionStateFactory.create(status=S.DRAFTING)
        attempt = EmpathyAttemptFactory.create(direction=state.direction)

        with pytest.raises(InvalidTransitionError):
            state_machine.apply_action(state, attempt, Action.READY)


class TestOfferResponses:
    """Tests for decline_offer, accept_offer and share_context."""

    def test_decline_reveals_like_clean_ready(self) -> None:
        state, attempt, offer = _offering_state()
        declined = state_machine.decline_offer(state, offer, attempt)

        analyzing, fresh_attempt = _analyzing_state()
        clean = state_machine.apply_action(analyzing, fresh_attempt, Action.READY)

        assert declined.state.status == clean.state.status == S.READY
        assert declined.state.ready_reason == ReadyReason.DECLINED
        assert declined.offer.status == ShareOfferStatus.DECLINED
        assert [n.event_type for n in declined.notifications] == [
            n.event_type for n in clean.notifications
        ]
        assert set(declined.notifications[0].payload) == set(clean.notifications[0].payload)

    def test_accept_moves_to_context_drafting(self) -> None:
        state, _, offer = _offering_state()
        transition = state_machine.accept_offer(state, offer)

        assert transition.state.status == S.CONTEXT_DRAFTING
        assert transition.state.open_offer_id == offer.offer_id
        assert transition.offer.status == ShareOfferStatus.ACCEPTED
        assert transition.notifications == []

    def test_share_context_makes_refinement_available(self) -> None:
        state, _, offer = _offering_state()
        accepted = state_machine.accept_offer(state, offer)
        transition = state_machine.share_context(
            accepted.state, accepted.offer, "It was the third late night in a row."
        )

        assert transition.state.status == S.REFINEMENT_AVAILABLE
        assert transition.state.open_offer_id is None
        assert transition.offer.shared_content == "It was the third late night in a row."
        assert {n.recipient_id for n in transition.notifications} == {
            state.direction.guesser_id,
            state.direction.subject_id,
        }
        assert {n.event_type for n in transition.notifications} == {
            EventType.CONTEXT_SHARED
        }

    def test_mismatched_offer_rejected(self) -> None:
        state, attempt, _ = _offering_state()
        stray = ShareOfferFactory.create(direction=state.direction)

        with pytest.raises(InvalidTransitionError):
            state_machine.decline_offer(state, stray, attempt)

    def test_context_before_accept_rejected(self) -> None:
        state, _, offer = _offering_state()

        with pytest.raises(InvalidTransitionError):
            state_machine.share_context(state, offer, "More context")


class TestTransitionTable:
    """Tests for ALLOWED_TRANSITIONS."""

    def test_ready_is_terminal(self) -> None:
        assert all(
            not state_machine.can_transition(S.READY, target) for target in S
        )

    def test_every_status_has_an_entry(self) -> None:
        assert set(state_machine.ALLOWED_TRANSITIONS) == set(S)

    def test_offer_message_varies_by_strength(self) -> None:
        optional = state_machine.offer_message(OfferStrength.OPTIONAL, None)
        sharing = state_machine.offer_message(OfferStrength.SHARING, None)

        assert optional != sharing
        assert "entirely up to you" in optional

    def test_analysis_can_hand_attempt_back_for_refinement(self) -> None:
        assert state_machine.can_transition(S.ANALYZING, S.REFINEMENT_AVAILABLE)
        assert not state_machine.can_transition(S.REFINEMENT_AVAILABLE, S.OFFERING)
