"""Direction state machine.

Pure transition functions over DirectionState. Each returns a Transition
describing the new state, the records to persist and the notifications
to publish; nothing here touches the store or the publisher.

    DRAFTING -> SHARED -> ANALYZING -> {READY, OFFERING}
    OFFERING -> DECLINED -> READY
    OFFERING -> ACCEPTED -> CONTEXT_DRAFTING -> CONTEXT_SHARED
             -> REFINEMENT_AVAILABLE -> RESUBMITTED -> ANALYZING
    ANALYZING -> REFINEMENT_AVAILABLE  (gap remains after context was shared)

Intermediate statuses on a path are validated hop by hop but only the
final status is written, with a single version bump.
"""

from dataclasses import dataclass, field
from typing import Any

from attune.notifications import payloads
from attune.notifications.models import Notification
from attune.reconciliation.exceptions import InvalidTransitionError
from attune.reconciliation.models import (
    Action,
    AttemptStatus,
    DirectionState,
    DirectionStatus,
    EmpathyAttempt,
    OfferStrength,
    ReadyReason,
    ReconcilerResult,
    ShareOffer,
    ShareOfferStatus,
    utc_now,
)

S = DirectionStatus

ALLOWED_TRANSITIONS: dict[DirectionStatus, frozenset[DirectionStatus]] = {
    S.DRAFTING: frozenset({S.SHARED}),
    S.SHARED: frozenset({S.ANALYZING}),
    S.ANALYZING: frozenset({S.READY, S.OFFERING, S.REFINEMENT_AVAILABLE}),
    S.OFFERING: frozenset({S.DECLINED, S.ACCEPTED}),
    S.DECLINED: frozenset({S.READY}),
    S.ACCEPTED: frozenset({S.CONTEXT_DRAFTING}),
    S.CONTEXT_DRAFTING: frozenset({S.CONTEXT_SHARED}),
    S.CONTEXT_SHARED: frozenset({S.REFINEMENT_AVAILABLE}),
    S.REFINEMENT_AVAILABLE: frozenset({S.RESUBMITTED}),
    S.RESUBMITTED: frozenset({S.ANALYZING}),
    S.READY: frozenset(),
}

# Statuses from which a guesser may share (or reshare) an attempt
SUBMITTABLE_STATUSES: frozenset[DirectionStatus] = frozenset(
    {S.DRAFTING, S.REFINEMENT_AVAILABLE}
)

_OFFER_STRENGTHS: dict[Action, OfferStrength] = {
    Action.OFFER_OPTIONAL: OfferStrength.OPTIONAL,
    Action.OFFER_SHARING: OfferStrength.SHARING,
}


@dataclass
class Transition:
    """Result of applying one step to a direction."""

    state: DirectionState
    expected_version: int
    attempt: EmpathyAttempt | None = None
    offer: ShareOffer | None = None
    result: ReconcilerResult | None = None
    notifications: list[Notification] = field(default_factory=list)


def can_transition(current: DirectionStatus, target: DirectionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def _walk(
    state: DirectionState, *path: DirectionStatus, **updates: Any
) -> DirectionState:
    current = state.status
    for target in path:
        if not can_transition(current, target):
            raise InvalidTransitionError(
                f"Cannot move direction from {current.value} to {target.value}",
                status=state.status.value,
            )
        current = target

    new_state = state.model_copy(deep=True)
    new_state.status = current
    new_state.version = state.version + 1
    new_state.updated_at = utc_now()
    for name, value in updates.items():
        setattr(new_state, name, value)
    return new_state


def _revealed(attempt: EmpathyAttempt) -> EmpathyAttempt:
    revealed = attempt.model_copy(deep=True)
    revealed.status = AttemptStatus.REVEALED
    revealed.revealed_at = utc_now()
    return revealed


def offer_message(strength: OfferStrength, focus: str | None) -> str:
    """Invitation shown to the subject for an offer of the given strength."""
    if strength == OfferStrength.OPTIONAL:
        if focus:
            return (
                "Your partner has a good sense of what you've been going through. "
                f"If you'd like, sharing a little more about {focus} could help them "
                "understand you even more fully. It's entirely up to you."
            )
        return (
            "Your partner has a good sense of what you've been going through. "
            "If you'd like, you could share a little more to help them understand "
            "you even more fully. It's entirely up to you."
        )
    if focus:
        return (
            "Your partner is working hard to understand you, and one thing could "
            f"really help them: {focus}. Would you be willing to share a bit more "
            "about it?"
        )
    return (
        "Your partner is working hard to understand you. Would you be willing to "
        "share a bit more about what this has been like for you?"
    )


def submit_attempt(state: DirectionState, content: str) -> Transition:
    """Share a new attempt revision and move into analysis.

    Raises:
        InvalidTransitionError: If the direction is not DRAFTING or
            REFINEMENT_AVAILABLE
    """
    if state.status == S.DRAFTING:
        path = (S.SHARED, S.ANALYZING)
    elif state.status == S.REFINEMENT_AVAILABLE:
        path = (S.RESUBMITTED, S.ANALYZING)
    else:
        raise InvalidTransitionError(
            f"Cannot share an attempt while the direction is {state.status.value}",
            status=state.status.value,
        )

    now = utc_now()
    revision = state.revision + 1
    attempt = EmpathyAttempt(
        direction=state.direction,
        revision=revision,
        content=content,
        status=AttemptStatus.SHARED,
        created_at=now,
        shared_at=now,
    )
    new_state = _walk(
        state,
        *path,
        revision=revision,
        open_offer_id=None,
        ready_reason=None,
    )
    return Transition(state=new_state, expected_version=state.version, attempt=attempt)


def apply_action(
    state: DirectionState,
    attempt: EmpathyAttempt,
    action: Action,
    reason: ReadyReason = ReadyReason.NO_GAP,
    suggested_share_focus: str | None = None,
    result: ReconcilerResult | None = None,
) -> Transition:
    """Apply an interpreted action to a direction in analysis.

    Args:
        state: Direction currently ANALYZING
        attempt: Attempt revision that was analyzed
        action: Action chosen by the interpreter
        reason: Audit reason recorded for a READY action
        suggested_share_focus: Focus carried onto a new offer
        result: Verdict of the pass, persisted only if the transition wins

    Raises:
        InvalidTransitionError: If the direction is not ANALYZING
    """
    if action == Action.FORCE_READY:
        new_state = _walk(
            state, S.READY, ready_reason=ReadyReason.CIRCUIT_BREAKER, open_offer_id=None
        )
        revealed = _revealed(attempt)
        return Transition(
            state=new_state,
            expected_version=state.version,
            attempt=revealed,
            result=result,
            notifications=payloads.exchange_moving_forward(revealed),
        )

    if action == Action.READY:
        new_state = _walk(state, S.READY, ready_reason=reason, open_offer_id=None)
        revealed = _revealed(attempt)
        return Transition(
            state=new_state,
            expected_version=state.version,
            attempt=revealed,
            result=result,
            notifications=payloads.direction_ready(revealed),
        )

    if action == Action.REFINING:
        new_state = _walk(state, S.REFINEMENT_AVAILABLE, open_offer_id=None)
        guidance = result.analysis.guidance if result and result.analysis else None
        return Transition(
            state=new_state,
            expected_version=state.version,
            result=result,
            notifications=payloads.refinement_requested(attempt, guidance),
        )

    strength = _OFFER_STRENGTHS[action]
    offer = ShareOffer(
        direction=state.direction,
        revision=attempt.revision,
        strength=strength,
        suggested_share_focus=suggested_share_focus,
        message=offer_message(strength, suggested_share_focus),
    )
    new_state = _walk(state, S.OFFERING, open_offer_id=offer.offer_id)
    return Transition(
        state=new_state,
        expected_version=state.version,
        offer=offer,
        result=result,
        notifications=payloads.share_offered(offer),
    )


def _check_open_offer(state: DirectionState, offer: ShareOffer) -> None:
    if state.open_offer_id != offer.offer_id:
        raise InvalidTransitionError(
            "Offer is not the open offer for this direction",
            status=state.status.value,
        )


def decline_offer(
    state: DirectionState, offer: ShareOffer, attempt: EmpathyAttempt
) -> Transition:
    """Subject declines: the direction becomes READY like a clean reveal."""
    _check_open_offer(state, offer)
    new_state = _walk(
        state, S.DECLINED, S.READY, ready_reason=ReadyReason.DECLINED, open_offer_id=None
    )
    resolved = offer.model_copy(deep=True)
    resolved.status = ShareOfferStatus.DECLINED
    resolved.responded_at = utc_now()
    revealed = _revealed(attempt)
    return Transition(
        state=new_state,
        expected_version=state.version,
        attempt=revealed,
        offer=resolved,
        notifications=payloads.direction_ready(revealed),
    )


def accept_offer(state: DirectionState, offer: ShareOffer) -> Transition:
    """Subject accepts: they can now draft context for the guesser."""
    _check_open_offer(state, offer)
    new_state = _walk(state, S.ACCEPTED, S.CONTEXT_DRAFTING)
    accepted = offer.model_copy(deep=True)
    accepted.status = ShareOfferStatus.ACCEPTED
    accepted.responded_at = utc_now()
    return Transition(state=new_state, expected_version=state.version, offer=accepted)


def share_context(state: DirectionState, offer: ShareOffer, content: str) -> Transition:
    """Subject shares context: the guesser may refine their attempt."""
    _check_open_offer(state, offer)
    new_state = _walk(
        state, S.CONTEXT_SHARED, S.REFINEMENT_AVAILABLE, open_offer_id=None
    )
    shared = offer.model_copy(deep=True)
    shared.shared_content = content
    shared.shared_at = utc_now()
    return Transition(
        state=new_state,
        expected_version=state.version,
        offer=shared,
        notifications=payloads.context_shared(shared),
    )
