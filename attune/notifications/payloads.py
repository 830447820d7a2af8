"""Event payload builders.

Each event type has exactly one builder. The READY builder takes no
reason argument, so a decline and a clean reveal cannot produce
different payloads.
"""

from uuid import UUID

from attune.notifications.models import EventType, Notification
from attune.reconciliation.models import (
    AbstractGuidance,
    Direction,
    EmpathyAttempt,
    ShareOffer,
)

MOVING_FORWARD_MESSAGE = (
    "You've both put real care into understanding each other. "
    "Let's carry what you've learned into the next part of the conversation."
)


def _direction_fields(direction: Direction) -> dict[str, str]:
    return {
        "guesser_id": str(direction.guesser_id),
        "subject_id": str(direction.subject_id),
    }


def _notify(
    event_type: EventType,
    direction: Direction,
    recipient_id: UUID,
    payload: dict,
) -> Notification:
    return Notification(
        event_type=event_type,
        session_id=direction.session_id,
        recipient_id=recipient_id,
        direction_key=direction.key,
        payload=payload,
    )


def direction_ready(attempt: EmpathyAttempt) -> list[Notification]:
    """empathy.revealed for both participants of a direction."""
    direction = attempt.direction
    payload = {
        **_direction_fields(direction),
        "status": "ready",
        "revision": attempt.revision,
        "revealed_content": attempt.content,
    }
    return [
        _notify(EventType.EMPATHY_REVEALED, direction, direction.guesser_id, dict(payload)),
        _notify(EventType.EMPATHY_REVEALED, direction, direction.subject_id, dict(payload)),
    ]


def exchange_moving_forward(attempt: EmpathyAttempt) -> list[Notification]:
    """reconciler.completed for both participants when the pass budget is used."""
    direction = attempt.direction
    payload = {
        **_direction_fields(direction),
        "status": "ready",
        "revision": attempt.revision,
        "revealed_content": attempt.content,
        "message": MOVING_FORWARD_MESSAGE,
    }
    return [
        _notify(EventType.RECONCILER_COMPLETED, direction, direction.guesser_id, dict(payload)),
        _notify(EventType.RECONCILER_COMPLETED, direction, direction.subject_id, dict(payload)),
    ]


def share_offered(offer: ShareOffer) -> list[Notification]:
    """share.offered for the subject only."""
    direction = offer.direction
    payload = {
        **_direction_fields(direction),
        "offer_id": str(offer.offer_id),
        "strength": offer.strength.value,
        "message": offer.message,
        "suggested_share_focus": offer.suggested_share_focus,
    }
    return [_notify(EventType.SHARE_OFFERED, direction, direction.subject_id, payload)]


def context_shared(offer: ShareOffer) -> list[Notification]:
    """context.shared for the guesser (with the content) and the subject."""
    direction = offer.direction
    payload = {
        **_direction_fields(direction),
        "revision": offer.revision,
        "shared_content": offer.shared_content,
    }
    return [
        _notify(EventType.CONTEXT_SHARED, direction, direction.guesser_id, dict(payload)),
        _notify(EventType.CONTEXT_SHARED, direction, direction.subject_id, dict(payload)),
    ]


def refinement_requested(
    attempt: EmpathyAttempt, guidance: AbstractGuidance | None
) -> list[Notification]:
    """refinement.requested for the guesser only.

    Sent when a refined attempt still misses something after context was
    shared. Only the abstract guidance travels, never the subject's words.
    """
    direction = attempt.direction
    payload = {
        **_direction_fields(direction),
        "status": "refinement_available",
        "revision": attempt.revision,
        "guidance": guidance.model_dump() if guidance else None,
    }
    return [
        _notify(EventType.REFINEMENT_REQUESTED, direction, direction.guesser_id, payload)
    ]
