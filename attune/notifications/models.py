"""Notification models.

Events are addressed to one participant each. Delivery is at-least-once,
so every event carries an event_id for client-side deduplication.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from attune.reconciliation.models import utc_now


class EventType(str, Enum):
    """Real-time event types."""

    RECONCILER_COMPLETED = "reconciler.completed"
    SHARE_OFFERED = "share.offered"
    CONTEXT_SHARED = "context.shared"
    EMPATHY_REVEALED = "empathy.revealed"
    REFINEMENT_REQUESTED = "refinement.requested"


class Notification(BaseModel):
    """One event for one participant."""

    event_id: UUID = Field(default_factory=uuid4, description="Deduplication key")
    event_type: EventType = Field(..., description="Event type")
    session_id: UUID = Field(..., description="Session the event belongs to")
    recipient_id: UUID = Field(..., description="Participant the event is for")
    direction_key: str = Field(..., description="Direction the event concerns")
    payload: dict[str, Any] = Field(default_factory=dict, description="Event body")
    occurred_at: datetime = Field(default_factory=utc_now, description="Event time")
