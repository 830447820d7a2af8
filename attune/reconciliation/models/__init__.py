"""Reconciliation domain models.

Contains all Pydantic models for the empathy exchange:
- Direction identity and authoritative DirectionState
- EmpathyAttempts and ValidationFeedback
- GapAnalysis verdicts and ReconcilerResults
- ShareOffers
- Participant-facing views
"""

from attune.reconciliation.models.attempt import EmpathyAttempt, ValidationFeedback
from attune.reconciliation.models.direction import Direction, DirectionState, utc_now
from attune.reconciliation.models.enums import (
    Action,
    AttemptStatus,
    DirectionStatus,
    GapSeverity,
    GuesserStatus,
    OfferStrength,
    ReadyReason,
    ShareOfferStatus,
    ValidationVerdict,
)
from attune.reconciliation.models.offer import ShareOffer
from attune.reconciliation.models.result import (
    AbstractGuidance,
    GapAnalysis,
    ReconcilerResult,
)
from attune.reconciliation.models.views import (
    ExchangeStatus,
    ExchangeSummary,
    GuesserView,
    PendingOfferView,
    ShareDraft,
    SubjectView,
)

__all__ = [
    # Enums
    "Action",
    "AttemptStatus",
    "DirectionStatus",
    "GapSeverity",
    "GuesserStatus",
    "OfferStrength",
    "ReadyReason",
    "ShareOfferStatus",
    "ValidationVerdict",
    # Direction
    "Direction",
    "DirectionState",
    "utc_now",
    # Records
    "EmpathyAttempt",
    "ValidationFeedback",
    "AbstractGuidance",
    "GapAnalysis",
    "ReconcilerResult",
    "ShareOffer",
    # Views
    "ExchangeStatus",
    "ExchangeSummary",
    "GuesserView",
    "PendingOfferView",
    "ShareDraft",
    "SubjectView",
]
