"""Enums for the reconciliation domain."""

from enum import Enum


class DirectionStatus(str, Enum):
    """Authoritative status of one direction (guesser -> subject)."""

    DRAFTING = "drafting"
    SHARED = "shared"
    ANALYZING = "analyzing"
    OFFERING = "offering"
    DECLINED = "declined"
    ACCEPTED = "accepted"
    CONTEXT_DRAFTING = "context_drafting"
    CONTEXT_SHARED = "context_shared"
    REFINEMENT_AVAILABLE = "refinement_available"
    RESUBMITTED = "resubmitted"
    READY = "ready"


class GuesserStatus(str, Enum):
    """Status of a direction as the guesser is allowed to see it.

    AWAITING deliberately covers both analysis and every stage of the
    subject's share offer.
    """

    DRAFTING = "drafting"
    AWAITING = "awaiting"
    REFINEMENT_AVAILABLE = "refinement_available"
    READY = "ready"


class AttemptStatus(str, Enum):
    """Lifecycle of a single empathy attempt revision."""

    DRAFTING = "drafting"
    SHARED = "shared"
    REVEALED = "revealed"


class GapSeverity(str, Enum):
    """Gap analysis verdict. Boundaries are owned by the analysis service."""

    NONE = "none"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


class Action(str, Enum):
    """Outcome of interpreting one analysis pass."""

    FORCE_READY = "FORCE_READY"
    READY = "READY"
    OFFER_OPTIONAL = "OFFER_OPTIONAL"
    OFFER_SHARING = "OFFER_SHARING"
    REFINING = "REFINING"

    @property
    def is_offer(self) -> bool:
        """Whether this action opens a share offer."""
        return self in (Action.OFFER_OPTIONAL, Action.OFFER_SHARING)


class ShareOfferStatus(str, Enum):
    """Subject's response to an invitation to add context."""

    OFFERED = "offered"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class OfferStrength(str, Enum):
    """How strongly the subject is invited to share."""

    OPTIONAL = "optional"
    SHARING = "sharing"


class ReadyReason(str, Enum):
    """Why a direction became ready. Audit only, never shown to the guesser."""

    NO_GAP = "no_gap"
    DECLINED = "declined"
    CONTEXT_SHARED = "context_shared"
    CIRCUIT_BREAKER = "circuit_breaker"
    ANALYSIS_UNAVAILABLE = "analysis_unavailable"


class ValidationVerdict(str, Enum):
    """Subject's judgment of a revealed attempt."""

    ACCURATE = "accurate"
    PARTIAL = "partial"
    INACCURATE = "inaccurate"
