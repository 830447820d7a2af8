"""Test factories for reconciliation domain models."""

from uuid import UUID, uuid4

from attune.reconciliation.models import (
    AbstractGuidance,
    Direction,
    DirectionState,
    DirectionStatus,
    EmpathyAttempt,
    GapAnalysis,
    GapSeverity,
    OfferStrength,
    ShareOffer,
)


class DirectionFactory:
    """Factory for creating Direction instances for testing."""

    @staticmethod
    def create(
        *,
        session_id: UUID | None = None,
        guesser_id: UUID | None = None,
        subject_id: UUID | None = None,
    ) -> Direction:
        """Create a Direction between two fresh participants."""
        return Direction(
            session_id=session_id or uuid4(),
            guesser_id=guesser_id or uuid4(),
            subject_id=subject_id or uuid4(),
        )


class DirectionStateFactory:
    """Factory for creating DirectionState instances for testing."""

    @staticmethod
    def create(
        *,
        direction: Direction | None = None,
        status: DirectionStatus = DirectionStatus.DRAFTING,
        revision: int = 0,
        open_offer_id: UUID | None = None,
        version: int = 0,
    ) -> DirectionState:
        """Create a DirectionState with sensible defaults.

        Args:
            direction: Direction (auto-generated if not provided)
            status: Current status
            revision: Latest attempt revision
            open_offer_id: Open offer, if any
            version: Concurrency version

        Returns:
            Configured DirectionState instance
        """
        return DirectionState(
            direction=direction or DirectionFactory.create(),
            status=status,
            revision=revision,
            open_offer_id=open_offer_id,
            version=version,
        )


class EmpathyAttemptFactory:
    """Factory for creating EmpathyAttempt instances for testing."""

    @staticmethod
    def create(
        *,
        direction: Direction | None = None,
        revision: int = 1,
        content: str = "I think you felt unseen when the plans changed without you.",
    ) -> EmpathyAttempt:
        return EmpathyAttempt(
            direction=direction or DirectionFactory.create(),
            revision=revision,
            content=content,
        )


class ShareOfferFactory:
    """Factory for creating ShareOffer instances for testing."""

    @staticmethod
    def create(
        *,
        direction: Direction | None = None,
        revision: int = 1,
        strength: OfferStrength = OfferStrength.SHARING,
        suggested_share_focus: str | None = "how tired you have been",
        message: str = "Would you be willing to share a bit more?",
    ) -> ShareOffer:
        return ShareOffer(
            direction=direction or DirectionFactory.create(),
            revision=revision,
            strength=strength,
            suggested_share_focus=suggested_share_focus,
            message=message,
        )


class GapAnalysisFactory:
    """Factory for creating GapAnalysis instances for testing."""

    @staticmethod
    def create(
        *,
        severity: GapSeverity = GapSeverity.NONE,
        suggested_share_focus: str | None = None,
        alignment_score: int | None = 80,
        guidance: AbstractGuidance | None = None,
    ) -> GapAnalysis:
        return GapAnalysis(
            severity=severity,
            suggested_share_focus=suggested_share_focus,
            alignment_score=alignment_score,
            guidance=guidance,
        )
