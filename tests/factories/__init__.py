"""Test factories for creating test data."""

from tests.factories.reconciliation import (
    DirectionFactory,
    DirectionStateFactory,
    EmpathyAttemptFactory,
    GapAnalysisFactory,
    ShareOfferFactory,
)

__all__ = [
    "DirectionFactory",
    "DirectionStateFactory",
    "EmpathyAttemptFactory",
    "GapAnalysisFactory",
    "ShareOfferFactory",
]
