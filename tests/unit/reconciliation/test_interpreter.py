"""Unit tests for the recommendation interpreter."""

import pytest

from attune.reconciliation.circuit_breaker import BreakerVerdict
from attune.reconciliation.interpreter import interpret
from attune.reconciliation.models import Action, GapSeverity
from tests.factories import GapAnalysisFactory

RUN = BreakerVerdict(attempts=1, should_skip=False)
SKIP = BreakerVerdict(attempts=4, should_skip=True)


class TestInterpret:
    """Tests for interpret."""

    @pytest.mark.parametrize(
        ("severity", "expected"),
        [
            (GapSeverity.NONE, Action.READY),
            (GapSeverity.MODERATE, Action.OFFER_OPTIONAL),
            (GapSeverity.SIGNIFICANT, Action.OFFER_SHARING),
        ],
    )
    def test_severity_picks_action(
        self, severity: GapSeverity, expected: Action
    ) -> None:
        """Severity maps onto the offer strength."""
        analysis = GapAnalysisFactory.create(severity=severity)
        assert interpret(RUN, analysis, context_already_shared=False) == expected

    def test_breaker_outranks_everything(self) -> None:
        """A tripped breaker forces READY whatever the analysis says."""
        analysis = GapAnalysisFactory.create(severity=GapSeverity.SIGNIFICANT)
        assert interpret(SKIP, analysis, context_already_shared=False) == Action.FORCE_READY
        assert interpret(SKIP, None, context_already_shared=True) == Action.FORCE_READY

    @pytest.mark.parametrize(
        ("severity", "expected"),
        [
            (GapSeverity.NONE, Action.READY),
            (GapSeverity.MODERATE, Action.REFINING),
            (GapSeverity.SIGNIFICANT, Action.REFINING),
        ],
    )
    def test_context_shared_never_offers(
        self, severity: GapSeverity, expected: Action
    ) -> None:
        """Once context was shared, a remaining gap asks for refinement instead."""
        analysis = GapAnalysisFactory.create(severity=severity)
        action = interpret(RUN, analysis, context_already_shared=True)

        assert action == expected
        assert not action.is_offer

    def test_missing_analysis_rejected(self) -> None:
        """Analysis is required when the breaker did not trip."""
        with pytest.raises(ValueError):
            interpret(RUN, None, context_already_shared=False)
