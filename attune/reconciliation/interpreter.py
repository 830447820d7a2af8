"""Recommendation interpreter.

Maps a circuit breaker verdict, a gap analysis and the direction's
context-shared flag onto the Action the state machine applies.

Priority: the breaker outranks everything, the context-shared flag
outranks severity, and severity otherwise picks the offer strength.
Once context was shared a remaining gap sends the guesser back to
refine without a new offer, and the breaker bounds how often that
can happen.
"""

from attune.reconciliation.circuit_breaker import BreakerVerdict
from attune.reconciliation.models import Action, GapAnalysis, GapSeverity

_SEVERITY_ACTIONS: dict[GapSeverity, Action] = {
    GapSeverity.NONE: Action.READY,
    GapSeverity.MODERATE: Action.OFFER_OPTIONAL,
    GapSeverity.SIGNIFICANT: Action.OFFER_SHARING,
}


def interpret(
    verdict: BreakerVerdict,
    analysis: GapAnalysis | None,
    context_already_shared: bool,
) -> Action:
    """Choose the action for one analysis pass.

    Args:
        verdict: Circuit breaker verdict for this pass
        analysis: Gap analysis, or None when the breaker tripped before
            analysis could run
        context_already_shared: Whether the subject already shared context
            for this direction

    Returns:
        The Action to apply. Never an offer once context was shared.
    """
    if verdict.should_skip:
        return Action.FORCE_READY

    if analysis is None:
        raise ValueError("analysis is required when the circuit breaker did not trip")

    if context_already_shared:
        if analysis.severity == GapSeverity.NONE:
            return Action.READY
        return Action.REFINING

    return _SEVERITY_ACTIONS[analysis.severity]
