"""Guesser-facing projection of direction status.

Every status in which the subject is deciding or drafting collapses to
AWAITING, so an open offer looks exactly like an analysis in progress.
"""

from attune.reconciliation.models import DirectionStatus, GuesserStatus

S = DirectionStatus

GUESSER_STATUS: dict[DirectionStatus, GuesserStatus] = {
    S.DRAFTING: GuesserStatus.DRAFTING,
    S.SHARED: GuesserStatus.AWAITING,
    S.ANALYZING: GuesserStatus.AWAITING,
    S.OFFERING: GuesserStatus.AWAITING,
    S.DECLINED: GuesserStatus.AWAITING,
    S.ACCEPTED: GuesserStatus.AWAITING,
    S.CONTEXT_DRAFTING: GuesserStatus.AWAITING,
    S.RESUBMITTED: GuesserStatus.AWAITING,
    S.CONTEXT_SHARED: GuesserStatus.REFINEMENT_AVAILABLE,
    S.REFINEMENT_AVAILABLE: GuesserStatus.REFINEMENT_AVAILABLE,
    S.READY: GuesserStatus.READY,
}


def guesser_status(status: DirectionStatus) -> GuesserStatus:
    return GUESSER_STATUS[status]
