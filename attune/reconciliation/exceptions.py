"""Reconciliation exception hierarchy.

ReconciliationError subclasses describe caller mistakes and are mapped to
API errors. ReconciliationInvariantError is a programming error and is
never caught inside the engine.
"""


class ReconciliationError(Exception):
    """Base exception for rejected reconciliation operations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DirectionNotFoundError(ReconciliationError):
    """No attempt has been shared for the direction yet."""


class InvalidDirectionError(ReconciliationError):
    """Direction does not belong to the session or is malformed."""


class InvalidTransitionError(ReconciliationError):
    """Operation is not allowed in the direction's current status."""

    def __init__(self, message: str, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class NoPendingOfferError(ReconciliationError):
    """Subject responded to an offer that is not open."""


class ContentRequiredError(ReconciliationError):
    """Attempt or context text is empty."""


class ReconciliationInvariantError(Exception):
    """An engine invariant was about to be broken.

    Raised, for example, when an offer would be reopened on a direction
    whose context has already been shared.
    """


class GapAnalysisUnavailableError(Exception):
    """The gap-analysis service failed, timed out or returned garbage."""

    def __init__(self, message: str, reason: str = "error") -> None:
        super().__init__(message)
        self.reason = reason


class StoreConnectionError(Exception):
    """The backing store could not be reached."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
