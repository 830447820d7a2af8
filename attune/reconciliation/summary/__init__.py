"""Exchange summaries."""

from attune.reconciliation.summary.service import (
    ExchangeSummarizer,
    SummaryUnavailableError,
    describe_direction,
)

__all__ = [
    "ExchangeSummarizer",
    "SummaryUnavailableError",
    "describe_direction",
]
