"""Prometheus metrics for Attune.

Session and participant identifiers are never used as labels; every
label below has a small closed set of values.
"""

from prometheus_client import Counter, Histogram

# Request metrics
REQUEST_COUNT = Counter(
    "attune_request_count_total",
    "Total number of API requests processed",
    labelnames=["endpoint", "status"],
)

# Reconciliation metrics
ANALYSIS_PASSES = Counter(
    "attune_analysis_passes_total",
    "Completed analysis passes by resulting action",
    labelnames=["action"],
)

CIRCUIT_BREAKER_TRIPS = Counter(
    "attune_circuit_breaker_trips_total",
    "Analysis passes skipped because the direction used its pass budget",
)

DUPLICATE_SUBMISSIONS = Counter(
    "attune_duplicate_submissions_total",
    "Submissions that lost the race for an analysis slot",
    labelnames=["operation"],
)

SHARE_OFFER_OUTCOMES = Counter(
    "attune_share_offer_outcomes_total",
    "Share offers by outcome",
    labelnames=["strength", "outcome"],
)

STALLED_ANALYSES_RECOVERED = Counter(
    "attune_stalled_analyses_recovered_total",
    "Directions failed open after being stuck in analysis",
)

# Gap analysis metrics
GAP_ANALYSIS_FAILURES = Counter(
    "attune_gap_analysis_failures_total",
    "Gap analysis calls that failed and were failed open",
    labelnames=["reason"],
)

GAP_ANALYSIS_LATENCY = Histogram(
    "attune_gap_analysis_latency_seconds",
    "Gap analysis latency in seconds",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 8.0, 10.0, 20.0),
)

# LLM metrics
LLM_CALLS = Counter(
    "attune_llm_calls_total",
    "LLM calls by call kind and outcome",
    labelnames=["call_kind", "outcome"],
)


def setup_metrics() -> None:
    """Initialize metrics configuration.

    Called at application startup. prometheus_client registers the
    collectors above on import, so there is nothing else to wire.
    """
    pass
