"""Closed set of model call kinds made by Attune.

Every model call is tagged with a CallKind. Each kind has exactly one
CallProfile carrying its generation budget and the label used for
logs and metrics.
"""

from dataclasses import dataclass
from enum import Enum


class CallKind(str, Enum):
    """Kinds of model calls."""

    GAP_ANALYSIS = "gap_analysis"
    EXCHANGE_SUMMARY = "exchange_summary"
    SHARE_DRAFT = "share_draft"


@dataclass(frozen=True)
class CallProfile:
    """Generation settings for one call kind."""

    kind: CallKind
    max_tokens: int
    temperature: float
    metric_label: str


CALL_PROFILES: dict[CallKind, CallProfile] = {
    CallKind.GAP_ANALYSIS: CallProfile(
        kind=CallKind.GAP_ANALYSIS,
        max_tokens=2048,
        temperature=0.0,
        metric_label="gap_analysis",
    ),
    CallKind.EXCHANGE_SUMMARY: CallProfile(
        kind=CallKind.EXCHANGE_SUMMARY,
        max_tokens=512,
        temperature=0.3,
        metric_label="exchange_summary",
    ),
    CallKind.SHARE_DRAFT: CallProfile(
        kind=CallKind.SHARE_DRAFT,
        max_tokens=512,
        temperature=0.5,
        metric_label="share_draft",
    ),
}


def profile_for(kind: CallKind) -> CallProfile:
    """Return the profile for a call kind."""
    return CALL_PROFILES[kind]
