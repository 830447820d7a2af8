"""Gap analyzer adapter.

Shapes the request, bounds the call with a timeout and at most one
retry, and normalizes the raw verdict into a GapAnalysis. Every failure
surfaces as GapAnalysisUnavailableError so the engine can fail open.
"""

import asyncio
import time

from attune.observability.logging import get_logger
from attune.observability.metrics import GAP_ANALYSIS_FAILURES, GAP_ANALYSIS_LATENCY
from attune.reconciliation.exceptions import GapAnalysisUnavailableError
from attune.reconciliation.gap_analysis.models import GapAnalysisRequest, RawGapAnalysis
from attune.reconciliation.gap_analysis.service import GapAnalysisService
from attune.reconciliation.models import AbstractGuidance, GapAnalysis, GapSeverity

logger = get_logger(__name__)

_SEVERITY_ALIASES: dict[str, GapSeverity] = {
    "minor": GapSeverity.MODERATE,
}


def normalize_severity(raw: str) -> GapSeverity:
    """Map a raw severity onto the three-valued GapSeverity.

    Raises:
        GapAnalysisUnavailableError: If the value is not recognized
    """
    value = raw.strip().lower()
    if value in _SEVERITY_ALIASES:
        return _SEVERITY_ALIASES[value]
    try:
        return GapSeverity(value)
    except ValueError as e:
        raise GapAnalysisUnavailableError(
            f"Unrecognized gap severity: {raw!r}", reason="invalid_severity"
        ) from e


def to_gap_analysis(raw: RawGapAnalysis) -> GapAnalysis:
    """Normalize a raw service verdict."""
    guidance = None
    if raw.abstract_guidance and any(
        (
            raw.abstract_guidance.area_hint,
            raw.abstract_guidance.guidance_type,
            raw.abstract_guidance.prompt_seed,
        )
    ):
        guidance = AbstractGuidance(
            area_hint=raw.abstract_guidance.area_hint,
            guidance_type=raw.abstract_guidance.guidance_type,
            prompt_seed=raw.abstract_guidance.prompt_seed,
        )

    return GapAnalysis(
        severity=normalize_severity(raw.gaps.severity),
        suggested_share_focus=raw.recommendation.suggested_share_focus,
        alignment_score=raw.alignment.score,
        alignment_summary=raw.alignment.summary,
        correctly_identified=raw.alignment.correctly_identified,
        gap_summary=raw.gaps.summary,
        missed_feelings=raw.gaps.missed_feelings,
        misattributions=raw.gaps.misattributions,
        most_important_gap=raw.gaps.most_important_gap,
        rationale=raw.recommendation.rationale,
        guidance=guidance,
    )


class GapAnalyzerAdapter:
    """Bounded, normalizing wrapper around a GapAnalysisService."""

    def __init__(
        self,
        service: GapAnalysisService,
        timeout_seconds: float = 8.0,
        max_retries: int = 1,
    ) -> None:
        """Initialize the adapter.

        Args:
            service: Service performing the comparison
            timeout_seconds: Ceiling for each call
            max_retries: Retries after a failed call (0 or 1)
        """
        self._service = service
        self._timeout_seconds = timeout_seconds
        self._max_retries = max(0, min(max_retries, 1))

    async def analyze(
        self, attempt_text: str, subject_content: list[str]
    ) -> GapAnalysis:
        """Compare an attempt with the subject's expressed content.

        Raises:
            GapAnalysisUnavailableError: If every try failed, timed out or
                returned an unusable verdict
        """
        request = GapAnalysisRequest(
            guesser_attempt_text=attempt_text,
            subject_expressed_content=subject_content,
        )
        try_number = 0
        while True:
            try_number += 1
            start_time = time.perf_counter()
            try:
                raw = await asyncio.wait_for(
                    self._service.analyze(request), timeout=self._timeout_seconds
                )
                analysis = to_gap_analysis(raw)
            except asyncio.TimeoutError:
                error = GapAnalysisUnavailableError(
                    f"Gap analysis did not answer within {self._timeout_seconds}s",
                    reason="timeout",
                )
            except GapAnalysisUnavailableError as e:
                error = e
            except Exception as e:
                error = GapAnalysisUnavailableError(
                    f"Gap analysis service failed: {e}", reason="service_error"
                )
                error.__cause__ = e
            else:
                GAP_ANALYSIS_LATENCY.observe(time.perf_counter() - start_time)
                return analysis

            logger.warning(
                "gap_analysis_try_failed",
                try_number=try_number,
                reason=error.reason,
            )
            if try_number > self._max_retries:
                GAP_ANALYSIS_FAILURES.labels(reason=error.reason).inc()
                logger.warning("gap_analysis_failed", reason=error.reason)
                raise error
