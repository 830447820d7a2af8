"""Gap analysis: comparing an empathy attempt with what the subject expressed."""

from attune.reconciliation.gap_analysis.adapter import (
    GapAnalyzerAdapter,
    normalize_severity,
    to_gap_analysis,
)
from attune.reconciliation.gap_analysis.models import (
    GapAnalysisRequest,
    RawAbstractGuidance,
    RawAlignment,
    RawGapAnalysis,
    RawGaps,
    RawRecommendation,
)
from attune.reconciliation.gap_analysis.service import (
    GapAnalysisService,
    LLMGapAnalysisService,
    StaticGapAnalysisService,
    extract_json,
    static_verdict,
)

__all__ = [
    "GapAnalyzerAdapter",
    "normalize_severity",
    "to_gap_analysis",
    "GapAnalysisRequest",
    "RawAbstractGuidance",
    "RawAlignment",
    "RawGapAnalysis",
    "RawGaps",
    "RawRecommendation",
    "GapAnalysisService",
    "LLMGapAnalysisService",
    "StaticGapAnalysisService",
    "extract_json",
    "static_verdict",
]
