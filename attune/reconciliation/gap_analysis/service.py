"""Gap-analysis services.

A GapAnalysisService compares a guesser's attempt with what the subject
expressed and returns the raw verdict. The engine never calls a service
directly; it goes through GapAnalyzerAdapter, which owns timeouts,
retries and normalization.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from attune.observability.logging import get_logger
from attune.providers.llm import LLMExecutor, LLMMessage, ProviderError
from attune.reconciliation.exceptions import GapAnalysisUnavailableError
from attune.reconciliation.gap_analysis.models import (
    GapAnalysisRequest,
    RawGapAnalysis,
    RawGaps,
    RawRecommendation,
)

logger = get_logger(__name__)

_PROMPT_TEMPLATE_PATH = Path(__file__).parent / "prompts" / "gap_analysis.txt"

_SYSTEM_PROMPT = (
    "You assess how well one person understood another person's feelings. "
    "You are careful, warm and precise, and you answer only with JSON."
)

_NOTHING_EXPRESSED = "(The subject has not expressed anything yet.)"


class GapAnalysisService(ABC):
    """External semantic comparison of an attempt against the subject's words."""

    @abstractmethod
    async def analyze(self, request: GapAnalysisRequest) -> RawGapAnalysis:
        """Compare an attempt with what the subject expressed.

        Raises:
            GapAnalysisUnavailableError: If no usable verdict was produced
        """
        pass


def extract_json(content: str) -> str:
    """Strip a markdown code fence around a JSON answer, if present."""
    content = content.strip()
    if "```json" in content:
        start = content.find("```json") + 7
        end = content.find("```", start)
        if end > start:
            content = content[start:end].strip()
    elif "```" in content:
        start = content.find("```") + 3
        end = content.find("```", start)
        if end > start:
            content = content[start:end].strip()
    return content


class LLMGapAnalysisService(GapAnalysisService):
    """Gap analysis performed by a language model."""

    def __init__(
        self,
        llm_executor: LLMExecutor,
        prompt_template: str | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            llm_executor: Executor configured for CallKind.GAP_ANALYSIS
            prompt_template: Optional custom prompt template
        """
        self._llm_executor = llm_executor
        self._prompt_template = prompt_template or _PROMPT_TEMPLATE_PATH.read_text()

    def _build_messages(self, request: GapAnalysisRequest) -> list[LLMMessage]:
        subject_content = "\n\n".join(request.subject_expressed_content)
        prompt = self._prompt_template.format(
            guesser_attempt=request.guesser_attempt_text,
            subject_content=subject_content or _NOTHING_EXPRESSED,
        )
        return [
            LLMMessage(role="system", content=_SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]

    async def analyze(self, request: GapAnalysisRequest) -> RawGapAnalysis:
        """Ask the model for a verdict and validate its JSON."""
        try:
            response = await self._llm_executor.generate(self._build_messages(request))
        except ProviderError as e:
            raise GapAnalysisUnavailableError(
                f"Gap analysis model call failed: {e}", reason="provider_error"
            ) from e

        try:
            return RawGapAnalysis.model_validate_json(extract_json(response.content))
        except ValidationError as e:
            logger.warning(
                "gap_analysis_parse_failed",
                model=response.model,
                error_count=e.error_count(),
            )
            raise GapAnalysisUnavailableError(
                "Gap analysis answer was not valid JSON", reason="unparseable"
            ) from e


ScriptedResponse = RawGapAnalysis | str | Exception


class StaticGapAnalysisService(GapAnalysisService):
    """Scripted gap analysis for development and tests.

    Replays the scripted responses in order and keeps repeating the last
    one. A string is shorthand for a verdict with that severity, and an
    exception is raised instead of returned.
    """

    def __init__(
        self,
        responses: Sequence[ScriptedResponse] | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        self._responses = list(responses) if responses else ["none"]
        self._delay_seconds = delay_seconds
        self.requests: list[GapAnalysisRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def analyze(self, request: GapAnalysisRequest) -> RawGapAnalysis:
        """Return the next scripted verdict."""
        index = min(len(self.requests), len(self._responses) - 1)
        self.requests.append(request)

        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)

        response = self._responses[index]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, str):
            return static_verdict(response)
        return response


def static_verdict(severity: str, share_focus: str | None = None) -> RawGapAnalysis:
    """Build a minimal verdict with the given raw severity."""
    if share_focus is None and severity != "none":
        share_focus = "what sits underneath the frustration"
    return RawGapAnalysis(
        gaps=RawGaps(severity=severity),
        recommendation=RawRecommendation(suggested_share_focus=share_focus),
    )
