"""Closing summary of an exchange once both directions are ready."""

from pathlib import Path

from pydantic import ValidationError

from attune.observability.logging import get_logger
from attune.providers.llm import LLMExecutor, LLMMessage, ProviderError
from attune.reconciliation.gap_analysis.service import extract_json
from attune.reconciliation.models import ExchangeSummary, ReconcilerResult

logger = get_logger(__name__)

_PROMPT_TEMPLATE_PATH = Path(__file__).parent / "prompts" / "exchange_summary.txt"

_SYSTEM_PROMPT = (
    "You write brief, encouraging reflections for two people working on "
    "mutual understanding. You answer only with JSON."
)


class SummaryUnavailableError(Exception):
    """The summary model call failed or returned garbage."""


def describe_direction(label: str, result: ReconcilerResult | None, revisions: int) -> str:
    """One prompt line per direction.

    Only the alignment score and revision count are used. How the
    direction became ready is never included.
    """
    if result is None or result.analysis is None:
        return f"- {label}: completed after {revisions} attempt(s)."
    analysis = result.analysis
    score = (
        f"alignment {analysis.alignment_score}/100"
        if analysis.alignment_score is not None
        else "alignment not scored"
    )
    return f"- {label}: {score}, {revisions} attempt(s)."


class ExchangeSummarizer:
    """Writes the closing summary through the LLM executor."""

    def __init__(
        self,
        llm_executor: LLMExecutor,
        prompt_template: str | None = None,
    ) -> None:
        self._llm_executor = llm_executor
        self._prompt_template = prompt_template or _PROMPT_TEMPLATE_PATH.read_text()

    async def summarize(self, direction_lines: list[str]) -> ExchangeSummary:
        """Summarize an exchange from per-direction descriptions.

        Raises:
            SummaryUnavailableError: If the model call or parsing failed
        """
        prompt = self._prompt_template.format(directions="\n".join(direction_lines))
        messages = [
            LLMMessage(role="system", content=_SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]

        try:
            response = await self._llm_executor.generate(messages)
        except ProviderError as e:
            raise SummaryUnavailableError(f"Summary model call failed: {e}") from e

        try:
            return ExchangeSummary.model_validate_json(extract_json(response.content))
        except ValidationError as e:
            logger.warning(
                "exchange_summary_parse_failed",
                model=response.model,
                error_count=e.error_count(),
            )
            raise SummaryUnavailableError("Summary answer was not valid JSON") from e
