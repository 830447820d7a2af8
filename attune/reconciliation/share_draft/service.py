"""Drafts a first-person message for a subject who accepted a share offer.

The draft is built from the offer's suggested focus and what the subject
already expressed. It goes back to the subject only.
"""

from pathlib import Path

from attune.observability.logging import get_logger
from attune.providers.llm import LLMExecutor, LLMMessage, ProviderError

logger = get_logger(__name__)

_PROMPT_TEMPLATE_PATH = Path(__file__).parent / "prompts" / "share_draft.txt"

_SYSTEM_PROMPT = (
    "You help people put their own feelings into a few honest words "
    "for someone they care about."
)

_NOTHING_EXPRESSED = "(Nothing yet.)"


class ShareDraftUnavailableError(Exception):
    """The draft model call failed or returned nothing usable."""


class ShareDraftWriter:
    """Writes share drafts through the LLM executor."""

    def __init__(
        self,
        llm_executor: LLMExecutor,
        prompt_template: str | None = None,
    ) -> None:
        self._llm_executor = llm_executor
        self._prompt_template = prompt_template or _PROMPT_TEMPLATE_PATH.read_text()

    async def draft(self, focus: str, expressed: list[str]) -> str:
        """Draft a message about focus in the subject's own voice.

        Raises:
            ShareDraftUnavailableError: If the model call failed or the
                answer was empty
        """
        prompt = self._prompt_template.format(
            focus=focus,
            expressed="\n\n".join(expressed) or _NOTHING_EXPRESSED,
        )
        messages = [
            LLMMessage(role="system", content=_SYSTEM_PROMPT),
            LLMMessage(role="user", content=prompt),
        ]

        try:
            response = await self._llm_executor.generate(messages)
        except ProviderError as e:
            raise ShareDraftUnavailableError(f"Share draft model call failed: {e}") from e

        text = response.content.strip().strip('"').strip()
        if not text:
            logger.warning("share_draft_empty", model=response.model)
            raise ShareDraftUnavailableError("Share draft answer was empty")
        return text
