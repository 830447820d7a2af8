"""LLM Executor - Executes model calls for one call kind using Agno.

Each call kind (gap analysis, exchange summary) gets its own executor
configured with:
- A specific model (from config)
- Fallback models (optional)
- A per-call timeout

The executor handles:
- Model selection and API routing based on model string prefix
- Fallback chain on failure (Agno doesn't have this natively)
- Observability (latency, call-kind metrics)
- Session/direction context via ExecutionContext

Uses Agno model classes internally:
- OpenRouter for openrouter/* models
- Claude for anthropic/* models
- OpenAIChat for openai/* models
- Groq for groq/* models
"""

from __future__ import annotations

import asyncio
import time
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from uuid import UUID

from attune.observability.logging import get_logger
from attune.observability.metrics import LLM_CALLS
from attune.providers.llm.base import (
    LLMMessage,
    LLMResponse,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)
from attune.providers.llm.call_kinds import CallKind, profile_for

if TYPE_CHECKING:
    from agno.agent import Agent

logger = get_logger(__name__)


# ============================================================================
# Execution Context (avoids parameter threading)
# ============================================================================


@dataclass
class ExecutionContext:
    """Context for LLM execution - session and direction info."""

    session_id: UUID
    direction_key: str | None = None


_execution_context: ContextVar[ExecutionContext | None] = ContextVar(
    "execution_context", default=None
)


def set_execution_context(ctx: ExecutionContext) -> None:
    """Set execution context for current async task."""
    _execution_context.set(ctx)


def get_execution_context() -> ExecutionContext | None:
    """Get execution context for current async task."""
    return _execution_context.get()


def clear_execution_context() -> None:
    """Clear execution context."""
    _execution_context.set(None)


# ============================================================================
# LLM Executor
# ============================================================================


class LLMExecutor:
    """Executes model calls for one call kind using Agno.

    Model string format:
        openrouter/anthropic/claude-3-haiku -> OpenRouter(id="anthropic/claude-3-haiku")
        anthropic/claude-3-haiku -> Claude(id="claude-3-haiku")
        openai/gpt-4o -> OpenAIChat(id="gpt-4o")
        groq/llama-3.1-70b -> Groq(id="llama-3.1-70b")
        mock/test -> Mock response (for testing)

    Example:
        executor = LLMExecutor(
            model="openrouter/anthropic/claude-3.5-sonnet",
            call_kind=CallKind.GAP_ANALYSIS,
            timeout=8.0,
        )

        response = await executor.generate(
            messages=[LLMMessage(role="user", content="Hello")],
        )
    """

    def __init__(
        self,
        model: str,
        call_kind: CallKind,
        fallback_models: list[str] | None = None,
        timeout: float = 60.0,
        mock_response: str | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            model: Primary model string (e.g., 'openrouter/anthropic/claude-3-haiku')
            call_kind: Kind of call this executor serves
            fallback_models: Models to try if primary fails
            timeout: Per-model request timeout in seconds
            mock_response: Content returned by mock/* models
        """
        self._model = model
        self._call_kind = call_kind
        self._profile = profile_for(call_kind)
        self._fallback_models = fallback_models or []
        self._timeout = timeout
        self._mock_response = mock_response

        # Cache for Agno agents (one per model string)
        self._agents: dict[str, Agent] = {}

    @property
    def model(self) -> str:
        """Primary model for this executor."""
        return self._model

    @property
    def call_kind(self) -> CallKind:
        """Call kind this executor serves."""
        return self._call_kind

    async def generate(self, messages: list[LLMMessage]) -> LLMResponse:
        """Generate text from messages.

        Uses primary model, falls back to fallback_models on failure.

        Raises:
            ProviderError: When every model failed
        """
        models_to_try = [self._model] + self._fallback_models
        last_error: Exception | None = None
        label = self._profile.metric_label

        ctx = get_execution_context()

        for model in models_to_try:
            try:
                response = await self._generate_with_model(model, messages)
            except RateLimitError as e:
                logger.warning(
                    "executor_rate_limited",
                    model=model,
                    call_kind=label,
                    error=str(e),
                )
                last_error = e
                continue
            except ProviderError as e:
                logger.warning(
                    "executor_provider_error",
                    model=model,
                    call_kind=label,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                last_error = e
                continue

            if ctx:
                response.metadata["session_id"] = str(ctx.session_id)
                if ctx.direction_key:
                    response.metadata["direction"] = ctx.direction_key
            response.metadata["call_kind"] = label

            LLM_CALLS.labels(call_kind=label, outcome="success").inc()
            return response

        LLM_CALLS.labels(call_kind=label, outcome="failure").inc()
        raise ProviderError(
            f"All models failed for {label}. "
            f"Tried: {models_to_try}. Last error: {last_error}"
        )

    # ========================================================================
    # Internal: Agno-based execution
    # ========================================================================

    def _get_or_create_agent(self, model: str) -> Agent | None:
        """Get cached Agno agent or create new one for model."""
        if model in self._agents:
            return self._agents[model]

        agno_model = self._create_agno_model(model)
        if agno_model is None:
            return None

        from agno.agent import Agent

        agent = Agent(
            model=agno_model,
            markdown=False,
        )
        self._agents[model] = agent
        return agent

    def _create_agno_model(self, model: str) -> Any:
        """Create Agno model class from model string.

        Returns None for mock models.
        """
        provider_type, api_model = self._parse_model(model)
        max_tokens = self._profile.max_tokens
        temperature = self._profile.temperature

        if provider_type == "openrouter":
            from agno.models.openrouter import OpenRouter

            return OpenRouter(id=api_model, max_tokens=max_tokens, temperature=temperature)

        elif provider_type == "anthropic":
            from agno.models.anthropic import Claude

            return Claude(id=api_model, max_tokens=max_tokens, temperature=temperature)

        elif provider_type == "openai":
            from agno.models.openai import OpenAIChat

            return OpenAIChat(id=api_model, max_tokens=max_tokens, temperature=temperature)

        elif provider_type == "groq":
            from agno.models.groq import Groq

            return Groq(id=api_model, max_tokens=max_tokens, temperature=temperature)

        elif provider_type == "mock":
            return None

        else:
            from agno.models.openrouter import OpenRouter

            logger.warning(
                "unknown_provider_defaulting_to_openrouter",
                model=model,
                provider_type=provider_type,
            )
            return OpenRouter(id=model, max_tokens=max_tokens, temperature=temperature)

    def _format_messages_for_agno(self, messages: list[LLMMessage]) -> str:
        """Convert our messages to Agno input format.

        Agno agents take a string input. System messages are handled
        separately through agent instructions.
        """
        user_messages = [m for m in messages if m.role != "system"]

        if len(user_messages) == 1:
            return user_messages[0].content

        parts = []
        for msg in user_messages:
            if msg.role == "user":
                parts.append(f"User: {msg.content}")
            elif msg.role == "assistant":
                parts.append(f"Assistant: {msg.content}")
        return "\n\n".join(parts)

    def _get_system_prompt(self, messages: list[LLMMessage]) -> str | None:
        """Extract system prompt from messages."""
        for msg in messages:
            if msg.role == "system":
                return msg.content
        return None

    async def _generate_with_model(
        self,
        model: str,
        messages: list[LLMMessage],
    ) -> LLMResponse:
        """Execute generation with a specific model using Agno."""
        provider_type, _ = self._parse_model(model)

        if provider_type == "mock":
            return self._mock_llm_response(model)

        agent = self._get_or_create_agent(model)
        if agent is None:
            return self._mock_llm_response(model)

        input_text = self._format_messages_for_agno(messages)
        system_prompt = self._get_system_prompt(messages)
        if system_prompt:
            agent.instructions = [system_prompt]

        start_time = time.perf_counter()

        try:
            run_response = await asyncio.wait_for(
                agent.arun(input_text), timeout=self._timeout
            )
            content = run_response.content if run_response.content else ""
        except asyncio.TimeoutError as e:
            raise ProviderTimeoutError(
                f"{model} did not answer within {self._timeout}s"
            ) from e
        except Exception as e:
            error_msg = str(e).lower()
            if "rate" in error_msg and "limit" in error_msg:
                raise RateLimitError(f"Rate limited: {e}") from e
            raise ProviderError(f"Agno execution failed: {e}") from e

        latency_ms = (time.perf_counter() - start_time) * 1000

        logger.debug(
            "executor_generate_complete",
            model=model,
            call_kind=self._profile.metric_label,
            latency_ms=round(latency_ms, 2),
            content_length=len(content),
        )

        return LLMResponse(
            content=content,
            model=model,
            latency_ms=latency_ms,
            metadata={"provider": provider_type},
        )

    def _mock_llm_response(self, model: str) -> LLMResponse:
        """Generate mock response for testing."""
        return LLMResponse(
            content=self._mock_response or f"Mock response for {model}",
            model=model,
            metadata={"provider": "mock"},
        )

    def _parse_model(self, model: str) -> tuple[str, str]:
        """Parse model string into (provider_type, api_model).

        Examples:
            "openrouter/anthropic/claude-3-haiku" -> ("openrouter", "anthropic/claude-3-haiku")
            "anthropic/claude-3-haiku" -> ("anthropic", "claude-3-haiku")
            "mock/test" -> ("mock", "test")
        """
        parts = model.split("/")

        if len(parts) >= 3 and parts[0] == "openrouter":
            return "openrouter", "/".join(parts[1:])
        elif len(parts) >= 2:
            return parts[0], "/".join(parts[1:])
        else:
            return "mock", model


def create_executor(
    model: str,
    call_kind: CallKind,
    fallback_models: list[str] | None = None,
    timeout: float = 60.0,
) -> LLMExecutor:
    """Create an LLMExecutor with the given configuration."""
    return LLMExecutor(
        model=model,
        call_kind=call_kind,
        fallback_models=fallback_models,
        timeout=timeout,
    )
