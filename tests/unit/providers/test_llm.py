"""Tests for the LLM executor and call kinds."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from attune.providers.llm import (
    CALL_PROFILES,
    CallKind,
    ExecutionContext,
    LLMExecutor,
    LLMMessage,
    LLMResponse,
    ProviderError,
    RateLimitError,
    clear_execution_context,
    create_executor,
    get_execution_context,
    profile_for,
    set_execution_context,
)

MESSAGES = [
    LLMMessage(role="system", content="You answer with JSON."),
    LLMMessage(role="user", content="Compare these."),
]


class TestCallKinds:
    """Tests for CallKind profiles."""

    def test_every_kind_has_a_profile(self) -> None:
        assert set(CALL_PROFILES) == set(CallKind)

    def test_gap_analysis_is_deterministic(self) -> None:
        profile = profile_for(CallKind.GAP_ANALYSIS)
        assert profile.temperature == 0.0
        assert profile.metric_label == "gap_analysis"

    def test_share_draft_profile(self) -> None:
        profile = profile_for(CallKind.SHARE_DRAFT)
        assert profile.metric_label == "share_draft"
        assert profile.temperature > 0.0


class TestExecutionContext:
    """Tests for the execution context contextvar."""

    def test_set_get_clear(self) -> None:
        ctx = ExecutionContext(session_id=uuid4(), direction_key="k")
        set_execution_context(ctx)
        assert get_execution_context() is ctx

        clear_execution_context()
        assert get_execution_context() is None


class TestLLMExecutor:
    """Tests for LLMExecutor."""

    async def test_mock_model(self) -> None:
        executor = LLMExecutor(
            model="mock/test",
            call_kind=CallKind.GAP_ANALYSIS,
            mock_response='{"ok": true}',
        )

        response = await executor.generate(MESSAGES)

        assert isinstance(response, LLMResponse)
        assert response.content == '{"ok": true}'
        assert response.metadata["call_kind"] == "gap_analysis"
        assert response.metadata["provider"] == "mock"
        assert response.latency_ms is None

    async def test_metadata_carries_context(self) -> None:
        executor = create_executor(model="mock/test", call_kind=CallKind.EXCHANGE_SUMMARY)
        session_id = uuid4()
        set_execution_context(ExecutionContext(session_id=session_id, direction_key="d"))
        try:
            response = await executor.generate(MESSAGES)
        finally:
            clear_execution_context()

        assert response.metadata["session_id"] == str(session_id)
        assert response.metadata["direction"] == "d"

    async def test_falls_back_to_next_model(self) -> None:
        executor = LLMExecutor(
            model="openai/gpt-4o",
            call_kind=CallKind.GAP_ANALYSIS,
            fallback_models=["mock/fallback"],
            mock_response="fallback answer",
        )

        with patch.object(
            executor, "_get_or_create_agent", side_effect=RateLimitError("slow down")
        ):
            response = await executor.generate(MESSAGES)

        assert response.model == "mock/fallback"
        assert response.content == "fallback answer"

    async def test_all_models_failing_raises(self) -> None:
        executor = LLMExecutor(
            model="openai/gpt-4o",
            call_kind=CallKind.GAP_ANALYSIS,
            fallback_models=["anthropic/claude-3-haiku"],
        )

        with patch.object(
            executor,
            "_generate_with_model",
            AsyncMock(side_effect=ProviderError("down")),
        ):
            with pytest.raises(ProviderError, match="All models failed"):
                await executor.generate(MESSAGES)

    @pytest.mark.parametrize(
        ("model", "expected"),
        [
            ("openrouter/anthropic/claude-3-haiku", ("openrouter", "anthropic/claude-3-haiku")),
            ("anthropic/claude-3-haiku", ("anthropic", "claude-3-haiku")),
            ("mock/test", ("mock", "test")),
            ("bare-model", ("mock", "bare-model")),
        ],
    )
    def test_parse_model(self, model: str, expected: tuple[str, str]) -> None:
        executor = LLMExecutor(model="mock/x", call_kind=CallKind.GAP_ANALYSIS)
        assert executor._parse_model(model) == expected

    def test_system_prompt_split_from_input(self) -> None:
        executor = LLMExecutor(model="mock/x", call_kind=CallKind.GAP_ANALYSIS)

        assert executor._get_system_prompt(MESSAGES) == "You answer with JSON."
        assert executor._format_messages_for_agno(MESSAGES) == "Compare these."
