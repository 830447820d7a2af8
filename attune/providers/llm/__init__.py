"""LLM providers for text generation.

The primary interface is LLMExecutor, which:
- Takes a model string (e.g., "openrouter/anthropic/claude-3-haiku")
- Routes to the appropriate API via Agno model classes
- Supports fallback chains
- Tags every call with a CallKind

Model string formats:
- openrouter/{provider}/{model} -> Agno OpenRouter
- anthropic/{model} -> Agno Claude
- openai/{model} -> Agno OpenAIChat
- groq/{model} -> Agno Groq
- mock/{name} -> Mock response for testing
"""

from attune.providers.llm.base import (
    LLMMessage,
    LLMResponse,
    ProviderError,
    ProviderTimeoutError,
    RateLimitError,
)
from attune.providers.llm.call_kinds import (
    CALL_PROFILES,
    CallKind,
    CallProfile,
    profile_for,
)
from attune.providers.llm.executor import (
    ExecutionContext,
    LLMExecutor,
    clear_execution_context,
    create_executor,
    get_execution_context,
    set_execution_context,
)

__all__ = [
    # Data models
    "LLMMessage",
    "LLMResponse",
    # Errors
    "ProviderError",
    "ProviderTimeoutError",
    "RateLimitError",
    # Call kinds
    "CALL_PROFILES",
    "CallKind",
    "CallProfile",
    "profile_for",
    # Executor
    "LLMExecutor",
    "ExecutionContext",
    "set_execution_context",
    "get_execution_context",
    "clear_execution_context",
    "create_executor",
]
