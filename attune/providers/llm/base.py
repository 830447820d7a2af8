"""Messages, responses and errors shared by every LLM call."""

from typing import Any, Literal

from pydantic import BaseModel, Field

MessageRole = Literal["system", "user", "assistant"]


class LLMMessage(BaseModel):
    """One chat message sent to a model."""

    role: MessageRole
    content: str


class LLMResponse(BaseModel):
    """A model answer, tagged with the call it served."""

    content: str = Field(..., description="Generated text")
    model: str = Field(..., description="Model that answered, after any fallback")
    latency_ms: float | None = Field(default=None, description="Provider round trip")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Call kind, provider, session and direction tags",
    )


class ProviderError(Exception):
    """A model call failed."""


class RateLimitError(ProviderError):
    """The provider asked us to slow down; the next model is tried."""


class ProviderTimeoutError(ProviderError):
    """Provider did not answer within the executor timeout."""
