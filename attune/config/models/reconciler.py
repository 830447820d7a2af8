"""Reconciliation engine configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class GapAnalysisConfig(BaseModel):
    """Configuration for the external gap-analysis call."""

    service: Literal["llm", "static"] = Field(
        default="llm",
        description="llm calls a model; static replays a fixed verdict (development)",
    )
    static_severity: str = Field(
        default="none",
        description="Severity returned by the static service",
    )
    model: str = Field(
        default="openrouter/anthropic/claude-3.5-sonnet",
        description="Primary model for gap analysis",
    )
    fallback_models: list[str] = Field(
        default_factory=list,
        description="Models to try if the primary fails",
    )
    timeout_seconds: float = Field(
        default=8.0,
        gt=0,
        le=60,
        description="Ceiling for a single gap-analysis call",
    )
    max_retries: int = Field(
        default=1,
        ge=0,
        le=1,
        description="Retries after a failed call (the service is retried at most once)",
    )


class SummaryConfig(BaseModel):
    """Configuration for the post-reconciliation summary call."""

    enabled: bool = Field(default=True, description="Enable exchange summaries")
    model: str = Field(
        default="openrouter/anthropic/claude-3-haiku",
        description="Model for exchange summaries",
    )
    timeout_seconds: float = Field(default=15.0, gt=0, description="Call timeout")


class ShareDraftConfig(BaseModel):
    """Configuration for drafting context a subject could share."""

    enabled: bool = Field(default=True, description="Enable share drafts")
    model: str = Field(
        default="openrouter/anthropic/claude-3-haiku",
        description="Model for share drafts",
    )
    timeout_seconds: float = Field(default=15.0, gt=0, description="Call timeout")


class ReconcilerConfig(BaseModel):
    """Reconciliation engine configuration.

    The pass budget per direction is not configurable; see
    attune.reconciliation.circuit_breaker.MAX_ANALYSIS_PASSES.
    """

    gap_analysis: GapAnalysisConfig = Field(
        default_factory=GapAnalysisConfig,
        description="Gap analysis call settings",
    )
    summary: SummaryConfig = Field(
        default_factory=SummaryConfig,
        description="Exchange summary settings",
    )
    share_draft: ShareDraftConfig = Field(
        default_factory=ShareDraftConfig,
        description="Share draft settings",
    )
    analysis_stall_seconds: int = Field(
        default=120,
        gt=0,
        description="Age after which a direction stuck in analysis is failed open",
    )
