"""Wire models for the gap-analysis service.

The service answers with camelCase JSON. These models accept either
camelCase or snake_case and leave severity as a raw string; the adapter
normalizes it.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GapAnalysisRequest(BaseModel):
    """Input for one gap-analysis call."""

    guesser_attempt_text: str = Field(..., description="The guesser's attempt")
    subject_expressed_content: list[str] = Field(
        default_factory=list,
        description="What the subject expressed, including shared context",
    )


class RawAlignment(_WireModel):
    score: int | None = Field(default=None, ge=0, le=100)
    summary: str | None = None
    correctly_identified: list[str] = Field(default_factory=list)


class RawGaps(_WireModel):
    severity: str = Field(..., description="none|minor|moderate|significant")
    summary: str | None = None
    missed_feelings: list[str] = Field(default_factory=list)
    misattributions: list[str] = Field(default_factory=list)
    most_important_gap: str | None = None


class RawRecommendation(_WireModel):
    action: str | None = None
    rationale: str | None = None
    sharing_would_help: bool | None = None
    suggested_share_focus: str | None = None


class RawAbstractGuidance(_WireModel):
    area_hint: str | None = None
    guidance_type: str | None = None
    prompt_seed: str | None = None


class RawGapAnalysis(_WireModel):
    """Full response of the gap-analysis service."""

    alignment: RawAlignment = Field(default_factory=RawAlignment)
    gaps: RawGaps
    recommendation: RawRecommendation = Field(default_factory=RawRecommendation)
    abstract_guidance: RawAbstractGuidance | None = None
