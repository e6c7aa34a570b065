"""Press release schemas."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from app.services.press_release.types import (
    GenerationInput,
    OptimizationEntry,
    SEOSummary,
    SemanticDiff,
)

ReleaseStatusLiteral = Literal["draft", "generating", "complete", "error"]


class PressReleaseGenerateRequest(BaseModel):
    """Announcement brief for a new press release.

    Required-field checks happen in the generation service so that they
    surface as 400 responses with field details.
    """

    news_type: str
    announcement: str = ""
    company_name: str = ""
    company_description: str | None = None
    industry: str | None = None
    target_keywords: list[str] = Field(default_factory=list, max_length=20)
    spokesperson_name: str | None = None
    spokesperson_title: str | None = None
    secondary_spokesperson: str | None = None
    secondary_spokesperson_title: str | None = None
    preferred_angle: str | None = None
    additional_context: str | None = None
    target_audience: str | None = None
    tone: str | None = None
    personality_id: str | None = None
    competitor_mentions: list[str] = Field(default_factory=list, max_length=20)
    release_date: date | None = None
    headquarters: str | None = None

    def to_generation_input(self) -> GenerationInput:
        return GenerationInput.from_mapping(self.model_dump())


class PressReleaseGenerateResponse(BaseModel):
    """Result of a generation request."""

    id: str
    status: str
    headline: str | None = None
    word_count: int = 0


class AngleOptionResponse(BaseModel):
    """Scored angle recorded for a release."""

    position: int
    angle_title: str
    angle_description: str | None
    newsworthiness_score: float
    uniqueness_score: float
    relevance_score: float
    total_score: float
    is_selected: bool

    model_config = {"from_attributes": True}


class HeadlineVariantResponse(BaseModel):
    """Scored headline recorded for a release."""

    position: int
    headline: str
    score: float
    seo_score: float
    virality_score: float
    readability_score: float
    is_selected: bool

    model_config = {"from_attributes": True}


class PressReleaseResponse(BaseModel):
    """Press release list item."""

    id: str
    org_id: str
    user_id: str | None
    status: str
    headline: str | None
    angle: str | None
    word_count: int
    readability_score: float | None
    error_message: str | None
    error_stage: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PressReleaseDetailResponse(PressReleaseResponse):
    """Full press release with its generation audit trail."""

    input_json: dict[str, Any]
    personality_id: str | None
    subheadline: str | None
    dateline: str | None
    body: str | None
    quote_1: str | None
    quote_1_attribution: str | None
    quote_2: str | None
    quote_2_attribution: str | None
    boilerplate: str | None
    seo_summary_json: dict[str, Any] | None
    optimization_history: list[dict[str, Any]] | None
    angle_options: list[AngleOptionResponse] = Field(default_factory=list)
    headline_variants: list[HeadlineVariantResponse] = Field(default_factory=list)


class PressReleaseListResponse(BaseModel):
    """Paginated press release list."""

    items: list[PressReleaseResponse]
    total: int
    limit: int
    offset: int


class PressReleaseStatusUpdate(BaseModel):
    """Requested status transition."""

    status: ReleaseStatusLiteral
    error_message: str | None = None


class SEOSummaryResponse(BaseModel):
    """Keyword and readability summary."""

    primary_keyword: str | None
    secondary_keywords: list[str]
    keyword_density: dict[str, float]
    sentence_count: int
    avg_sentence_length: float
    readability_score: float
    readability_grade: str
    passive_voice_count: int
    suggestions: list[str]

    @classmethod
    def from_summary(cls, summary: SEOSummary) -> "SEOSummaryResponse":
        return cls.model_validate(summary.to_dict())


class OptimizationEntryResponse(BaseModel):
    """One optimization pass."""

    timestamp: str
    type: str
    changes: list[str]
    before_score: float
    after_score: float

    @classmethod
    def from_entry(cls, entry: OptimizationEntry) -> "OptimizationEntryResponse":
        return cls.model_validate(entry.to_dict())


class PressReleaseOptimizeResponse(BaseModel):
    """Optimized release, the applied changes and the new SEO summary."""

    release: PressReleaseDetailResponse
    changes: OptimizationEntryResponse
    seo_summary: SEOSummaryResponse


class SimilarReleaseResponse(BaseModel):
    """Release with a similar embedding."""

    id: str
    headline: str | None
    similarity: float
    created_at: datetime

    model_config = {"from_attributes": True}


class SemanticDiffRequest(BaseModel):
    """Two versions of a text to compare."""

    original: str = ""
    rewritten: str = ""


class SemanticDiffEntryResponse(BaseModel):
    type: Literal["added", "removed", "modified", "unchanged"]
    original: str | None = None
    rewritten: str | None = None


class SemanticDiffSummaryResponse(BaseModel):
    added: int
    removed: int
    modified: int
    unchanged: int


class SemanticDiffResponse(BaseModel):
    """Sentence-level diff."""

    entries: list[SemanticDiffEntryResponse]
    summary: SemanticDiffSummaryResponse

    @classmethod
    def from_diff(cls, diff: SemanticDiff) -> "SemanticDiffResponse":
        return cls(
            entries=[
                SemanticDiffEntryResponse(
                    type=entry.type,
                    original=entry.original,
                    rewritten=entry.rewritten,
                )
                for entry in diff.entries
            ],
            summary=SemanticDiffSummaryResponse(
                added=diff.summary.added,
                removed=diff.summary.removed,
                modified=diff.summary.modified,
                unchanged=diff.summary.unchanged,
            ),
        )


class SEOSummaryRequest(BaseModel):
    """Body text to score."""

    body: str = ""
    target_keywords: list[str] = Field(default_factory=list, max_length=20)
