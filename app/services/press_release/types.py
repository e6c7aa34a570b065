"""Domain types for the press release generation pipeline.

Every record is a frozen dataclass: a stage receives immutable values and
returns new ones, so a run can be replayed from its brief at any time.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Literal

NEWS_TYPES: tuple[str, ...] = (
    "product_launch",
    "funding",
    "partnership",
    "acquisition",
    "executive_hire",
    "award",
    "milestone",
    "event",
    "other",
)


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


def _clean_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item).strip() for item in value if item is not None and str(item).strip())


@dataclass(frozen=True, slots=True)
class GenerationInput:
    """Structured announcement brief."""

    news_type: str
    announcement: str
    company_name: str
    company_description: str | None = None
    industry: str | None = None
    target_keywords: tuple[str, ...] = ()
    spokesperson_name: str | None = None
    spokesperson_title: str | None = None
    secondary_spokesperson: str | None = None
    secondary_spokesperson_title: str | None = None
    preferred_angle: str | None = None
    additional_context: str | None = None
    target_audience: str | None = None
    tone: str | None = None
    personality_id: str | None = None
    competitor_mentions: tuple[str, ...] = ()
    release_date: date | None = None
    headquarters: str | None = None

    @classmethod
    def from_mapping(cls, payload: dict[str, Any] | None) -> GenerationInput:
        """Build a brief from a JSON-like mapping, tolerating missing keys."""
        data = payload if isinstance(payload, dict) else {}
        raw_date = data.get("release_date")
        release_date: date | None = None
        if isinstance(raw_date, date):
            release_date = raw_date
        elif isinstance(raw_date, str) and raw_date.strip():
            release_date = date.fromisoformat(raw_date.strip()[:10])

        return cls(
            news_type=_clean_text(data.get("news_type")) or "other",
            announcement=_clean_text(data.get("announcement")) or "",
            company_name=_clean_text(data.get("company_name")) or "",
            company_description=_clean_text(data.get("company_description")),
            industry=_clean_text(data.get("industry")),
            target_keywords=_clean_list(data.get("target_keywords")),
            spokesperson_name=_clean_text(data.get("spokesperson_name")),
            spokesperson_title=_clean_text(data.get("spokesperson_title")),
            secondary_spokesperson=_clean_text(data.get("secondary_spokesperson")),
            secondary_spokesperson_title=_clean_text(data.get("secondary_spokesperson_title")),
            preferred_angle=_clean_text(data.get("preferred_angle")),
            additional_context=_clean_text(data.get("additional_context")),
            target_audience=_clean_text(data.get("target_audience")),
            tone=_clean_text(data.get("tone")),
            personality_id=_clean_text(data.get("personality_id")),
            competitor_mentions=_clean_list(data.get("competitor_mentions")),
            release_date=release_date,
            headquarters=_clean_text(data.get("headquarters")),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "news_type": self.news_type,
            "announcement": self.announcement,
            "company_name": self.company_name,
            "company_description": self.company_description,
            "industry": self.industry,
            "target_keywords": list(self.target_keywords),
            "spokesperson_name": self.spokesperson_name,
            "spokesperson_title": self.spokesperson_title,
            "secondary_spokesperson": self.secondary_spokesperson,
            "secondary_spokesperson_title": self.secondary_spokesperson_title,
            "preferred_angle": self.preferred_angle,
            "additional_context": self.additional_context,
            "target_audience": self.target_audience,
            "tone": self.tone,
            "personality_id": self.personality_id,
            "competitor_mentions": list(self.competitor_mentions),
            "release_date": self.release_date.isoformat() if self.release_date else None,
            "headquarters": self.headquarters,
        }


@dataclass(frozen=True, slots=True)
class OrgProfile:
    """Organization record fields consulted while building the footprint."""

    name: str | None = None
    description: str | None = None
    industry: str | None = None
    headquarters: str | None = None


@dataclass(frozen=True, slots=True)
class CompanyFootprint:
    """Company identity used across the draft."""

    name: str
    description: str
    industry: str
    headquarters: str
    boilerplate: str


@dataclass(frozen=True, slots=True)
class PersonalityProfile:
    """Tone and style profile."""

    id: str
    name: str
    tone: str = "professional"
    voice_attributes: tuple[str, ...] = ()
    writing_style: str = "formal"


@dataclass(frozen=True, slots=True)
class SEOOpportunity:
    """Keyword opportunity tracked for the organization."""

    keyword: str
    search_volume: int = 0
    difficulty: float = 50.0
    relevance: float = 0.5


@dataclass(frozen=True, slots=True)
class GenerationContext:
    """Read-only bundle every downstream stage works from."""

    input: GenerationInput
    company_footprint: CompanyFootprint
    seo_keywords: tuple[str, ...]
    industry_trends: tuple[str, ...]
    personality: PersonalityProfile | None = None
    competitor_context: tuple[str, ...] = ()
    seo_opportunities: tuple[SEOOpportunity, ...] = ()

    def with_enrichment(
        self,
        *,
        industry_trends: tuple[str, ...] = (),
        competitor_context: tuple[str, ...] = (),
    ) -> GenerationContext:
        """Return a copy with extra trends/competitors appended (deduplicated)."""
        return replace(
            self,
            industry_trends=_merge_unique(self.industry_trends, industry_trends),
            competitor_context=_merge_unique(self.competitor_context, competitor_context),
        )


def _merge_unique(existing: tuple[str, ...], extra: tuple[str, ...]) -> tuple[str, ...]:
    seen = {item.lower() for item in existing}
    merged = list(existing)
    for item in extra:
        cleaned = item.strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            merged.append(cleaned)
    return tuple(merged)


@dataclass(frozen=True, slots=True)
class AngleOption:
    """Candidate narrative framing with its scores."""

    angle_title: str
    angle_description: str
    newsworthiness_score: float = 0.0
    uniqueness_score: float = 0.0
    relevance_score: float = 0.0
    total_score: float = 0.0
    is_selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "angle_title": self.angle_title,
            "angle_description": self.angle_description,
            "newsworthiness_score": self.newsworthiness_score,
            "uniqueness_score": self.uniqueness_score,
            "relevance_score": self.relevance_score,
            "total_score": self.total_score,
            "is_selected": self.is_selected,
        }


@dataclass(frozen=True, slots=True)
class AngleFinderResult:
    """Ranked angles plus the one chosen for drafting."""

    angles: tuple[AngleOption, ...]
    selected_angle: AngleOption
    reasoning: str


@dataclass(frozen=True, slots=True)
class HeadlineVariant:
    """Headline phrasing with its scores."""

    headline: str
    seo_score: float = 0.0
    virality_score: float = 0.0
    readability_score: float = 0.0
    score: float = 0.0
    is_selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "headline": self.headline,
            "seo_score": self.seo_score,
            "virality_score": self.virality_score,
            "readability_score": self.readability_score,
            "score": self.score,
            "is_selected": self.is_selected,
        }


@dataclass(frozen=True, slots=True)
class HeadlineGenerationResult:
    """Ranked headline variants plus the selected one."""

    variants: tuple[HeadlineVariant, ...]
    selected_headline: HeadlineVariant
    reasoning: str


@dataclass(frozen=True, slots=True)
class Draft:
    """Assembled press release draft."""

    headline: str
    subheadline: str
    dateline: str
    body: str
    paragraphs: tuple[str, ...]
    quote1: str
    quote1_attribution: str
    boilerplate: str
    word_count: int
    quote2: str = ""
    quote2_attribution: str = ""


@dataclass(frozen=True, slots=True)
class SEOSummary:
    """Keyword and readability summary of a release body."""

    primary_keyword: str | None
    secondary_keywords: tuple[str, ...]
    keyword_density: dict[str, float]
    sentence_count: int
    avg_sentence_length: float
    readability_score: float
    readability_grade: str
    passive_voice_count: int
    suggestions: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_keyword": self.primary_keyword,
            "secondary_keywords": list(self.secondary_keywords),
            "keyword_density": dict(self.keyword_density),
            "sentence_count": self.sentence_count,
            "avg_sentence_length": self.avg_sentence_length,
            "readability_score": self.readability_score,
            "readability_grade": self.readability_grade,
            "passive_voice_count": self.passive_voice_count,
            "suggestions": list(self.suggestions),
        }


DiffEntryType = Literal["added", "removed", "modified", "unchanged"]


@dataclass(frozen=True, slots=True)
class SemanticDiffEntry:
    """One sentence-level change."""

    type: DiffEntryType
    original: str | None = None
    rewritten: str | None = None


@dataclass(frozen=True, slots=True)
class SemanticDiffSummary:
    """Sentence counts per diff category."""

    added: int = 0
    removed: int = 0
    modified: int = 0
    unchanged: int = 0


@dataclass(frozen=True, slots=True)
class SemanticDiff:
    """Sentence diff between two versions of a text."""

    entries: tuple[SemanticDiffEntry, ...]
    summary: SemanticDiffSummary


@dataclass(frozen=True, slots=True)
class OptimizationEntry:
    """Audit record of one optimization pass."""

    timestamp: str
    type: str
    changes: tuple[str, ...]
    before_score: float
    after_score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "type": self.type,
            "changes": list(self.changes),
            "before_score": self.before_score,
            "after_score": self.after_score,
        }


@dataclass(frozen=True, slots=True)
class OptimizationResult:
    """Optimized copy with the before/after SEO summaries."""

    headline: str
    body: str
    seo_before: SEOSummary
    seo_after: SEOSummary
    entry: OptimizationEntry


@dataclass(frozen=True, slots=True)
class PipelineArtifacts:
    """Everything one generation run produced."""

    context: GenerationContext
    angles: AngleFinderResult
    headlines: HeadlineGenerationResult
    draft: Draft
    seo_summary: SEOSummary
    stage_timings_ms: dict[str, float] = field(default_factory=dict)
