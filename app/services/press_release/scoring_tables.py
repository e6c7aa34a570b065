"""Versioned scoring and template tables for press release generation.

Weights, keyword lists and phrasing templates live in ``scoring_tables.yaml``
so scoring behavior can be audited and changed without touching stage code.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

import yaml

from app.config import settings

logger = logging.getLogger(__name__)

DEFAULT_TABLE_KEY = "default"
MIN_ANGLE_OPTIONS = 3
MIN_HEADLINE_VARIANTS = 5

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class AngleArchetype:
    """Angle title plus a description template."""

    title: str
    description: str


@dataclass(frozen=True, slots=True)
class AngleWeights:
    newsworthiness: float
    uniqueness: float
    relevance: float


@dataclass(frozen=True, slots=True)
class NewsworthinessRules:
    base_by_news_type: dict[str, float]
    default_base: float
    impact_terms: tuple[str, ...]
    impact_bonus: float
    magnitude_terms: tuple[str, ...]
    numeric_signal_bonus: float


@dataclass(frozen=True, slots=True)
class UniquenessRules:
    base: float
    stock_terms: tuple[str, ...]
    stock_penalty: float
    long_description_chars: int
    long_description_bonus: float
    detail_bonus: float
    min_detail_token_length: int


@dataclass(frozen=True, slots=True)
class RelevanceRules:
    base: float
    keyword_bonus: float


@dataclass(frozen=True, slots=True)
class AngleScoring:
    weights: AngleWeights
    newsworthiness: NewsworthinessRules
    uniqueness: UniquenessRules
    relevance: RelevanceRules


@dataclass(frozen=True, slots=True)
class HeadlineTemplates:
    max_variants: int
    by_news_type: dict[str, tuple[str, ...]]
    by_angle: tuple[str, ...]
    by_keyword: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class HeadlineWeights:
    seo: float
    virality: float
    readability: float


@dataclass(frozen=True, slots=True)
class HeadlineSEORules:
    base: float
    keyword_bonus: float
    front_keyword_bonus: float
    ideal_word_range: tuple[int, int]
    ideal_length_bonus: float
    min_words: int
    max_words: int
    length_penalty: float
    company_bonus: float
    company_lead_bonus: float


@dataclass(frozen=True, slots=True)
class HeadlineViralityRules:
    base: float
    power_words: tuple[str, ...]
    power_word_bonus: float
    digit_bonus: float
    brevity_range: tuple[int, int]
    brevity_bonus: float
    clickbait_terms: tuple[str, ...]
    clickbait_penalty: float


@dataclass(frozen=True, slots=True)
class HeadlineReadabilityRules:
    base: float
    long_word_threshold: float
    long_word_penalty: float
    short_word_threshold: float
    short_word_bonus: float
    punctuation_penalty: float
    max_words: int
    length_penalty: float
    clause_markers: tuple[str, ...]
    clause_penalty: float


@dataclass(frozen=True, slots=True)
class HeadlineScoring:
    weights: HeadlineWeights
    seo: HeadlineSEORules
    virality: HeadlineViralityRules
    readability: HeadlineReadabilityRules


@dataclass(frozen=True, slots=True)
class DraftPhrases:
    quote_openers: dict[str, str]
    secondary_quote: str


@dataclass(frozen=True, slots=True)
class SEORules:
    min_word_count: int
    max_avg_sentence_length: float
    chars_per_syllable: float
    readability_grades: tuple[tuple[float, str], ...]


@dataclass(frozen=True, slots=True)
class ScoringTables:
    """All tables consumed by the generation stages."""

    version: int
    industry_trends: dict[str, tuple[str, ...]]
    angles_by_news_type: dict[str, tuple[AngleArchetype, ...]]
    generic_angles: tuple[AngleArchetype, ...]
    angle_scoring: AngleScoring
    headline_templates: HeadlineTemplates
    headline_scoring: HeadlineScoring
    draft: DraftPhrases
    seo: SEORules

    def trends_for(self, news_type: str) -> tuple[str, ...]:
        return self.industry_trends.get(news_type) or self.industry_trends[DEFAULT_TABLE_KEY]

    def angles_for(self, news_type: str) -> tuple[AngleArchetype, ...]:
        specific = self.angles_by_news_type.get(news_type)
        if specific is None:
            specific = self.angles_by_news_type[DEFAULT_TABLE_KEY]
        return specific + self.generic_angles

    def headline_templates_for(self, news_type: str) -> tuple[str, ...]:
        by_type = self.headline_templates.by_news_type
        return by_type.get(news_type) or by_type[DEFAULT_TABLE_KEY]

    def quote_opener_for(self, tone: str | None) -> str:
        openers = self.draft.quote_openers
        if tone and tone.strip().lower() in openers:
            return openers[tone.strip().lower()]
        return openers[DEFAULT_TABLE_KEY]


def _require_mapping(payload: Any, name: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"scoring tables: '{name}' must be a mapping")
    return payload


def _require_list(payload: Any, name: str) -> list[Any]:
    if not isinstance(payload, list) or not payload:
        raise ValueError(f"scoring tables: '{name}' must be a non-empty list")
    return payload


def _build(cls: type[T], payload: Any, name: str) -> T:
    """Build a flat rules dataclass from a mapping, converting lists to tuples."""
    section = _require_mapping(payload, name)
    values: dict[str, Any] = {}
    for item in fields(cls):  # type: ignore[arg-type]
        if item.name not in section:
            raise ValueError(f"scoring tables: '{name}.{item.name}' is required")
        value = section[item.name]
        if isinstance(value, list):
            value = tuple(tuple(entry) if isinstance(entry, list) else entry for entry in value)
        values[item.name] = value
    return cls(**values)


def _string_tuple_map(payload: Any, name: str) -> dict[str, tuple[str, ...]]:
    mapping = _require_mapping(payload, name)
    result = {
        str(key): tuple(str(value) for value in _require_list(values, f"{name}.{key}"))
        for key, values in mapping.items()
    }
    if DEFAULT_TABLE_KEY not in result:
        raise ValueError(f"scoring tables: '{name}' must include a '{DEFAULT_TABLE_KEY}' entry")
    return result


def _archetypes(payload: Any, name: str) -> tuple[AngleArchetype, ...]:
    archetypes: list[AngleArchetype] = []
    for index, entry in enumerate(_require_list(payload, name)):
        item = _require_mapping(entry, f"{name}[{index}]")
        title = str(item.get("title", "")).strip()
        if not title:
            raise ValueError(f"scoring tables: '{name}[{index}].title' must be non-empty")
        archetypes.append(
            AngleArchetype(title=title, description=str(item.get("description", "")).strip())
        )
    return tuple(archetypes)


def _check_minimum_options(tables: ScoringTables) -> None:
    """Every news type must still offer enough angles and headline templates."""
    for news_type in tables.angles_by_news_type:
        count = len({angle.title.lower() for angle in tables.angles_for(news_type)})
        if count < MIN_ANGLE_OPTIONS:
            raise ValueError(
                f"scoring tables: angles for '{news_type}' plus generic yield {count} "
                f"distinct archetypes, need at least {MIN_ANGLE_OPTIONS}"
            )

    templates = tables.headline_templates
    if DEFAULT_TABLE_KEY not in templates.by_news_type:
        raise ValueError("scoring tables: 'headlines.by_news_type' must include a 'default' entry")
    if templates.max_variants < MIN_HEADLINE_VARIANTS:
        raise ValueError(
            f"scoring tables: 'headlines.max_variants' must be at least {MIN_HEADLINE_VARIANTS}"
        )
    for news_type in templates.by_news_type:
        count = len(set(tables.headline_templates_for(news_type) + templates.by_angle))
        if count < MIN_HEADLINE_VARIANTS:
            raise ValueError(
                f"scoring tables: headline templates for '{news_type}' plus by_angle yield "
                f"{count} distinct templates, need at least {MIN_HEADLINE_VARIANTS}"
            )


def parse_scoring_tables(payload: Any) -> ScoringTables:
    """Validate a decoded YAML payload and build the tables."""
    root = _require_mapping(payload, "root")

    version = root.get("version")
    if not isinstance(version, int):
        raise ValueError("scoring tables: 'version' must be an integer")

    angles = _require_mapping(root.get("angles"), "angles")
    by_news_type = _require_mapping(angles.get("by_news_type"), "angles.by_news_type")
    if DEFAULT_TABLE_KEY not in by_news_type:
        raise ValueError("scoring tables: 'angles.by_news_type' must include a 'default' entry")

    angle_scoring = _require_mapping(root.get("angle_scoring"), "angle_scoring")
    headlines = _require_mapping(root.get("headlines"), "headlines")
    headline_scoring = _require_mapping(root.get("headline_scoring"), "headline_scoring")
    draft = _require_mapping(root.get("draft"), "draft")
    quote_openers = _require_mapping(draft.get("quote_openers"), "draft.quote_openers")
    if DEFAULT_TABLE_KEY not in quote_openers:
        raise ValueError("scoring tables: 'draft.quote_openers' must include a 'default' entry")

    tables = ScoringTables(
        version=version,
        industry_trends=_string_tuple_map(root.get("industry_trends"), "industry_trends"),
        angles_by_news_type={
            str(key): _archetypes(value, f"angles.by_news_type.{key}")
            for key, value in by_news_type.items()
        },
        generic_angles=_archetypes(angles.get("generic"), "angles.generic"),
        angle_scoring=AngleScoring(
            weights=_build(AngleWeights, angle_scoring.get("weights"), "angle_scoring.weights"),
            newsworthiness=_build(
                NewsworthinessRules,
                angle_scoring.get("newsworthiness"),
                "angle_scoring.newsworthiness",
            ),
            uniqueness=_build(
                UniquenessRules,
                angle_scoring.get("uniqueness"),
                "angle_scoring.uniqueness",
            ),
            relevance=_build(
                RelevanceRules,
                angle_scoring.get("relevance"),
                "angle_scoring.relevance",
            ),
        ),
        headline_templates=HeadlineTemplates(
            max_variants=int(headlines.get("max_variants", 12)),
            by_news_type=_string_tuple_map(headlines.get("by_news_type"), "headlines.by_news_type"),
            by_angle=tuple(str(item) for item in _require_list(headlines.get("by_angle"), "headlines.by_angle")),
            by_keyword=tuple(
                str(item) for item in _require_list(headlines.get("by_keyword"), "headlines.by_keyword")
            ),
        ),
        headline_scoring=HeadlineScoring(
            weights=_build(
                HeadlineWeights,
                headline_scoring.get("weights"),
                "headline_scoring.weights",
            ),
            seo=_build(HeadlineSEORules, headline_scoring.get("seo"), "headline_scoring.seo"),
            virality=_build(
                HeadlineViralityRules,
                headline_scoring.get("virality"),
                "headline_scoring.virality",
            ),
            readability=_build(
                HeadlineReadabilityRules,
                headline_scoring.get("readability"),
                "headline_scoring.readability",
            ),
        ),
        draft=DraftPhrases(
            quote_openers={str(key).lower(): str(value) for key, value in quote_openers.items()},
            secondary_quote=str(draft.get("secondary_quote", "")).strip(),
        ),
        seo=_build(SEORules, root.get("seo"), "seo"),
    )
    _check_minimum_options(tables)
    return tables


def load_scoring_tables(path: Path) -> ScoringTables:
    """Load and validate a scoring tables YAML file."""
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    tables = parse_scoring_tables(payload)
    logger.info(
        "Loaded scoring tables",
        extra={"path": str(path), "version": tables.version},
    )
    return tables


@lru_cache
def get_scoring_tables() -> ScoringTables:
    """Get the cached tables from the configured path."""
    return load_scoring_tables(Path(settings.scoring_tables_path))
