"""Press release draft assembly."""

from __future__ import annotations

from datetime import date

from app.services.press_release.scoring_tables import ScoringTables, get_scoring_tables
from app.services.press_release.text import count_words
from app.services.press_release.types import (
    AngleOption,
    Draft,
    GenerationContext,
    HeadlineVariant,
)

RELEASE_DATE_PLACEHOLDER = "[RELEASE DATE]"


def format_release_date(value: date | None) -> str:
    if value is None:
        return RELEASE_DATE_PLACEHOLDER
    return f"{value:%B} {value.day}, {value.year}"


def build_dateline(context: GenerationContext) -> str:
    location = context.company_footprint.headquarters.upper()
    return f"{location}, {format_release_date(context.input.release_date)}"


def join_phrases(items: tuple[str, ...] | list[str]) -> str:
    """'a', 'a and b', 'a, b and c'."""
    values = [item for item in items if item]
    if len(values) <= 1:
        return "".join(values)
    return f"{', '.join(values[:-1])} and {values[-1]}"


def attribution(name: str | None, title: str | None) -> str:
    if not name:
        return ""
    return f"{name}, {title}" if title else name


def _fragment(text: str) -> str:
    return text.strip().rstrip(".!?").strip()


def build_paragraphs(context: GenerationContext, angle: AngleOption) -> list[str]:
    brief = context.input
    company = context.company_footprint.name
    announcement = _fragment(brief.announcement)
    news_label = brief.news_type.replace("_", " ")

    opening = (
        f"{company} today announced {announcement}. This development represents a "
        "significant milestone for the company and demonstrates its commitment to "
        f"{angle.angle_title.lower()}."
    )

    positioning = (
        f"The {news_label} reflects {company}'s strategic vision and positions the company "
        f"for continued growth in the {context.company_footprint.industry} sector."
    )
    if context.industry_trends:
        positioning += (
            f" It arrives as the market places new emphasis on "
            f"{join_phrases(context.industry_trends)}."
        )

    if brief.additional_context:
        detail = brief.additional_context
    else:
        detail = (
            f"This announcement underscores {company}'s dedication to delivering value to "
            "its customers and stakeholders."
        )
        if brief.target_audience:
            detail += f" It is designed with {brief.target_audience} in mind."
    if context.competitor_context:
        detail += (
            f" The move sharpens {company}'s position against "
            f"{join_phrases(context.competitor_context)}."
        )

    closing = (
        f"For more information about {company} and its offerings, please visit the "
        "company website."
    )
    return [opening, positioning, detail, closing]


def generate_draft(
    context: GenerationContext,
    angle: AngleOption,
    headline: HeadlineVariant,
    tables: ScoringTables | None = None,
) -> Draft:
    """Assemble the draft from the selected angle and headline.

    Deterministic: the dateline uses the brief's release date, or a
    placeholder, never the current clock.
    """
    tables = tables or get_scoring_tables()
    brief = context.input
    company = context.company_footprint.name

    paragraphs = build_paragraphs(context, angle)
    body = "\n\n".join(paragraphs)

    tone = brief.tone or (context.personality.tone if context.personality else None)
    quote1 = (
        f'"{tables.quote_opener_for(tone)} {_fragment(brief.announcement)} represents our '
        f'commitment to {angle.angle_title.lower()}."'
    )
    quote1_attribution = (
        attribution(brief.spokesperson_name, brief.spokesperson_title)
        or f"A spokesperson for {company}"
    )

    quote2 = ""
    quote2_attribution = ""
    if brief.secondary_spokesperson:
        quote2 = f'"{tables.draft.secondary_quote}"'
        quote2_attribution = attribution(
            brief.secondary_spokesperson,
            brief.secondary_spokesperson_title,
        )

    return Draft(
        headline=headline.headline,
        subheadline=f"{angle.angle_title}: {company} announces {_fragment(brief.announcement)}",
        dateline=build_dateline(context),
        body=body,
        paragraphs=tuple(paragraphs),
        quote1=quote1,
        quote1_attribution=quote1_attribution,
        quote2=quote2,
        quote2_attribution=quote2_attribution,
        boilerplate=context.company_footprint.boilerplate,
        word_count=count_words(body),
    )
