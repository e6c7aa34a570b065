"""Brief validation run before any generation stage."""

from __future__ import annotations

from app.core.exceptions import ValidationError
from app.services.press_release.types import NEWS_TYPES, GenerationInput


def validate_generation_input(brief: GenerationInput) -> GenerationInput:
    """Raise ``ValidationError`` listing every missing or invalid brief field."""
    problems: dict[str, str] = {}
    if not brief.announcement.strip():
        problems["announcement"] = "announcement is required"
    if not brief.company_name.strip():
        problems["company_name"] = "company_name is required"
    if brief.news_type not in NEWS_TYPES:
        problems["news_type"] = f"news_type must be one of: {', '.join(NEWS_TYPES)}"

    if problems:
        raise ValidationError(
            "Invalid press release brief: " + "; ".join(problems.values()),
            details={"fields": problems},
        )
    return brief
