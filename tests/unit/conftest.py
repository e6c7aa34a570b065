"""Shared builders for press release unit tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from app.services.press_release.context import build_generation_context
from app.services.press_release.types import GenerationContext, GenerationInput

BriefFactory = Callable[..., GenerationInput]
ContextFactory = Callable[..., GenerationContext]


def _brief(**overrides: Any) -> GenerationInput:
    payload: dict[str, Any] = {
        "news_type": "product_launch",
        "announcement": "Rocket, an AI scheduling assistant",
        "company_name": "Acme",
        "company_description": "Acme builds productivity software for teams.",
        "industry": "Software",
        "target_keywords": ["AI scheduling"],
        "spokesperson_name": "Jane Doe",
        "spokesperson_title": "CEO",
        "headquarters": "Austin, TX",
    }
    payload.update(overrides)
    return GenerationInput.from_mapping(payload)


@pytest.fixture
def make_brief() -> BriefFactory:
    return _brief


@pytest.fixture
def make_context() -> ContextFactory:
    def _context(**overrides: Any) -> GenerationContext:
        return build_generation_context(_brief(**overrides))

    return _context
