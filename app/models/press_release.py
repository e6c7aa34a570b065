"""Generated press release and generation audit trail models."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Boolean, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, StringUUID, TimestampMixin, UUIDMixin

RELEASE_STATUSES: tuple[str, ...] = ("draft", "generating", "complete", "error")


class GeneratedRelease(Base, UUIDMixin, TimestampMixin):
    """Press release produced by one generation run."""

    __tablename__ = "pr_generated_releases"
    __table_args__ = (
        Index("ix_pr_generated_releases_org_created", "org_id", "created_at"),
    )

    org_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("orgs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft", nullable=False, index=True)
    input_json: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    personality_id: Mapped[str | None] = mapped_column(StringUUID(), nullable=True)

    # Draft
    headline: Mapped[str | None] = mapped_column(Text, nullable=True)
    subheadline: Mapped[str | None] = mapped_column(Text, nullable=True)
    angle: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dateline: Mapped[str | None] = mapped_column(String(255), nullable=True)
    body: Mapped[str | None] = mapped_column(Text, nullable=True)
    quote_1: Mapped[str | None] = mapped_column(Text, nullable=True)
    quote_1_attribution: Mapped[str | None] = mapped_column(String(500), nullable=True)
    quote_2: Mapped[str | None] = mapped_column(Text, nullable=True)
    quote_2_attribution: Mapped[str | None] = mapped_column(String(500), nullable=True)
    boilerplate: Mapped[str | None] = mapped_column(Text, nullable=True)
    word_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Scoring
    seo_summary_json: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    readability_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    optimization_history: Mapped[list[dict[str, Any]] | None] = mapped_column(
        JSONB,
        nullable=True,
    )
    embeddings: Mapped[list[float] | None] = mapped_column(JSONB, nullable=True)

    # Failure
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    error_stage: Mapped[str | None] = mapped_column(String(30), nullable=True)

    angle_options: Mapped[list[PRAngleOption]] = relationship(
        back_populates="release",
        cascade="all, delete-orphan",
        order_by="PRAngleOption.position",
    )
    headline_variants: Mapped[list[PRHeadlineVariant]] = relationship(
        back_populates="release",
        cascade="all, delete-orphan",
        order_by="PRHeadlineVariant.position",
    )


class PRAngleOption(Base, UUIDMixin, TimestampMixin):
    """Scored angle candidate recorded for a release."""

    __tablename__ = "pr_angle_options"

    release_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("pr_generated_releases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    angle_title: Mapped[str] = mapped_column(String(255), nullable=False)
    angle_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    newsworthiness_score: Mapped[float] = mapped_column(Float, nullable=False)
    uniqueness_score: Mapped[float] = mapped_column(Float, nullable=False)
    relevance_score: Mapped[float] = mapped_column(Float, nullable=False)
    total_score: Mapped[float] = mapped_column(Float, nullable=False)
    is_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    release: Mapped[GeneratedRelease] = relationship(back_populates="angle_options")


class PRHeadlineVariant(Base, UUIDMixin, TimestampMixin):
    """Scored headline candidate recorded for a release."""

    __tablename__ = "pr_headline_variants"

    release_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("pr_generated_releases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    headline: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    seo_score: Mapped[float] = mapped_column(Float, nullable=False)
    virality_score: Mapped[float] = mapped_column(Float, nullable=False)
    readability_score: Mapped[float] = mapped_column(Float, nullable=False)
    is_selected: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    release: Mapped[GeneratedRelease] = relationship(back_populates="headline_variants")
