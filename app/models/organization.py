"""Organization and organization-level context models."""

from __future__ import annotations

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, StringUUID, TimestampMixin, UUIDMixin


class Organization(Base, UUIDMixin, TimestampMixin):
    """Customer organization that owns press releases."""

    __tablename__ = "orgs"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry: Mapped[str | None] = mapped_column(String(255), nullable=True)
    headquarters: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Billing
    subscription_plan: Mapped[str | None] = mapped_column(String(20), nullable=True)
    subscription_status: Mapped[str | None] = mapped_column(String(30), nullable=True)


class AgentPersonality(Base, UUIDMixin, TimestampMixin):
    """Tone/style profile applied to generated copy."""

    __tablename__ = "agent_personalities"

    org_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("orgs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    voice_attributes: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    writing_style: Mapped[str | None] = mapped_column(String(50), nullable=True)


class SEOOpportunity(Base, UUIDMixin, TimestampMixin):
    """Keyword opportunity tracked for an organization."""

    __tablename__ = "seo_opportunities"

    org_id: Mapped[str] = mapped_column(
        StringUUID(),
        ForeignKey("orgs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    keyword: Mapped[str] = mapped_column(String(500), nullable=False)
    search_volume: Mapped[int | None] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[float | None] = mapped_column(Float, nullable=True)
    relevance: Mapped[float | None] = mapped_column(Float, nullable=True)
