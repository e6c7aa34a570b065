"""create organizations, personalities, seo opportunities and press release tables

Revision ID: 3b5e7a9c1d2f
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op
from app.models.base import StringUUID

# revision identifiers, used by Alembic.
revision: str = "3b5e7a9c1d2f"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "orgs",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("industry", sa.String(length=255), nullable=True),
        sa.Column("headquarters", sa.String(length=255), nullable=True),
        sa.Column("subscription_plan", sa.String(length=20), nullable=True),
        sa.Column("subscription_status", sa.String(length=30), nullable=True),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "agent_personalities",
        sa.Column("org_id", StringUUID(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("tone", sa.String(length=50), nullable=True),
        sa.Column("voice_attributes", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("writing_style", sa.String(length=50), nullable=True),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["orgs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_agent_personalities_org_id"),
        "agent_personalities",
        ["org_id"],
        unique=False,
    )

    op.create_table(
        "seo_opportunities",
        sa.Column("org_id", StringUUID(), nullable=False),
        sa.Column("keyword", sa.String(length=500), nullable=False),
        sa.Column("search_volume", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.Float(), nullable=True),
        sa.Column("relevance", sa.Float(), nullable=True),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["orgs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_seo_opportunities_org_id"),
        "seo_opportunities",
        ["org_id"],
        unique=False,
    )

    op.create_table(
        "pr_generated_releases",
        sa.Column("org_id", StringUUID(), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("input_json", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("personality_id", StringUUID(), nullable=True),
        sa.Column("headline", sa.Text(), nullable=True),
        sa.Column("subheadline", sa.Text(), nullable=True),
        sa.Column("angle", sa.String(length=255), nullable=True),
        sa.Column("dateline", sa.String(length=255), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("quote_1", sa.Text(), nullable=True),
        sa.Column("quote_1_attribution", sa.String(length=500), nullable=True),
        sa.Column("quote_2", sa.Text(), nullable=True),
        sa.Column("quote_2_attribution", sa.String(length=500), nullable=True),
        sa.Column("boilerplate", sa.Text(), nullable=True),
        sa.Column("word_count", sa.Integer(), nullable=False),
        sa.Column("seo_summary_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("readability_score", sa.Float(), nullable=True),
        sa.Column(
            "optimization_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
        ),
        sa.Column("embeddings", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("error_stage", sa.String(length=30), nullable=True),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["orgs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_pr_generated_releases_org_id"),
        "pr_generated_releases",
        ["org_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_pr_generated_releases_status"),
        "pr_generated_releases",
        ["status"],
        unique=False,
    )
    op.create_index(
        "ix_pr_generated_releases_org_created",
        "pr_generated_releases",
        ["org_id", "created_at"],
        unique=False,
    )

    op.create_table(
        "pr_angle_options",
        sa.Column("release_id", StringUUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("angle_title", sa.String(length=255), nullable=False),
        sa.Column("angle_description", sa.Text(), nullable=True),
        sa.Column("newsworthiness_score", sa.Float(), nullable=False),
        sa.Column("uniqueness_score", sa.Float(), nullable=False),
        sa.Column("relevance_score", sa.Float(), nullable=False),
        sa.Column("total_score", sa.Float(), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["release_id"],
            ["pr_generated_releases.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_pr_angle_options_release_id"),
        "pr_angle_options",
        ["release_id"],
        unique=False,
    )

    op.create_table(
        "pr_headline_variants",
        sa.Column("release_id", StringUUID(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("headline", sa.Text(), nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("seo_score", sa.Float(), nullable=False),
        sa.Column("virality_score", sa.Float(), nullable=False),
        sa.Column("readability_score", sa.Float(), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False),
        sa.Column("id", StringUUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["release_id"],
            ["pr_generated_releases.id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_pr_headline_variants_release_id"),
        "pr_headline_variants",
        ["release_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_pr_headline_variants_release_id"), table_name="pr_headline_variants")
    op.drop_table("pr_headline_variants")
    op.drop_index(op.f("ix_pr_angle_options_release_id"), table_name="pr_angle_options")
    op.drop_table("pr_angle_options")
    op.drop_index("ix_pr_generated_releases_org_created", table_name="pr_generated_releases")
    op.drop_index(op.f("ix_pr_generated_releases_status"), table_name="pr_generated_releases")
    op.drop_index(op.f("ix_pr_generated_releases_org_id"), table_name="pr_generated_releases")
    op.drop_table("pr_generated_releases")
    op.drop_index(op.f("ix_seo_opportunities_org_id"), table_name="seo_opportunities")
    op.drop_table("seo_opportunities")
    op.drop_index(op.f("ix_agent_personalities_org_id"), table_name="agent_personalities")
    op.drop_table("agent_personalities")
    op.drop_table("orgs")
