"""create favorite cocktails table

Revision ID: 4b1e7c2a9d30
Revises:
Create Date: 2025-05-12 03:35:29.000000
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "4b1e7c2a9d30"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "favorite_cocktails",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("cocktail_id", sa.String(length=255), nullable=False),
        sa.Column(
            "favorited_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint(
            "user_id",
            "cocktail_id",
            name="uq_favorite_cocktails_user_cocktail",
        ),
    )

    op.create_index(
        "ix_favorite_cocktails_user_id",
        "favorite_cocktails",
        ["user_id"],
    )
    op.create_index(
        "ix_favorite_cocktails_cocktail_id",
        "favorite_cocktails",
        ["cocktail_id"],
    )
    op.create_index(
        "ix_favorite_cocktails_favorited_at",
        "favorite_cocktails",
        ["favorited_at"],
    )
    op.create_index(
        "ix_favorite_cocktails_cocktail_favorited_at",
        "favorite_cocktails",
        ["cocktail_id", "favorited_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_favorite_cocktails_cocktail_favorited_at", table_name="favorite_cocktails"
    )
    op.drop_index("ix_favorite_cocktails_favorited_at", table_name="favorite_cocktails")
    op.drop_index("ix_favorite_cocktails_cocktail_id", table_name="favorite_cocktails")
    op.drop_index("ix_favorite_cocktails_user_id", table_name="favorite_cocktails")
    op.drop_table("favorite_cocktails")
