"""SQLAlchemy ORM models for per-user favorite cocktails.

Each row records that one user marked one cocktail as a favorite at a given
instant. Rows are inserted and deleted but never updated, and the
``(user_id, cocktail_id)`` unique constraint is what keeps concurrent duplicate
submissions from both succeeding.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def new_favorite_id() -> str:
    """Return a fresh UUID4 rendered as a string primary key."""
    return str(uuid.uuid4())


class FavoriteCocktail(Base):
    """A single favorite event linking a user to a cocktail."""

    __tablename__ = "favorite_cocktails"
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "cocktail_id",
            name="uq_favorite_cocktails_user_cocktail",
        ),
        Index(
            "ix_favorite_cocktails_cocktail_favorited_at",
            "cocktail_id",
            "favorited_at",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=new_favorite_id,
    )
    user_id: Mapped[str] = mapped_column(
        String(128),
        index=True,
        nullable=False,
        doc=(
            "Opaque identifier forwarded by the gateway. Stored as a string so"
            " UUIDs, emails or OAuth subjects all fit without schema churn."
        ),
    )
    cocktail_id: Mapped[str] = mapped_column(
        String(255),
        index=True,
        nullable=False,
    )
    favorited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        default=utcnow,
    )


__all__ = ["Base", "FavoriteCocktail", "new_favorite_id", "utcnow"]
