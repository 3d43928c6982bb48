"""SQLAlchemy models for the local SQLite response cache.

Only successful API payloads are stored, keyed by the request cache key.
Rows past ``expires_at`` are treated as missing and purged periodically.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CachedValidation(Base):
    """A cached validateAddress response payload."""

    __tablename__ = "validation_cache"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index("ix_validation_cache_expires", "expires_at"),
    )
