"""Revoked access tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from justping.core.extensions import db

from .base import ReprMixin


class TokenBlacklist(ReprMixin, db.Model):
    """
    Append-only set of revoked access-token strings.

    Lookups go through ``token_hash`` (SHA-256 hex of the raw token) so the
    unique index stays small; the raw token is kept for auditing.
    Rows past ``expires_at`` are dead weight and may be purged at any time.
    """

    __tablename__ = "token_blacklist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    token: Mapped[str] = mapped_column(Text, nullable=False)
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("uq_token_blacklist_token_hash", "token_hash", unique=True),
        Index("ix_token_blacklist_expires_at", "expires_at"),
    )
