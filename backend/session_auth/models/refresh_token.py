"""Refresh-token record model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from session_auth.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin


class RefreshToken(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Server-side state of one issued refresh token.

    The serialized JWT itself is the lookup key. Rows are never deleted by the
    application; ``is_used``/``is_revoked`` make a row permanently terminal.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(2048), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_used: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Audit-only client metadata
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    user = relationship("User")

    __table_args__ = (UniqueConstraint("token", name="uq_refresh_tokens_token"),)
