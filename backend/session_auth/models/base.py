"""Reusable SQLAlchemy mixins shared by the auth models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column


def new_id() -> str:
    """Return a fresh opaque identifier (UUID4, canonical text form)."""
    return str(uuid4())


def as_utc(value: datetime | None) -> datetime | None:
    """Label naive datetimes as UTC.

    SQLite drops tzinfo on ``DateTime(timezone=True)`` columns; values written
    by this package are always UTC, so relabelling is lossless.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class UUIDPKMixin:
    """Expose an opaque string primary key named ``id``.

    Attributes
    ----------
    id:
        UUID4 generated client-side so callers know the key before flush.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)


class CreatedAtMixin:
    """Provide a ``created_at`` column filled on insert."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )


class TimestampMixin(CreatedAtMixin):
    """Provide ``created_at`` and ``updated_at`` timestamp columns."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
        onupdate=lambda: datetime.now(UTC),
    )


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"
