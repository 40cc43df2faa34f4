"""SQLAlchemy base configuration for identity models."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from tessera_identity.domain.shared.time import utc_now


class IdentityBase(DeclarativeBase):
    """Base class for identity database models."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps.

    The aggregate owns updated_at, so there is no onupdate hook.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
