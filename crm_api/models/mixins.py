"""Mixins for SQLAlchemy models."""

from sqlalchemy import Boolean, Column, DateTime, func


class TimestampMixin:
    """Mixin to add created_date and modified_date timestamp columns."""

    created_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    modified_date = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class ActiveFlagMixin:
    """Mixin for rows that are deactivated instead of deleted."""

    is_active = Column(Boolean, default=True, nullable=False)
