"""
Declarative base and shared mixins for exchange records.
Source: https://docs.sqlalchemy.org/en/20/orm/declarative_mixins.html
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from hbx_core.utils.errors import DomainValidationError

# Deterministic constraint names keep migrations stable across SQLite and Postgres
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all exchange models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimeStampedModel:
    """created_at / updated_at maintained by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UUIDModel:
    """UUID primary key, portable across dialects."""

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )


class ValidatedModel:
    """
    Whole-record validation on top of attribute-level ``@validates`` hooks.

    Subclasses must override ``errors(...)`` to return
    ``{attribute: [messages]}``; any arguments (such as ``today``) are passed
    through unchanged.
    """

    def errors(self, *args: Any, **kwargs: Any) -> dict[str, list[str]]:
        """Required override: validation messages keyed by attribute."""
        raise NotImplementedError(f"{type(self).__name__} must implement errors()")

    def is_valid(self, *args: Any, **kwargs: Any) -> bool:
        return not self.errors(*args, **kwargs)

    def validate(self, *args: Any, **kwargs: Any) -> None:
        """Raise DomainValidationError naming the model when errors() is not empty."""
        errors = self.errors(*args, **kwargs)
        if errors:
            raise DomainValidationError(type(self).__name__, errors)
