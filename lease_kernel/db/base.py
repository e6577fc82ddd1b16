"""
Module: lease_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.  Provides
    the type annotation map for consistent column types, the PartyId column
    type, and the TrackedBase mixin for audit timestamps.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, or outer layers.

Invariants enforced:
    - Integer amounts and logical times map to BigInteger system-wide.
    - Party identifiers are stored as their principal string and always
      loaded back as ``PartyId`` values.
    - Audit timestamps: TrackedBase provides created_at and updated_at.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from lease_kernel.domain.values import PartyId


class PartyIdString(TypeDecorator):
    """
    PartyId stored as String(128).

    Guarantees:
        - process_bind_param: PartyId -> str on INSERT/UPDATE.
        - process_result_value: str -> PartyId on SELECT.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = String(128)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, PartyId):
            return value.value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is not None:
            return PartyId(value)
        return None


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every ORM model in the system inherits from Base (or TrackedBase)
        and declares its own primary key.  Lease ids are allocated by the
        governance counter, never by the database.

    Guarantees:
        - int maps to BigInteger -- safe for monotonic counters.
        - datetime maps to DateTime(timezone=True).
        - PartyId maps to PartyIdString.
    """

    type_annotation_map: ClassVar[dict] = {
        int: BigInteger,
        datetime: DateTime(timezone=True),
        PartyId: PartyIdString(),
    }


class TrackedBase(Base):
    """
    Abstract base with audit timestamps.

    Guarantees:
        - created_at is set to server NOW() on INSERT and never changes.
        - updated_at is set on INSERT and auto-updates on every UPDATE.
    """

    __abstract__ = True

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
