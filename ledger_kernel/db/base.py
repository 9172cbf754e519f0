"""
Module: ledger_kernel.db.base
Responsibility: Declarative base for the chart-of-accounts and balance
    tables.  Provides the UUID primary key convention and the type
    annotation map that keeps monetary columns at fixed precision.
Architecture position: Kernel > DB.  Lowest-level import target of the
    persistence boundary; model files import from here.  MUST NOT import
    from models/, selectors/, or the reporting module.

Invariants enforced:
    - UUID primary keys stored as String(36) so the schema runs unchanged
      on PostgreSQL and SQLite.
    - Decimal maps to Numeric(38, 9).  Balances are never floats.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID stored as its 36-character string form.

    Guarantees:
        - UUID -> str on bind, str -> UUID on load.
        - cache_ok=True enables statement caching.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """Declarative base: uuid4 primary key plus the shared type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )
