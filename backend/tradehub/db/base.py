"""SQLAlchemy Declarative Base: shared base class for all ORM models.

Invariants:
    - All models inherit from Base
    - Base is the single source of truth for table metadata
    - Every status column is guarded by a CHECK built from its domain Enum
"""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all TradeHub ORM models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_check(column: str, enum: type[Enum], name: str) -> CheckConstraint:
    """CHECK (column IN (...)) constraint listing every Enum value."""
    values = ", ".join(f"'{member.value}'" for member in enum)
    return CheckConstraint(f"{column} IN ({values})", name=name)
