"""Listing ORM: a card listing that receives offers.

Invariants:
    - user_id is the owner; only the owner accepts/declines offers or expires it
    - status transitions: active -> matched | expired; matched -> completed
    - Never deleted: expired is the soft-delete
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Float, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tradehub.core.domain_types import ListingStatus, TcgType
from tradehub.db.base import Base, enum_check, utcnow


class Listing(Base):
    """Listing entity: one active listing may receive many offers."""
    __tablename__ = "listings"
    __table_args__ = (
        enum_check("status", ListingStatus, "ck_listings_status"),
        enum_check("tcg", TcgType, "ck_listings_tcg"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    tcg: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TcgType.POKEMON.value,
    )
    cash_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ListingStatus.ACTIVE.value,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    offers: Mapped[list["Offer"]] = relationship(
        "Offer", back_populates="listing", lazy="raise",
    )
