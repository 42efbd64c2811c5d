"""Offer ORM: an offer (cash + card items) on a listing, and its items.

Invariants:
    - Always belongs to a Listing (listing_id FK)
    - status transitions: pending -> accepted | declined | countered | withdrawn;
      countered -> accepted | declined | withdrawn
    - parent_offer_id links a counter-offer to the offer it counters (same listing)
    - OfferItem rows are inserted with their Offer, in the same transaction
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Float, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from tradehub.core.domain_types import CardCondition, OfferStatus, TcgType
from tradehub.db.base import Base, enum_check, utcnow


class Offer(Base):
    """Offer entity."""
    __tablename__ = "offers"
    __table_args__ = (
        enum_check("status", OfferStatus, "ck_offers_status"),
        CheckConstraint("cash_amount >= 0", name="ck_offers_cash_nonneg"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    listing_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("listings.id"), nullable=False, index=True,
    )
    offerer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OfferStatus.PENDING.value,
    )
    cash_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    parent_offer_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("offers.id"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    listing: Mapped["Listing"] = relationship(
        "Listing", back_populates="offers", lazy="raise",
    )
    items: Mapped[list["OfferItem"]] = relationship(
        "OfferItem", back_populates="offer",
        cascade="all, delete-orphan", lazy="selectin",
    )


class OfferItem(Base):
    """A card included in an offer."""
    __tablename__ = "offer_items"
    __table_args__ = (
        enum_check("tcg", TcgType, "ck_offer_items_tcg"),
        enum_check("condition", CardCondition, "ck_offer_items_condition"),
        CheckConstraint("quantity > 0", name="ck_offer_items_quantity_pos"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    offer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("offers.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    card_name: Mapped[str] = mapped_column(String(200), nullable=False)
    card_image_url: Mapped[str] = mapped_column(Text, nullable=False)
    card_external_id: Mapped[str] = mapped_column(String(100), nullable=False)
    tcg: Mapped[str] = mapped_column(String(20), nullable=False)
    card_set: Mapped[str | None] = mapped_column(String(200), nullable=True)
    card_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    condition: Mapped[str] = mapped_column(String(10), nullable=False)
    market_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )

    offer: Mapped["Offer"] = relationship("Offer", back_populates="items")
