"""Meetup ORM: the in-person completion record of a match.

Invariants:
    - Always belongs to a Match (match_id FK)
    - status transitions: proposed -> confirmed | cancelled; confirmed -> completed | cancelled
    - status becomes completed only in the same transaction that sets the second flag
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tradehub.core.domain_types import MeetupStatus
from tradehub.db.base import Base, enum_check, utcnow


class Meetup(Base):
    """Meetup entity."""
    __tablename__ = "meetups"
    __table_args__ = (
        enum_check("status", MeetupStatus, "ck_meetups_status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    match_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("matches.id"), nullable=False, index=True,
    )
    location_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    proposed_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MeetupStatus.PROPOSED.value,
    )
    user_a_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    user_b_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
