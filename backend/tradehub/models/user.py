"""User ORM: trader profile, push token and the durable trade counter.

Invariants:
    - total_trades only changes inside complete_meetup_v1, by exactly +1 per finished meetup
    - expo_push_token nullable: users without a device are skipped by the push dispatcher
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from tradehub.db.base import Base, utcnow


class User(Base):
    """Marketplace user."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("total_trades >= 0", name="ck_users_total_trades_nonneg"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    expo_push_token: Mapped[str | None] = mapped_column(
        String(255), nullable=True,
    )
    total_trades: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
