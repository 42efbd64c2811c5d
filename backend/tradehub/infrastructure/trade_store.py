"""SQL Trade Store: TradeStore implementation over the async session manager.

Invariants:
    - Every read uses its own short session and returns a frozen snapshot
    - call_procedure opens exactly one transaction; the procedure commits all or nothing
    - Unknown procedure names are rejected before any session is opened

Design Decisions:
    - Reads take no locks: pre-checks are advisory, procedures re-check under FOR UPDATE
    - Explicit dict dispatch (PROCEDURES) instead of name lookup by reflection
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import select

from tradehub.core.errors import ProcedureRejectedError
from tradehub.core.repository_protocols import (
    ListingSnapshot,
    MatchSnapshot,
    MeetupSnapshot,
    OfferSnapshot,
)
from tradehub.infrastructure.database import DatabaseSessionManager
from tradehub.infrastructure.trade_procedures import PROCEDURES
from tradehub.models import Listing, Match, Meetup, Offer, User

logger = logging.getLogger(__name__)


class SqlTradeStore:
    """Reads snapshots and runs atomic procedures against the trade database."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    # ─── Reads ───────────────────────────────────────────────────

    async def get_listing(self, listing_id: UUID) -> ListingSnapshot | None:
        async with self._db.session() as session:
            row = await session.get(Listing, listing_id)
            if row is None:
                return None
            return ListingSnapshot(id=row.id, owner_id=row.user_id, status=row.status)

    async def get_offer(self, offer_id: UUID) -> OfferSnapshot | None:
        async with self._db.session() as session:
            row = await session.get(Offer, offer_id)
            if row is None:
                return None
            return OfferSnapshot(
                id=row.id,
                listing_id=row.listing_id,
                offerer_id=row.offerer_id,
                status=row.status,
                parent_offer_id=row.parent_offer_id,
            )

    async def get_match(self, match_id: UUID) -> MatchSnapshot | None:
        async with self._db.session() as session:
            row = await session.get(Match, match_id)
            if row is None:
                return None
            return MatchSnapshot(
                id=row.id,
                listing_id=row.listing_id,
                offer_id=row.offer_id,
                user_a_id=row.user_a_id,
                user_b_id=row.user_b_id,
                status=row.status,
            )

    async def get_meetup(self, meetup_id: UUID) -> MeetupSnapshot | None:
        async with self._db.session() as session:
            row = await session.get(Meetup, meetup_id)
            if row is None:
                return None
            return MeetupSnapshot(
                id=row.id,
                match_id=row.match_id,
                status=row.status,
                user_a_completed=row.user_a_completed,
                user_b_completed=row.user_b_completed,
            )

    async def get_display_name(self, user_id: UUID) -> str | None:
        async with self._db.session() as session:
            return await session.scalar(
                select(User.display_name).where(User.id == user_id)
            )

    async def get_push_token(self, user_id: UUID) -> str | None:
        async with self._db.session() as session:
            return await session.scalar(
                select(User.expo_push_token).where(User.id == user_id)
            )

    # ─── Atomic write boundary ───────────────────────────────────

    async def call_procedure(
        self, name: str, params: dict[str, Any],
    ) -> dict[str, Any]:
        procedure = PROCEDURES.get(name)
        if procedure is None:
            raise ProcedureRejectedError(name, "unknown procedure")
        async with self._db.session() as session:
            async with session.begin():
                result = await procedure(session, params)
        logger.debug(f"Procedure {name} committed", extra={"procedure": name})
        return result
