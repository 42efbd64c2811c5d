"""Atomic Trade Procedures: the only code that writes trade rows.

Invariants:
    - Each procedure runs inside ONE transaction opened by the caller (SqlTradeStore)
    - Rows a procedure re-validates are locked with SELECT ... FOR UPDATE first
    - Locks are taken listing -> offers; a procedure never locks an offer before its listing
    - Invariants the pipeline pre-checks advised on are re-checked here against the
      transition registry; a violation raises ProcedureRejectedError and rolls back
    - Results are plain dicts matching the pipeline result schemas (snake_case keys)

Design Decisions:
    - Procedures are plain async functions of (session, params): the store owns the
      session + transaction, procedures own the business writes
    - Bulk status cascades use a single UPDATE ... WHERE status IN (...) and report
      rowcount, so concurrent inserts after the lock never slip through half-updated
    - Trade counters use total_trades = total_trades + 1 in SQL, never read-modify-write
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tradehub.core.domain_types import (
    EntityKind,
    ListingStatus,
    MatchStatus,
    MeetupStatus,
    MessageType,
    OfferStatus,
)
from tradehub.core.errors import ProcedureRejectedError
from tradehub.core.transitions import can_transition
from tradehub.models import (
    Conversation,
    Listing,
    Match,
    Meetup,
    Message,
    Offer,
    OfferItem,
    User,
)

logger = logging.getLogger(__name__)

Procedure = Callable[[AsyncSession, dict[str, Any]], Awaitable[dict[str, Any]]]

_ACTIONABLE_OFFER_STATUSES = (OfferStatus.PENDING.value, OfferStatus.COUNTERED.value)


# ─── Helpers ────────────────────────────────────────────────────

def _uuid(value: object) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


async def _lock(session: AsyncSession, model: type, row_id: uuid.UUID | None):
    if row_id is None:
        return None
    return await session.scalar(
        select(model).where(model.id == row_id).with_for_update()
    )


def _require_transition(
    procedure: str, kind: EntityKind, current: str, target: str,
) -> None:
    if not can_transition(kind, current, target):
        raise ProcedureRejectedError(
            procedure, f"{kind.value} cannot move from {current} to {target}",
        )


# ─── Procedures ─────────────────────────────────────────────────

async def create_offer_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    """Insert an offer + its items; a counter-offer moves its parent to countered."""
    name = "create_offer_v1"
    listing_id = _uuid(params["p_listing_id"])
    offerer_id = _uuid(params["p_offerer_id"])
    parent_id = _uuid(params.get("p_parent_offer_id"))

    listing = await _lock(session, Listing, listing_id)
    if listing is None:
        raise ProcedureRejectedError(name, "listing not found")
    if listing.status != ListingStatus.ACTIVE.value:
        raise ProcedureRejectedError(name, f"listing is not active ({listing.status})")
    if listing.user_id == offerer_id:
        raise ProcedureRejectedError(name, "cannot offer on own listing")

    if parent_id is not None:
        parent = await _lock(session, Offer, parent_id)
        if parent is None or parent.listing_id != listing.id:
            raise ProcedureRejectedError(name, "parent offer not found on this listing")
        _require_transition(name, EntityKind.OFFER, parent.status, OfferStatus.COUNTERED.value)
        parent.status = OfferStatus.COUNTERED.value

    offer = Offer(
        id=uuid.uuid4(),
        listing_id=listing.id,
        offerer_id=offerer_id,
        status=OfferStatus.PENDING.value,
        cash_amount=params.get("p_cash_amount") or 0,
        message=params.get("p_offerer_note"),
        parent_offer_id=parent_id,
    )
    session.add(offer)
    for item in params.get("p_items") or []:
        session.add(OfferItem(
            offer_id=offer.id,
            card_name=item["card_name"],
            card_image_url=item["card_image_url"],
            card_external_id=item["card_external_id"],
            tcg=item["tcg"],
            card_set=item.get("card_set"),
            card_number=item.get("card_number"),
            condition=item["condition"],
            market_price=item.get("market_price"),
            quantity=item.get("quantity", 1),
        ))
    await session.flush()
    return {"offer_id": offer.id}


async def accept_offer_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    """Accept one offer, decline actionable siblings, match listing, open chat.

    The new conversation starts with one system message from the listing owner.
    """
    name = "accept_offer_v1"
    user_id = _uuid(params["p_user_id"])

    listing = await _lock(session, Listing, _uuid(params["p_listing_id"]))
    if listing is None:
        raise ProcedureRejectedError(name, "listing not found")
    if listing.user_id != user_id:
        raise ProcedureRejectedError(name, "only the listing owner can accept offers")
    _require_transition(name, EntityKind.LISTING, listing.status, ListingStatus.MATCHED.value)

    offer = await _lock(session, Offer, _uuid(params["p_offer_id"]))
    if offer is None or offer.listing_id != listing.id:
        raise ProcedureRejectedError(name, "offer not found on this listing")
    _require_transition(name, EntityKind.OFFER, offer.status, OfferStatus.ACCEPTED.value)

    declined = await session.execute(
        update(Offer)
        .where(
            Offer.listing_id == listing.id,
            Offer.id != offer.id,
            Offer.status.in_(_ACTIONABLE_OFFER_STATUSES),
        )
        .values(status=OfferStatus.DECLINED.value)
        .execution_options(synchronize_session=False)
    )
    offer.status = OfferStatus.ACCEPTED.value
    listing.status = ListingStatus.MATCHED.value

    match = Match(
        id=uuid.uuid4(),
        user_a_id=listing.user_id,
        user_b_id=offer.offerer_id,
        listing_id=listing.id,
        offer_id=offer.id,
        status=MatchStatus.ACTIVE.value,
    )
    conversation = Conversation(id=uuid.uuid4(), match_id=match.id)
    session.add(match)
    await session.flush()
    session.add(conversation)
    await session.flush()
    session.add(Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=listing.user_id,
        type=MessageType.SYSTEM.value,
        body="Offer accepted! Start chatting to arrange a trade.",
        payload={"event": "offer_accepted"},
    ))
    await session.flush()

    return {
        "match_id": match.id,
        "conversation_id": conversation.id,
        "declined_offer_count": declined.rowcount or 0,
    }


async def decline_offer_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    name = "decline_offer_v1"
    offer_id = _uuid(params["p_offer_id"])
    listing_id = await session.scalar(select(Offer.listing_id).where(Offer.id == offer_id))
    if listing_id is None:
        raise ProcedureRejectedError(name, "offer not found")

    listing = await _lock(session, Listing, listing_id)
    if listing is None or listing.user_id != _uuid(params["p_user_id"]):
        raise ProcedureRejectedError(name, "only the listing owner can decline offers")
    offer = await _lock(session, Offer, offer_id)
    if offer is None or offer.listing_id != listing.id:
        raise ProcedureRejectedError(name, "offer not found on this listing")
    _require_transition(name, EntityKind.OFFER, offer.status, OfferStatus.DECLINED.value)

    offer.status = OfferStatus.DECLINED.value
    await session.flush()
    return {"success": True}


async def expire_listing_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    """Expire a listing and withdraw every still-actionable offer on it."""
    name = "expire_listing_v1"
    listing = await _lock(session, Listing, _uuid(params["p_listing_id"]))
    if listing is None:
        raise ProcedureRejectedError(name, "listing not found")
    if listing.user_id != _uuid(params["p_user_id"]):
        raise ProcedureRejectedError(name, "only the listing owner can expire it")
    _require_transition(name, EntityKind.LISTING, listing.status, ListingStatus.EXPIRED.value)

    withdrawn = await session.execute(
        update(Offer)
        .where(
            Offer.listing_id == listing.id,
            Offer.status.in_(_ACTIONABLE_OFFER_STATUSES),
        )
        .values(status=OfferStatus.WITHDRAWN.value)
        .execution_options(synchronize_session=False)
    )
    listing.status = ListingStatus.EXPIRED.value
    await session.flush()
    return {"success": True, "withdrawn_offer_count": withdrawn.rowcount or 0}


async def complete_meetup_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    """Two-phase completion: each participant flags once; the second flag finishes it.

    When both flags are set the meetup and its match become completed and both
    users' total_trades go up by exactly one, all in this transaction.
    """
    name = "complete_meetup_v1"
    user_id = _uuid(params["p_user_id"])

    meetup = await _lock(session, Meetup, _uuid(params["p_meetup_id"]))
    if meetup is None:
        raise ProcedureRejectedError(name, "meetup not found")
    _require_transition(name, EntityKind.MEETUP, meetup.status, MeetupStatus.COMPLETED.value)

    match = await _lock(session, Match, meetup.match_id)
    if match is None:
        raise ProcedureRejectedError(name, "match not found")

    if user_id == match.user_a_id:
        if meetup.user_a_completed:
            raise ProcedureRejectedError(name, "already marked complete by this user")
        meetup.user_a_completed = True
    elif user_id == match.user_b_id:
        if meetup.user_b_completed:
            raise ProcedureRejectedError(name, "already marked complete by this user")
        meetup.user_b_completed = True
    else:
        raise ProcedureRejectedError(name, "not a participant in this meetup")

    both_completed = meetup.user_a_completed and meetup.user_b_completed
    if both_completed:
        _require_transition(name, EntityKind.MATCH, match.status, MatchStatus.COMPLETED.value)
        meetup.status = MeetupStatus.COMPLETED.value
        match.status = MatchStatus.COMPLETED.value
        await session.execute(
            update(User)
            .where(User.id.in_([match.user_a_id, match.user_b_id]))
            .values(total_trades=User.total_trades + 1)
            .execution_options(synchronize_session=False)
        )
        logger.info(
            f"Meetup {meetup.id} completed by both participants",
            extra={"procedure": name},
        )
    await session.flush()
    return {"meetup_id": meetup.id, "both_completed": both_completed}


async def send_message_v1(session: AsyncSession, params: dict[str, Any]) -> dict[str, Any]:
    name = "send_message_v1"
    sender_id = _uuid(params["p_sender_id"])

    conversation = await session.get(Conversation, _uuid(params["p_conversation_id"]))
    if conversation is None:
        raise ProcedureRejectedError(name, "conversation not found")
    match = await session.get(Match, conversation.match_id)
    if match is None or sender_id not in (match.user_a_id, match.user_b_id):
        raise ProcedureRejectedError(name, "sender is not a participant in this conversation")

    message = Message(
        id=uuid.uuid4(),
        conversation_id=conversation.id,
        sender_id=sender_id,
        type=params["p_type"],
        body=params.get("p_body"),
        payload=params.get("p_payload"),
    )
    session.add(message)
    await session.flush()

    recipient_id = match.user_b_id if sender_id == match.user_a_id else match.user_a_id
    return {
        "message_id": message.id,
        "conversation_id": conversation.id,
        "sender_id": sender_id,
        "recipient_id": recipient_id,
    }


# Explicit registry: procedure name -> implementation.
PROCEDURES: dict[str, Procedure] = {
    "create_offer_v1": create_offer_v1,
    "accept_offer_v1": accept_offer_v1,
    "decline_offer_v1": decline_offer_v1,
    "expire_listing_v1": expire_listing_v1,
    "complete_meetup_v1": complete_meetup_v1,
    "send_message_v1": send_message_v1,
}
