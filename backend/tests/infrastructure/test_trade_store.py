"""SqlTradeStore reads + end-to-end pipeline runs against the SQLite schema."""

from uuid import uuid4

import pytest

from tradehub.core.errors import InvalidTransitionError, MutationFailedError
from tradehub.models import Listing, Offer
from tradehub.pipelines.accept_offer import accept_offer
from tradehub.pipelines.create_offer import create_offer
from tradehub.pipelines.engine import PipelineContext
from tests.fakes import RecordingNotifier


# ─── Reads ───────────────────────────────────────────────────────

async def test_snapshots_reflect_rows(store, seed):
    owner = await seed.user("Ash", push_token="ExponentPushToken[ash]")
    offerer = await seed.user("Brock")
    listing = await seed.listing(owner)
    offer = await seed.offer(listing, offerer)
    match, _ = await seed.match(owner, offerer)
    meetup = await seed.meetup(match, status="proposed")

    listing_snap = await store.get_listing(listing.id)
    assert (listing_snap.owner_id, listing_snap.status) == (owner.id, "active")
    assert (await store.get_offer(offer.id)).offerer_id == offerer.id
    match_snap = await store.get_match(match.id)
    assert match_snap.other_participant(offerer.id) == owner.id
    assert (await store.get_meetup(meetup.id)).status == "proposed"
    assert await store.get_display_name(offerer.id) == "Brock"
    assert await store.get_push_token(owner.id) == "ExponentPushToken[ash]"
    assert await store.get_push_token(offerer.id) is None


async def test_missing_rows_read_as_none(store):
    assert await store.get_listing(uuid4()) is None
    assert await store.get_offer(uuid4()) is None
    assert await store.get_match(uuid4()) is None
    assert await store.get_meetup(uuid4()) is None
    assert await store.get_display_name(uuid4()) is None


# ─── End to end ──────────────────────────────────────────────────

async def test_offer_accept_scenario(store, seed):
    u1, u2 = await seed.user("Ash"), await seed.user("Brock")
    l1 = await seed.listing(u1)
    notifier = RecordingNotifier()

    created = await create_offer.execute(
        {"listingId": str(l1.id), "cashAmount": 10, "items": []},
        PipelineContext(acting_user_id=u2.id, store=store, notifier=notifier),
    )
    assert (await seed.get(Offer, created.offer_id)).status == "pending"

    owner_ctx = PipelineContext(acting_user_id=u1.id, store=store, notifier=notifier)
    payload = {"offerId": str(created.offer_id), "listingId": str(l1.id)}
    accepted = await accept_offer.execute(payload, owner_ctx)

    assert accepted.declined_offer_count == 0
    assert (await seed.get(Listing, l1.id)).status == "matched"
    assert (await seed.get(Offer, created.offer_id)).status == "accepted"
    assert [n.recipient_user_id for n in notifier.sent] == [u1.id, u2.id]

    with pytest.raises(InvalidTransitionError):
        await accept_offer.execute(payload, owner_ctx)


async def test_stale_pre_check_caught_by_procedure(store, seed, monkeypatch):
    """Listing expires between pre-check and mutation: the procedure refuses."""
    owner, offerer = await seed.user("Ash"), await seed.user("Brock")
    listing = await seed.listing(owner)
    real_get_listing = store.get_listing

    async def stale_then_expire(listing_id):
        snapshot = await real_get_listing(listing_id)
        await store.call_procedure("expire_listing_v1", {
            "p_listing_id": listing.id, "p_user_id": owner.id,
        })
        return snapshot

    monkeypatch.setattr(store, "get_listing", stale_then_expire)

    with pytest.raises(MutationFailedError):
        await create_offer.execute(
            {"listingId": str(listing.id), "cashAmount": 3},
            PipelineContext(acting_user_id=offerer.id, store=store),
        )
    assert await seed.offers_for(listing.id) == []
