"""In-memory test doubles for the TradeStore and NotificationDispatcher protocols.

FakeTradeStore records every read and procedure call so tests can assert
short-circuit behavior (which reads happened, whether a mutation ran).
"""

from typing import Any
from uuid import UUID, uuid4

from tradehub.core.repository_protocols import (
    ListingSnapshot,
    MatchSnapshot,
    MeetupSnapshot,
    OfferSnapshot,
    PushNotification,
)
from tradehub.pipelines.engine import PipelineContext


class FakeTradeStore:
    def __init__(self):
        self.listings: dict[UUID, ListingSnapshot] = {}
        self.offers: dict[UUID, OfferSnapshot] = {}
        self.matches: dict[UUID, MatchSnapshot] = {}
        self.meetups: dict[UUID, MeetupSnapshot] = {}
        self.display_names: dict[UUID, str] = {}
        self.push_tokens: dict[UUID, str] = {}
        self.procedure_results: dict[str, Any] = {}
        self.procedure_errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, dict]] = []
        self.reads: list[str] = []

    # ─── Seeding ─────────────────────────────────────────────────

    def add_listing(self, owner_id: UUID, status: str = "active") -> ListingSnapshot:
        listing = ListingSnapshot(id=uuid4(), owner_id=owner_id, status=status)
        self.listings[listing.id] = listing
        return listing

    def add_offer(
        self, listing_id: UUID, offerer_id: UUID, status: str = "pending",
    ) -> OfferSnapshot:
        offer = OfferSnapshot(
            id=uuid4(), listing_id=listing_id, offerer_id=offerer_id, status=status,
        )
        self.offers[offer.id] = offer
        return offer

    def add_match(self, user_a_id: UUID, user_b_id: UUID) -> MatchSnapshot:
        match = MatchSnapshot(
            id=uuid4(), listing_id=uuid4(), offer_id=uuid4(),
            user_a_id=user_a_id, user_b_id=user_b_id, status="active",
        )
        self.matches[match.id] = match
        return match

    def add_meetup(
        self, match_id: UUID, status: str = "confirmed",
        user_a_completed: bool = False, user_b_completed: bool = False,
    ) -> MeetupSnapshot:
        meetup = MeetupSnapshot(
            id=uuid4(), match_id=match_id, status=status,
            user_a_completed=user_a_completed, user_b_completed=user_b_completed,
        )
        self.meetups[meetup.id] = meetup
        return meetup

    # ─── TradeStore ──────────────────────────────────────────────

    async def get_listing(self, listing_id):
        self.reads.append("listing")
        return self.listings.get(listing_id)

    async def get_offer(self, offer_id):
        self.reads.append("offer")
        return self.offers.get(offer_id)

    async def get_match(self, match_id):
        self.reads.append("match")
        return self.matches.get(match_id)

    async def get_meetup(self, meetup_id):
        self.reads.append("meetup")
        return self.meetups.get(meetup_id)

    async def get_display_name(self, user_id):
        return self.display_names.get(user_id)

    async def get_push_token(self, user_id):
        return self.push_tokens.get(user_id)

    async def call_procedure(self, name, params):
        self.calls.append((name, params))
        if name in self.procedure_errors:
            raise self.procedure_errors[name]
        return self.procedure_results[name]


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[PushNotification] = []

    async def send(self, notification: PushNotification) -> None:
        if self.fail:
            raise RuntimeError("push service unavailable")
        self.sent.append(notification)


def make_context(
    store: FakeTradeStore, user_id: UUID | None, notifier=None,
    background_effects: bool = False,
) -> PipelineContext:
    return PipelineContext(
        acting_user_id=user_id, store=store, notifier=notifier,
        background_effects=background_effects,
    )
