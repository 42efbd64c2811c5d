"""Boundary Protocols: contracts between the pipeline core and the store/notifier shell.

Invariants:
    - Core and pipelines NEVER import from infrastructure, dependency arrows point inward
    - Reads return frozen snapshots, never live ORM rows
    - call_procedure is the ONLY write path; it commits all row changes or none

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Async in Protocol: implementations do IO; pure guards in core/ stay synchronous
"""

from dataclasses import dataclass, field
from typing import Any, Protocol
from tradehub.core.domain_types import ListingId, MatchId, MeetupId, OfferId, UserId


# ─── Snapshots ───────────────────────────────────────────────────

@dataclass(frozen=True)
class ListingSnapshot:
    id: ListingId
    owner_id: UserId
    status: str


@dataclass(frozen=True)
class OfferSnapshot:
    id: OfferId
    listing_id: ListingId
    offerer_id: UserId
    status: str
    parent_offer_id: OfferId | None = None


@dataclass(frozen=True)
class MatchSnapshot:
    id: MatchId
    listing_id: ListingId
    offer_id: OfferId
    user_a_id: UserId
    user_b_id: UserId
    status: str

    def has_participant(self, user_id: UserId) -> bool:
        return user_id in (self.user_a_id, self.user_b_id)

    def other_participant(self, user_id: UserId) -> UserId:
        return self.user_b_id if user_id == self.user_a_id else self.user_a_id


@dataclass(frozen=True)
class MeetupSnapshot:
    id: MeetupId
    match_id: MatchId
    status: str
    user_a_completed: bool
    user_b_completed: bool


@dataclass(frozen=True)
class PushNotification:
    """A formatted push addressed to one user."""
    recipient_user_id: UserId
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


# ─── Contracts ───────────────────────────────────────────────────

class TradeStore(Protocol):
    """Read access for pre-checks/post-effects plus the atomic procedure boundary."""
    async def get_listing(self, listing_id: ListingId) -> ListingSnapshot | None: ...
    async def get_offer(self, offer_id: OfferId) -> OfferSnapshot | None: ...
    async def get_match(self, match_id: MatchId) -> MatchSnapshot | None: ...
    async def get_meetup(self, meetup_id: MeetupId) -> MeetupSnapshot | None: ...
    async def get_display_name(self, user_id: UserId) -> str | None: ...
    async def get_push_token(self, user_id: UserId) -> str | None: ...
    async def call_procedure(
        self, name: str, params: dict[str, Any],
    ) -> dict[str, Any]: ...


class NotificationDispatcher(Protocol):
    """Delivers one push notification. May raise; callers isolate failures."""
    async def send(self, notification: PushNotification) -> None: ...
