"""Transition Registry: legal status changes per entity kind, plus pure guards.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - A transition is legal iff the target is in TRANSITIONS[kind][from]
    - Unknown from-status (no map entry) is always illegal
    - Terminal statuses map to an empty frozenset
    - Every member of each status Enum has a map entry (checked at import)

Design Decisions:
    - Maps are data keyed by Enum members; adding a transition is a data change only
    - Guards accept Enum members or raw DB strings; raw strings are coerced via the Enum
"""

from enum import Enum

from tradehub.core.domain_types import (
    EntityKind,
    ListingStatus,
    OfferStatus,
    MatchStatus,
    MeetupStatus,
    ReportStatus,
    ShopEventStatus,
)
from tradehub.core.errors import InvalidTransitionError


# ─── Transition Maps ─────────────────────────────────────────────

LISTING_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.ACTIVE: frozenset({ListingStatus.MATCHED, ListingStatus.EXPIRED}),
    ListingStatus.MATCHED: frozenset({ListingStatus.COMPLETED}),
    ListingStatus.COMPLETED: frozenset(),
    ListingStatus.EXPIRED: frozenset(),
}

OFFER_TRANSITIONS: dict[OfferStatus, frozenset[OfferStatus]] = {
    OfferStatus.PENDING: frozenset({
        OfferStatus.ACCEPTED, OfferStatus.DECLINED,
        OfferStatus.COUNTERED, OfferStatus.WITHDRAWN,
    }),
    OfferStatus.COUNTERED: frozenset({
        OfferStatus.ACCEPTED, OfferStatus.DECLINED, OfferStatus.WITHDRAWN,
    }),
    OfferStatus.ACCEPTED: frozenset(),
    OfferStatus.DECLINED: frozenset(),
    OfferStatus.WITHDRAWN: frozenset(),
}

MATCH_TRANSITIONS: dict[MatchStatus, frozenset[MatchStatus]] = {
    MatchStatus.ACTIVE: frozenset({MatchStatus.COMPLETED, MatchStatus.CANCELLED}),
    MatchStatus.COMPLETED: frozenset(),
    MatchStatus.CANCELLED: frozenset(),
}

MEETUP_TRANSITIONS: dict[MeetupStatus, frozenset[MeetupStatus]] = {
    MeetupStatus.PROPOSED: frozenset({MeetupStatus.CONFIRMED, MeetupStatus.CANCELLED}),
    MeetupStatus.CONFIRMED: frozenset({MeetupStatus.COMPLETED, MeetupStatus.CANCELLED}),
    MeetupStatus.COMPLETED: frozenset(),
    MeetupStatus.CANCELLED: frozenset(),
}

REPORT_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.REVIEWED}),
    ReportStatus.REVIEWED: frozenset({ReportStatus.RESOLVED}),
    ReportStatus.RESOLVED: frozenset(),
}

SHOP_EVENT_TRANSITIONS: dict[ShopEventStatus, frozenset[ShopEventStatus]] = {
    ShopEventStatus.DRAFT: frozenset({ShopEventStatus.PUBLISHED, ShopEventStatus.CANCELLED}),
    ShopEventStatus.PUBLISHED: frozenset({ShopEventStatus.CANCELLED, ShopEventStatus.COMPLETED}),
    ShopEventStatus.CANCELLED: frozenset(),
    ShopEventStatus.COMPLETED: frozenset(),
}

# ADR: every mapping explicit; a new entity kind requires editing both dicts
TRANSITIONS: dict[EntityKind, dict] = {
    EntityKind.LISTING: LISTING_TRANSITIONS,
    EntityKind.OFFER: OFFER_TRANSITIONS,
    EntityKind.MATCH: MATCH_TRANSITIONS,
    EntityKind.MEETUP: MEETUP_TRANSITIONS,
    EntityKind.REPORT: REPORT_TRANSITIONS,
    EntityKind.SHOP_EVENT: SHOP_EVENT_TRANSITIONS,
}

STATUS_ENUMS: dict[EntityKind, type[Enum]] = {
    EntityKind.LISTING: ListingStatus,
    EntityKind.OFFER: OfferStatus,
    EntityKind.MATCH: MatchStatus,
    EntityKind.MEETUP: MeetupStatus,
    EntityKind.REPORT: ReportStatus,
    EntityKind.SHOP_EVENT: ShopEventStatus,
}


def _check_maps_complete() -> None:
    for kind, status_enum in STATUS_ENUMS.items():
        missing = set(status_enum) - set(TRANSITIONS[kind])
        if missing:
            raise RuntimeError(
                f"Transition map for {kind.value} missing: "
                f"{sorted(m.value for m in missing)}"
            )


_check_maps_complete()


# ─── Helpers ─────────────────────────────────────────────────────

def _coerce(kind: EntityKind, status: object) -> Enum | None:
    """Resolve a status value to its Enum member, or None if unknown."""
    status_enum = STATUS_ENUMS[EntityKind(kind)]
    if isinstance(status, status_enum):
        return status
    try:
        return status_enum(status)
    except ValueError:
        return None


def _value(status: object) -> str:
    return status.value if isinstance(status, Enum) else str(status)


def valid_transitions(kind: EntityKind | str, from_status: object) -> frozenset:
    """Allowed target statuses from from_status. Empty if terminal or unknown."""
    kind = EntityKind(kind)
    current = _coerce(kind, from_status)
    if current is None:
        return frozenset()
    return TRANSITIONS[kind].get(current, frozenset())


def can_transition(
    kind: EntityKind | str, from_status: object, to_status: object,
) -> bool:
    """True if from_status -> to_status is legal for the entity kind."""
    kind = EntityKind(kind)
    target = _coerce(kind, to_status)
    if target is None:
        return False
    return target in valid_transitions(kind, from_status)


def assert_transition(
    kind: EntityKind | str, from_status: object, to_status: object,
) -> None:
    """Raise InvalidTransitionError if the transition is illegal. Never mutates."""
    kind = EntityKind(kind)
    if can_transition(kind, from_status, to_status):
        return
    valid = sorted(s.value for s in valid_transitions(kind, from_status))
    raise InvalidTransitionError(
        kind.value, _value(from_status), _value(to_status), valid,
    )


def is_terminal_status(kind: EntityKind | str, status: object) -> bool:
    """True if no further transitions are possible from status."""
    return not valid_transitions(kind, status)


def is_actionable_offer(status: object) -> bool:
    return _coerce(EntityKind.OFFER, status) in (
        OfferStatus.PENDING, OfferStatus.COUNTERED,
    )


def is_actionable_listing(status: object) -> bool:
    return _coerce(EntityKind.LISTING, status) in (
        ListingStatus.ACTIVE, ListingStatus.MATCHED,
    )


def is_actionable_meetup(status: object) -> bool:
    return _coerce(EntityKind.MEETUP, status) is MeetupStatus.CONFIRMED


def is_actionable_shop_event(status: object) -> bool:
    return _coerce(EntityKind.SHOP_EVENT, status) in (
        ShopEventStatus.DRAFT, ShopEventStatus.PUBLISHED,
    )


def state_step_index(
    kind: EntityKind | str, from_status: object, to_status: object,
) -> int:
    """Deterministic index of a transition within the entity's state machine.

    Steps are ordered by source status (Enum declaration order), then by
    target (Enum declaration order). An unknown transition returns the total
    number of steps, one past the last valid index.
    """
    kind = EntityKind(kind)
    status_enum = STATUS_ENUMS[kind]
    source = _coerce(kind, from_status)
    target = _coerce(kind, to_status)
    idx = 0
    for status in status_enum:
        for candidate in status_enum:
            if candidate not in TRANSITIONS[kind][status]:
                continue
            if status is source and candidate is target:
                return idx
            idx += 1
    return idx
