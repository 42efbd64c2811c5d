"""Domain Types: closed status enums and identity types for the trade lifecycle.

Invariants:
    - Every status column in the store maps to exactly one Enum below
    - UserId, ListingId, OfferId, ... wrap UUIDs, never use bare UUID in domain logic
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare equal to their DB string values
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ListingId = NewType("ListingId", UUID)
OfferId = NewType("OfferId", UUID)
MatchId = NewType("MatchId", UUID)
MeetupId = NewType("MeetupId", UUID)


# ─── Entity Kinds ────────────────────────────────────────────────

class EntityKind(str, Enum):
    """Entities that carry a status column governed by a transition map."""
    LISTING = "listing"
    OFFER = "offer"
    MATCH = "match"
    MEETUP = "meetup"
    REPORT = "report"
    SHOP_EVENT = "shop_event"


# ─── Status Enums ────────────────────────────────────────────────

class ListingStatus(str, Enum):
    """Listing lifecycle, maps to listings.status."""
    ACTIVE = "active"
    MATCHED = "matched"
    COMPLETED = "completed"
    EXPIRED = "expired"


class OfferStatus(str, Enum):
    """Offer lifecycle, maps to offers.status."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COUNTERED = "countered"
    WITHDRAWN = "withdrawn"


class MatchStatus(str, Enum):
    """Match lifecycle, maps to matches.status."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MeetupStatus(str, Enum):
    """Meetup lifecycle, maps to meetups.status."""
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReportStatus(str, Enum):
    """Report moderation lifecycle, linear."""
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"


class ShopEventStatus(str, Enum):
    """Shop event lifecycle, independent of trade flow."""
    DRAFT = "draft"
    PUBLISHED = "published"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# ─── Value Enums ─────────────────────────────────────────────────

class MessageType(str, Enum):
    """Chat message types; drive notification formatting."""
    TEXT = "text"
    IMAGE = "image"
    CARD_OFFER = "card_offer"
    CARD_OFFER_RESPONSE = "card_offer_response"
    MEETUP_PROPOSAL = "meetup_proposal"
    MEETUP_RESPONSE = "meetup_response"
    SYSTEM = "system"


class TcgType(str, Enum):
    POKEMON = "pokemon"
    MTG = "mtg"
    YUGIOH = "yugioh"


class CardCondition(str, Enum):
    NEAR_MINT = "nm"
    LIGHTLY_PLAYED = "lp"
    MODERATELY_PLAYED = "mp"
    HEAVILY_PLAYED = "hp"
    DAMAGED = "dmg"
