"""Pipeline Schemas: Pydantic models validating pipeline input and procedure results.

Invariants:
    - Inputs accept camelCase (RPC wire) or snake_case (Python callers) field names
    - Inputs reject unknown fields
    - Results mirror the procedure return shape exactly; a mismatch is a defect

Design Decisions:
    - Enum-typed fields (MessageType, TcgType, CardCondition): Pydantic rejects unknown values natively
    - field_validator for side-effect-free transforms (strip) only
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tradehub.core.domain_types import CardCondition, MessageType, TcgType


class PipelineInput(BaseModel):
    """Base for pipeline inputs."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="forbid",
        frozen=True,
    )


class PipelineResult(BaseModel):
    """Base for procedure results."""
    model_config = ConfigDict(frozen=True)


# ─── createOffer ─────────────────────────────────────────────────

class OfferItemInput(PipelineInput):
    card_name: str = Field(min_length=1, max_length=200)
    card_image_url: str
    card_external_id: str = Field(min_length=1)
    tcg: TcgType
    card_set: str | None = None
    card_number: str | None = None
    condition: CardCondition
    market_price: float | None = Field(None, ge=0)
    quantity: int = Field(1, gt=0)


class CreateOfferInput(PipelineInput):
    listing_id: UUID
    cash_amount: float = Field(ge=0)
    note: str | None = Field(None, max_length=2000)
    items: list[OfferItemInput] = Field(default_factory=list)
    parent_offer_id: UUID | None = None

    @field_validator("note")
    @classmethod
    def strip_note(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip() or None


class CreateOfferResult(PipelineResult):
    offer_id: UUID


# ─── acceptOffer / declineOffer ──────────────────────────────────

class OfferDecisionInput(PipelineInput):
    offer_id: UUID
    listing_id: UUID


class AcceptOfferResult(PipelineResult):
    match_id: UUID
    conversation_id: UUID
    declined_offer_count: int = Field(ge=0)


class DeclineOfferResult(PipelineResult):
    success: bool


# ─── expireListing ───────────────────────────────────────────────

class ExpireListingInput(PipelineInput):
    listing_id: UUID


class ExpireListingResult(PipelineResult):
    success: bool
    withdrawn_offer_count: int = Field(ge=0)


# ─── completeMeetup ──────────────────────────────────────────────

class CompleteMeetupInput(PipelineInput):
    meetup_id: UUID


class CompleteMeetupResult(PipelineResult):
    meetup_id: UUID
    both_completed: bool


# ─── sendMessage ─────────────────────────────────────────────────

class SendMessageInput(PipelineInput):
    conversation_id: UUID
    type: MessageType
    body: str | None = Field(None, max_length=5000)
    payload: dict[str, Any] | None = None


class SendMessageResult(PipelineResult):
    message_id: UUID
    conversation_id: UUID
    sender_id: UUID
    recipient_id: UUID
