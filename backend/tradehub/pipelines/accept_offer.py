"""acceptOffer: accept one offer, decline its siblings, match the listing.

Invariants:
    - Only the listing owner may accept; listing must legally reach 'matched'
    - Offer must belong to the listing and legally reach 'accepted'
    - accept_offer_v1 performs the whole cascade atomically: target accepted,
      pending/countered siblings declined, listing matched, Match + Conversation created
"""

from tradehub.core.domain_types import EntityKind, ListingStatus, OfferStatus
from tradehub.core.errors import NotAuthorizedError, NotFoundError
from tradehub.core.transitions import assert_transition
from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext, PreCheck
from tradehub.schemas.pipelines import AcceptOfferResult, OfferDecisionInput
from tradehub.services.notify import notify_offer_accepted


async def _check_listing_ownership(
    input_data: OfferDecisionInput, context: PipelineContext,
) -> None:
    listing = await context.store.get_listing(input_data.listing_id)
    if listing is None:
        raise NotFoundError("Listing", input_data.listing_id)
    if listing.owner_id != context.user_id:
        raise NotAuthorizedError("Only the listing owner can accept offers")
    assert_transition(EntityKind.LISTING, listing.status, ListingStatus.MATCHED)


async def _check_offer_actionable(
    input_data: OfferDecisionInput, context: PipelineContext,
) -> None:
    offer = await context.store.get_offer(input_data.offer_id)
    if offer is None or offer.listing_id != input_data.listing_id:
        raise NotFoundError("Offer", input_data.offer_id)
    assert_transition(EntityKind.OFFER, offer.status, OfferStatus.ACCEPTED)


check_listing_ownership = PreCheck("checkListingOwnership", _check_listing_ownership)
check_offer_actionable = PreCheck("checkOfferActionable", _check_offer_actionable)


def _map_params(input_data: OfferDecisionInput, context: PipelineContext) -> dict:
    return {
        "p_offer_id": input_data.offer_id,
        "p_listing_id": input_data.listing_id,
        "p_user_id": context.user_id,
    }


accept_offer = Pipeline(
    name="acceptOffer",
    description=(
        "Accepts an offer on a listing. Atomically: updates offer to accepted, "
        "declines all other pending/countered offers on the same listing, "
        "creates a match and conversation, updates listing to matched status."
    ),
    input_schema=OfferDecisionInput,
    pre_checks=(check_listing_ownership, check_offer_actionable),
    mutation=MutationSpec(
        procedure="accept_offer_v1",
        map_params=_map_params,
        result_schema=AcceptOfferResult,
    ),
    post_effects=(notify_offer_accepted,),
)
