"""declineOffer: decline a single offer. Only the listing owner can decline."""

from tradehub.core.domain_types import EntityKind, OfferStatus
from tradehub.core.errors import NotAuthorizedError, NotFoundError
from tradehub.core.transitions import assert_transition
from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext, PreCheck
from tradehub.schemas.pipelines import DeclineOfferResult, OfferDecisionInput
from tradehub.services.notify import notify_offer_declined


async def _check_listing_ownership(
    input_data: OfferDecisionInput, context: PipelineContext,
) -> None:
    listing = await context.store.get_listing(input_data.listing_id)
    if listing is None:
        raise NotFoundError("Listing", input_data.listing_id)
    if listing.owner_id != context.user_id:
        raise NotAuthorizedError("Only the listing owner can decline offers")


async def _check_offer_actionable(
    input_data: OfferDecisionInput, context: PipelineContext,
) -> None:
    offer = await context.store.get_offer(input_data.offer_id)
    if offer is None or offer.listing_id != input_data.listing_id:
        raise NotFoundError("Offer", input_data.offer_id)
    assert_transition(EntityKind.OFFER, offer.status, OfferStatus.DECLINED)


check_listing_ownership = PreCheck("checkListingOwnership", _check_listing_ownership)
check_offer_actionable = PreCheck("checkOfferActionable", _check_offer_actionable)


def _map_params(input_data: OfferDecisionInput, context: PipelineContext) -> dict:
    return {
        "p_offer_id": input_data.offer_id,
        "p_user_id": context.user_id,
    }


decline_offer = Pipeline(
    name="declineOffer",
    description="Declines a single offer on a listing. Only the listing owner can decline.",
    input_schema=OfferDecisionInput,
    pre_checks=(check_listing_ownership, check_offer_actionable),
    mutation=MutationSpec(
        procedure="decline_offer_v1",
        map_params=_map_params,
        result_schema=DeclineOfferResult,
    ),
    post_effects=(notify_offer_declined,),
)
