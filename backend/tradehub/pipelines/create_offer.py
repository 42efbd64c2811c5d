"""createOffer: insert an offer and its items on an active listing.

Invariants:
    - Listing must exist, be active, and not be owned by the offerer
    - Offer + items inserted by create_offer_v1 in one transaction
    - Listing owner is notified after commit (best effort)
"""

from tradehub.core.domain_types import EntityKind, ListingStatus
from tradehub.core.errors import ListingNotActiveError, NotFoundError, SelfOfferError
from tradehub.core.transitions import valid_transitions
from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext, PreCheck
from tradehub.schemas.pipelines import CreateOfferInput, CreateOfferResult
from tradehub.services.notify import notify_offer_created


async def _check_listing_active(
    input_data: CreateOfferInput, context: PipelineContext,
) -> None:
    listing = await context.store.get_listing(input_data.listing_id)
    if listing is None:
        raise NotFoundError("Listing", input_data.listing_id)
    if listing.status != ListingStatus.ACTIVE:
        valid = sorted(s.value for s in valid_transitions(EntityKind.LISTING, listing.status))
        raise ListingNotActiveError(listing.status, valid)
    if listing.owner_id == context.user_id:
        raise SelfOfferError()


check_listing_active = PreCheck("checkListingActive", _check_listing_active)


def _map_params(input_data: CreateOfferInput, context: PipelineContext) -> dict:
    return {
        "p_listing_id": input_data.listing_id,
        "p_offerer_id": context.user_id,
        "p_cash_amount": input_data.cash_amount,
        "p_offerer_note": input_data.note,
        "p_parent_offer_id": input_data.parent_offer_id,
        "p_items": [item.model_dump(mode="json") for item in input_data.items],
    }


create_offer = Pipeline(
    name="createOffer",
    description=(
        "Creates an offer on a listing with optional card items, atomically. "
        "Validates listing is active and offerer is not the listing owner."
    ),
    input_schema=CreateOfferInput,
    pre_checks=(check_listing_active,),
    mutation=MutationSpec(
        procedure="create_offer_v1",
        map_params=_map_params,
        result_schema=CreateOfferResult,
    ),
    post_effects=(notify_offer_created,),
)
