"""expireListing: soft-delete a listing and withdraw its open offers.

Invariants:
    - Only the owner may expire; listing must legally reach 'expired'
    - expire_listing_v1 withdraws every pending/countered offer in the same transaction
    - No post-effects
"""

from tradehub.core.domain_types import EntityKind, ListingStatus
from tradehub.core.errors import NotAuthorizedError, NotFoundError
from tradehub.core.transitions import assert_transition
from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext, PreCheck
from tradehub.schemas.pipelines import ExpireListingInput, ExpireListingResult


async def _check_listing_ownership(
    input_data: ExpireListingInput, context: PipelineContext,
) -> None:
    listing = await context.store.get_listing(input_data.listing_id)
    if listing is None:
        raise NotFoundError("Listing", input_data.listing_id)
    if listing.owner_id != context.user_id:
        raise NotAuthorizedError("Only the listing owner can expire a listing")
    assert_transition(EntityKind.LISTING, listing.status, ListingStatus.EXPIRED)


check_listing_ownership = PreCheck("checkListingOwnership", _check_listing_ownership)


def _map_params(input_data: ExpireListingInput, context: PipelineContext) -> dict:
    return {
        "p_listing_id": input_data.listing_id,
        "p_user_id": context.user_id,
    }


expire_listing = Pipeline(
    name="expireListing",
    description=(
        "Soft-deletes a listing by transitioning to expired status. "
        "Atomically withdraws any pending/countered offers on the listing."
    ),
    input_schema=ExpireListingInput,
    pre_checks=(check_listing_ownership,),
    mutation=MutationSpec(
        procedure="expire_listing_v1",
        map_params=_map_params,
        result_schema=ExpireListingResult,
    ),
)
