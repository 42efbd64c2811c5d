"""completeMeetup: mark the acting participant's half of a meetup as done.

Invariants:
    - Meetup must be 'confirmed' and the actor one of its match's two participants
    - complete_meetup_v1 sets the actor's flag; when both flags are set it completes
      the meetup and match and increments both users' total_trades exactly once
    - The other participant is notified only while the meetup is half-complete
"""

from tradehub.core.domain_types import EntityKind, MeetupStatus
from tradehub.core.errors import NotAuthorizedError, NotFoundError
from tradehub.core.transitions import assert_transition
from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext, PreCheck
from tradehub.schemas.pipelines import CompleteMeetupInput, CompleteMeetupResult
from tradehub.services.notify import notify_meetup_completed


async def _check_meetup_participant(
    input_data: CompleteMeetupInput, context: PipelineContext,
) -> None:
    meetup = await context.store.get_meetup(input_data.meetup_id)
    if meetup is None:
        raise NotFoundError("Meetup", input_data.meetup_id)
    # only 'confirmed' may reach 'completed'
    assert_transition(EntityKind.MEETUP, meetup.status, MeetupStatus.COMPLETED)

    match = await context.store.get_match(meetup.match_id)
    if match is None:
        raise NotFoundError("Match", meetup.match_id)
    if not match.has_participant(context.user_id):
        raise NotAuthorizedError("Not a participant in this meetup")


check_meetup_participant = PreCheck("checkMeetupParticipant", _check_meetup_participant)


def _map_params(input_data: CompleteMeetupInput, context: PipelineContext) -> dict:
    return {
        "p_meetup_id": input_data.meetup_id,
        "p_user_id": context.user_id,
    }


complete_meetup = Pipeline(
    name="completeMeetup",
    description=(
        "Marks the current user as completed on a meetup. If both parties have completed, "
        "atomically finalizes the meetup and match, and increments both users total_trades."
    ),
    input_schema=CompleteMeetupInput,
    pre_checks=(check_meetup_participant,),
    mutation=MutationSpec(
        procedure="complete_meetup_v1",
        map_params=_map_params,
        result_schema=CompleteMeetupResult,
    ),
    post_effects=(notify_meetup_completed,),
)
