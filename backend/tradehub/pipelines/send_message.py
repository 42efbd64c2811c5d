"""sendMessage: insert a chat message and push it to the recipient.

Invariants:
    - No pre-checks: conversation membership is enforced inside send_message_v1
    - Recipient is resolved by the procedure (the other match participant)
    - System messages are never pushed
"""

from tradehub.pipelines.engine import MutationSpec, Pipeline, PipelineContext
from tradehub.schemas.pipelines import SendMessageInput, SendMessageResult
from tradehub.services.notify import notify_new_message


def _map_params(input_data: SendMessageInput, context: PipelineContext) -> dict:
    return {
        "p_conversation_id": input_data.conversation_id,
        "p_sender_id": context.user_id,
        "p_type": input_data.type.value,
        "p_body": input_data.body,
        "p_payload": input_data.payload,
    }


send_message = Pipeline(
    name="sendMessage",
    description=(
        "Sends a message in an existing conversation. Inserts the message row atomically "
        "and fires a push notification to the recipient."
    ),
    input_schema=SendMessageInput,
    mutation=MutationSpec(
        procedure="send_message_v1",
        map_params=_map_params,
        result_schema=SendMessageResult,
    ),
    post_effects=(notify_new_message,),
)
