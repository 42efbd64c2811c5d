"""Notification Side-Effects: post-commit push notifications for trade events.

Invariants:
    - send_push_notification NEVER raises (Exception): failures are logged and dropped
    - Every notify_* effect only reads through the store; none writes trade rows
    - No notifier configured -> effects return without doing any reads
    - Missing rows (offer/listing/match deleted meanwhile) -> skip silently
    - System messages are never pushed

Design Decisions:
    - Formatting lives in core/format_notifications (pure); this module only looks up
      recipients and sender names, then hands off to the dispatcher
    - Push data keys are camelCase: consumed verbatim by the mobile client
"""

import logging
from uuid import UUID

from tradehub.core.domain_types import MessageType
from tradehub.core.format_notifications import (
    NotificationContent,
    format_meetup_completed,
    format_notification_body,
    format_offer_accepted,
    format_offer_created,
    format_offer_declined,
    sender_name_or_fallback,
)
from tradehub.core.repository_protocols import NotificationDispatcher, PushNotification
from tradehub.pipelines.engine import PipelineContext, PostEffect
from tradehub.schemas.pipelines import (
    AcceptOfferResult,
    CompleteMeetupInput,
    CompleteMeetupResult,
    CreateOfferInput,
    CreateOfferResult,
    DeclineOfferResult,
    OfferDecisionInput,
    SendMessageInput,
    SendMessageResult,
)

logger = logging.getLogger(__name__)


async def send_push_notification(
    notifier: NotificationDispatcher | None, notification: PushNotification,
) -> bool:
    """Fire-and-forget delivery. Returns True if the dispatcher accepted it."""
    if notifier is None:
        logger.debug("Push skipped: no notifier configured")
        return False
    try:
        await notifier.send(notification)
        return True
    except Exception as e:
        logger.error(
            f"[send_push_notification] delivery to {notification.recipient_user_id} failed: {e}",
            extra={"user_id": str(notification.recipient_user_id)},
        )
        return False


async def _sender_name(context: PipelineContext) -> str:
    return sender_name_or_fallback(
        await context.store.get_display_name(context.user_id),
    )


async def _push(
    context: PipelineContext, recipient: UUID,
    content: NotificationContent, data: dict,
) -> None:
    await send_push_notification(context.notifier, PushNotification(
        recipient_user_id=recipient,
        title=content.title,
        body=content.body,
        data=data,
    ))


# ─── Post-Effects ────────────────────────────────────────────────

async def _notify_offer_created(
    input_data: CreateOfferInput, result: CreateOfferResult,
    context: PipelineContext,
) -> None:
    if context.notifier is None:
        return
    listing = await context.store.get_listing(input_data.listing_id)
    if listing is None or listing.owner_id == context.user_id:
        return
    content = format_offer_created(await _sender_name(context))
    await _push(context, listing.owner_id, content, {"offerId": str(result.offer_id)})


async def _notify_offer_accepted(
    input_data: OfferDecisionInput, result: AcceptOfferResult,
    context: PipelineContext,
) -> None:
    if context.notifier is None:
        return
    offer = await context.store.get_offer(input_data.offer_id)
    if offer is None:
        return
    content = format_offer_accepted(await _sender_name(context))
    await _push(context, offer.offerer_id, content, {
        "matchId": str(result.match_id),
        "conversationId": str(result.conversation_id),
    })


async def _notify_offer_declined(
    input_data: OfferDecisionInput, result: DeclineOfferResult,
    context: PipelineContext,
) -> None:
    if context.notifier is None:
        return
    offer = await context.store.get_offer(input_data.offer_id)
    if offer is None:
        return
    content = format_offer_declined(await _sender_name(context))
    await _push(context, offer.offerer_id, content, {"offerId": str(input_data.offer_id)})


async def _notify_meetup_completed(
    input_data: CompleteMeetupInput, result: CompleteMeetupResult,
    context: PipelineContext,
) -> None:
    # Only "they marked their half": a fully completed meetup needs no nudge
    if result.both_completed or context.notifier is None:
        return
    meetup = await context.store.get_meetup(result.meetup_id)
    if meetup is None:
        return
    match = await context.store.get_match(meetup.match_id)
    if match is None:
        return
    content = format_meetup_completed(await _sender_name(context))
    await _push(
        context, match.other_participant(context.user_id), content,
        {"meetupId": str(result.meetup_id)},
    )


async def _notify_new_message(
    input_data: SendMessageInput, result: SendMessageResult,
    context: PipelineContext,
) -> None:
    if input_data.type is MessageType.SYSTEM or context.notifier is None:
        return
    content = format_notification_body(
        await _sender_name(context), input_data.type, input_data.body,
    )
    await _push(context, result.recipient_id, content, {
        "type": input_data.type.value,
        "conversationId": str(result.conversation_id),
        "messageId": str(result.message_id),
    })


notify_offer_created = PostEffect("notifyOfferCreated", _notify_offer_created)
notify_offer_accepted = PostEffect("notifyOfferAccepted", _notify_offer_accepted)
notify_offer_declined = PostEffect("notifyOfferDeclined", _notify_offer_declined)
notify_meetup_completed = PostEffect("notifyMeetupCompleted", _notify_meetup_completed)
notify_new_message = PostEffect("notifyNewMessage", _notify_new_message)
