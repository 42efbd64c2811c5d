"""Notification Formatting: pure title/body builders for push notifications.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - Unknown message types fall back to the generic "New message" body
    - Missing sender names fall back to FALLBACK_SENDER_NAME
"""

from dataclasses import dataclass

from tradehub.core.domain_types import MessageType

FALLBACK_SENDER_NAME = "Someone"
SYSTEM_TITLE = "TCG Trade Hub"


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body: str


def sender_name_or_fallback(name: str | None) -> str:
    return name or FALLBACK_SENDER_NAME


def format_notification_body(
    sender_name: str, message_type: MessageType | str, body: str | None,
) -> NotificationContent:
    """Title and body for a chat message push, by message type."""
    try:
        kind = MessageType(message_type)
    except ValueError:
        kind = None

    if kind is MessageType.TEXT:
        return NotificationContent(sender_name, body or "Sent a message")
    if kind is MessageType.IMAGE:
        return NotificationContent(sender_name, "Sent an image")
    if kind is MessageType.CARD_OFFER:
        return NotificationContent(
            f"{sender_name} - Trade Offer", "Sent you a card trade offer",
        )
    if kind is MessageType.CARD_OFFER_RESPONSE:
        return NotificationContent(
            f"{sender_name} - Trade Response", "Responded to your trade offer",
        )
    if kind is MessageType.MEETUP_PROPOSAL:
        return NotificationContent(
            f"{sender_name} - Meetup Proposal", "Proposed a meetup location and time",
        )
    if kind is MessageType.MEETUP_RESPONSE:
        return NotificationContent(
            f"{sender_name} - Meetup Response", "Responded to your meetup proposal",
        )
    if kind is MessageType.SYSTEM:
        return NotificationContent(SYSTEM_TITLE, body or "New system notification")
    return NotificationContent(sender_name, body or "New message")


# ─── Trade Event Builders ────────────────────────────────────────

def format_offer_created(sender_name: str) -> NotificationContent:
    return NotificationContent(f"{sender_name} - Trade Offer", "Sent you a trade offer")


def format_offer_accepted(sender_name: str) -> NotificationContent:
    return NotificationContent(f"{sender_name} - Trade Offer", "Accepted your trade offer")


def format_offer_declined(sender_name: str) -> NotificationContent:
    return NotificationContent(f"{sender_name} - Trade Offer", "Declined your trade offer")


def format_meetup_completed(sender_name: str) -> NotificationContent:
    return NotificationContent(f"{sender_name} - Meetup", "Marked the meetup as complete")
