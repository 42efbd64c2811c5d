"""Notification Formatting: tests for the pure push title/body builders."""

import pytest

from tradehub.core.domain_types import MessageType
from tradehub.core.format_notifications import (
    FALLBACK_SENDER_NAME,
    SYSTEM_TITLE,
    format_meetup_completed,
    format_notification_body,
    format_offer_accepted,
    format_offer_created,
    format_offer_declined,
    sender_name_or_fallback,
)


@pytest.mark.parametrize("message_type, title, body", [
    (MessageType.IMAGE, "Ash", "Sent an image"),
    (MessageType.CARD_OFFER, "Ash - Trade Offer", "Sent you a card trade offer"),
    (MessageType.CARD_OFFER_RESPONSE, "Ash - Trade Response", "Responded to your trade offer"),
    (MessageType.MEETUP_PROPOSAL, "Ash - Meetup Proposal", "Proposed a meetup location and time"),
    (MessageType.MEETUP_RESPONSE, "Ash - Meetup Response", "Responded to your meetup proposal"),
])
def test_fixed_bodies_per_message_type(message_type, title, body):
    content = format_notification_body("Ash", message_type, "ignored")
    assert (content.title, content.body) == (title, body)


def test_text_message_uses_body():
    content = format_notification_body("Ash", "text", "Still have the Charizard?")
    assert content.title == "Ash"
    assert content.body == "Still have the Charizard?"


def test_text_message_without_body_falls_back():
    assert format_notification_body("Ash", MessageType.TEXT, None).body == "Sent a message"


def test_system_message_uses_app_title():
    content = format_notification_body("Ash", MessageType.SYSTEM, None)
    assert content.title == SYSTEM_TITLE
    assert content.body == "New system notification"


def test_unknown_type_falls_back_to_generic_body():
    content = format_notification_body("Ash", "sticker", None)
    assert (content.title, content.body) == ("Ash", "New message")


def test_sender_fallback_name():
    assert sender_name_or_fallback(None) == FALLBACK_SENDER_NAME
    assert sender_name_or_fallback("") == "Someone"
    assert sender_name_or_fallback("Misty") == "Misty"


def test_trade_event_builders():
    assert format_offer_created("Misty").body == "Sent you a trade offer"
    assert format_offer_accepted("Misty").body == "Accepted your trade offer"
    assert format_offer_declined("Misty").body == "Declined your trade offer"
    meetup = format_meetup_completed("Misty")
    assert meetup.title == "Misty - Meetup"
    assert meetup.body == "Marked the meetup as complete"
