"""Expo Push Dispatcher: request shape, token skip and error mapping via httpx.MockTransport."""

import json
from uuid import uuid4

import httpx
import pytest

from tradehub.core.errors import PushDeliveryError
from tradehub.core.repository_protocols import PushNotification
from tradehub.infrastructure.push_client import ExpoPushDispatcher

PUSH_URL = "https://push.test/--/api/v2/push/send"


def _dispatcher(handler, tokens: dict) -> ExpoPushDispatcher:
    async def lookup(user_id):
        return tokens.get(user_id)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ExpoPushDispatcher(lookup, PUSH_URL, client=client)


async def test_posts_expo_payload():
    user = uuid4()
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": {"status": "ok"}})

    dispatcher = _dispatcher(handler, {user: "ExponentPushToken[abc]"})
    await dispatcher.send(PushNotification(user, "Ash - Trade Offer", "Sent you a trade offer", {"offerId": "1"}))

    [request] = seen
    assert str(request.url) == PUSH_URL
    assert json.loads(request.content) == {
        "to": "ExponentPushToken[abc]",
        "title": "Ash - Trade Offer",
        "body": "Sent you a trade offer",
        "sound": "default",
        "data": {"offerId": "1"},
    }


async def test_user_without_token_is_skipped():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200)

    await _dispatcher(handler, {}).send(PushNotification(uuid4(), "t", "b"))
    assert calls == []


async def test_non_2xx_raises_push_delivery_error():
    user = uuid4()
    dispatcher = _dispatcher(lambda request: httpx.Response(503, text="down"), {user: "tok"})
    with pytest.raises(PushDeliveryError) as exc_info:
        await dispatcher.send(PushNotification(user, "t", "b"))
    assert exc_info.value.status_code == 503


async def test_transport_error_raises_push_delivery_error():
    user = uuid4()

    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(PushDeliveryError):
        await _dispatcher(handler, {user: "tok"}).send(PushNotification(user, "t", "b"))
