"""Expo Push Dispatcher: delivers PushNotification objects through the Expo push API.

Invariants:
    - Recipient token looked up per send; no token -> skipped, not an error
    - Exactly one HTTP POST per delivered notification, no retries
    - Non-2xx responses and transport failures raise PushDeliveryError (core/errors.py)

Design Decisions:
    - Token lookup through a callable, not the store: the dispatcher stays usable
      from any context that can resolve a user's token
    - httpx.AsyncClient injected optionally: tests swap in an httpx.MockTransport
"""

import logging
from collections.abc import Awaitable, Callable
from uuid import UUID

import httpx

from tradehub.core.errors import PushDeliveryError
from tradehub.core.repository_protocols import PushNotification

logger = logging.getLogger(__name__)

TokenLookup = Callable[[UUID], Awaitable[str | None]]


class ExpoPushDispatcher:
    """NotificationDispatcher backed by the Expo push service."""

    def __init__(
        self,
        token_lookup: TokenLookup,
        push_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._token_lookup = token_lookup
        self._push_url = push_url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = client is None

    async def send(self, notification: PushNotification) -> None:
        token = await self._token_lookup(notification.recipient_user_id)
        if not token:
            logger.debug(
                f"Push skipped: user {notification.recipient_user_id} has no push token",
                extra={"user_id": str(notification.recipient_user_id)},
            )
            return

        payload = {
            "to": token,
            "title": notification.title,
            "body": notification.body,
            "sound": "default",
            "data": notification.data,
        }
        try:
            response = await self._client.post(
                self._push_url,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise PushDeliveryError(0, str(e)) from e

        if not response.is_success:
            raise PushDeliveryError(response.status_code, response.text[:500])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
