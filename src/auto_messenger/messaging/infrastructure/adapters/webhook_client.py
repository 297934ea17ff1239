"""Webhook delivery adapter (httpx)."""
from __future__ import annotations

from typing import Callable, Optional
from uuid import uuid4

import httpx

from auto_messenger.messaging.domain.entities.message import Message
from auto_messenger.messaging.domain.value_objects.delivery_outcome import (
    DeliveryOutcome,
    OutcomeKind,
)

REQUEST_ID_HEADER = "X-Request-ID"
ACCEPTED = 202
DEFAULT_TIMEOUT_SECONDS = 5.0


def build_payload(message: Message) -> dict:
    return {"to": message.destination, "content": message.content}


def _external_id(response: httpx.Response) -> Optional[str]:
    """messageId from a success body; the body is optional and may be anything."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    value = data.get("messageId")
    return value if isinstance(value, str) and value else None


def classify_response(response: httpx.Response, request_id: Optional[str] = None) -> DeliveryOutcome:
    """
    202        -> delivered
    5xx        -> retryable
    4xx        -> terminal
    any other  -> terminal (redirects and unexpected 2xx are not acceptance)
    """
    code = response.status_code
    if code == ACCEPTED:
        return DeliveryOutcome(
            OutcomeKind.DELIVERED,
            request_id=request_id,
            external_id=_external_id(response),
            status_code=code,
        )
    if code >= 500:
        kind = OutcomeKind.RETRYABLE_FAILURE
        error = response.text[:200]
    elif code >= 400:
        kind = OutcomeKind.TERMINAL_FAILURE
        error = response.text[:200]
    else:
        kind = OutcomeKind.TERMINAL_FAILURE
        error = f"unexpected status {code}"
    return DeliveryOutcome(kind, request_id=request_id, status_code=code, error=error)


class WebhookDeliveryClient:
    """Posts one message per call to the configured webhook and classifies the reply."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        webhook_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        request_id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self._client = http_client
        self._url = webhook_url
        self._timeout = timeout
        self._request_id_factory = request_id_factory

    async def deliver(self, message: Message) -> DeliveryOutcome:
        # New id per attempt so retries are distinguishable end-to-end
        request_id = self._request_id_factory()
        try:
            response = await self._client.post(
                self._url,
                json=build_payload(message),
                headers={REQUEST_ID_HEADER: request_id},
                timeout=self._timeout,
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            # a bad endpoint fails the same way on every attempt
            return DeliveryOutcome(
                OutcomeKind.TERMINAL_FAILURE,
                request_id=request_id,
                error=str(e) or e.__class__.__name__,
            )
        except httpx.HTTPError as e:
            return DeliveryOutcome(
                OutcomeKind.RETRYABLE_FAILURE,
                request_id=request_id,
                error=str(e) or e.__class__.__name__,
            )
        return classify_response(response, request_id)
