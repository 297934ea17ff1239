"""
Per-message delivery loop.

    Attempting --202--------------------> Delivered        (status success)
    Attempting --4xx / unexpected-------> TerminalFailure  (status failed)
    Attempting --transport / 5xx--------> Attempting       while the policy allows
                                      +-> TerminalFailure  (status failed) once it refuses

A cancellation scope set between attempts abandons the message: it keeps its
processing status and no further call is issued. A call already sent is
never interrupted.
"""
from __future__ import annotations

import asyncio
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

import structlog

from auto_messenger.messaging.domain.entities.message import Message, utcnow
from auto_messenger.messaging.domain.protocols.delivery_client import DeliveryClient
from auto_messenger.messaging.domain.protocols.message_store import MessageStore
from auto_messenger.messaging.domain.services.retry_policy import RetryPolicy
from auto_messenger.messaging.domain.value_objects.delivery_outcome import DeliveryOutcome
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus
from auto_messenger.messaging.domain.protocols.delivery_recorder import DeliveryRecorder
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


class DeliveryResult(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    ABANDONED = "abandoned"


class DeliveryService:
    def __init__(
        self,
        store: MessageStore,
        client: DeliveryClient,
        retry_policy: RetryPolicy,
        recorder: DeliveryRecorder,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._client = client
        self._retry_policy = retry_policy
        self._recorder = recorder
        self._clock = clock

    async def deliver(
        self, message: Message, cancel_scope: Optional[asyncio.Event] = None
    ) -> DeliveryResult:
        msg_log = logger.bind(message_id=str(message.id))
        attempt = 0

        while True:
            if cancel_scope is not None and cancel_scope.is_set():
                msg_log.warning("Delivery abandoned before attempt", attempt=attempt + 1)
                return DeliveryResult.ABANDONED

            attempt += 1
            attempt_log = msg_log.bind(attempt=attempt)
            outcome = await self._client.deliver(message)

            if outcome.is_delivered:
                await self._finalize(message, MessageStatus.SUCCESS, attempt_log)
                attempt_log.info(
                    "Message delivered",
                    request_id=outcome.request_id,
                    external_id=outcome.external_id,
                )
                await self._record(outcome, attempt_log)
                return DeliveryResult.SUCCESS

            if not outcome.is_retryable:
                attempt_log.error(
                    "Delivery rejected",
                    request_id=outcome.request_id,
                    status_code=outcome.status_code,
                    error=outcome.error,
                )
                await self._finalize(message, MessageStatus.FAILED, attempt_log)
                return DeliveryResult.FAILED

            attempt_log.warning(
                "Delivery attempt failed",
                request_id=outcome.request_id,
                status_code=outcome.status_code,
                error=outcome.error,
            )
            decision = self._retry_policy.attempt(attempt)
            if not decision.should_continue:
                msg_log.error("Retry attempts exhausted", attempts=attempt)
                await self._finalize(message, MessageStatus.FAILED, msg_log)
                return DeliveryResult.FAILED

            if await self._wait(decision.delay, cancel_scope):
                msg_log.warning("Delivery abandoned during backoff", attempts=attempt)
                return DeliveryResult.ABANDONED

    async def mark_failed(self, message: Message) -> None:
        """Finalize a message whose delivery crashed so it does not stay processing."""
        await self._finalize(
            message, MessageStatus.FAILED, logger.bind(message_id=str(message.id))
        )

    @staticmethod
    async def _wait(delay: float, cancel_scope: Optional[asyncio.Event]) -> bool:
        """Sleep `delay` seconds; True if the scope was cancelled meanwhile."""
        if cancel_scope is None:
            await asyncio.sleep(delay)
            return False
        if delay <= 0:
            return cancel_scope.is_set()
        try:
            await asyncio.wait_for(cancel_scope.wait(), timeout=delay)
            return True
        except asyncio.TimeoutError:
            return False

    async def _finalize(
        self, message: Message, status: MessageStatus, log: structlog.stdlib.BoundLogger
    ) -> None:
        # Store errors are logged only; a delivered message stays delivered
        try:
            await self._store.update_status(message.id, status, self._clock())
        except Exception as e:
            log.error("Failed to update message status", status=status.value, error=str(e))

    async def _record(
        self, outcome: DeliveryOutcome, log: structlog.stdlib.BoundLogger
    ) -> None:
        if not outcome.external_id:
            log.debug("Webhook did not echo a message id; nothing to record")
            return
        try:
            await self._recorder.record(outcome.external_id, self._clock())
        except Exception as e:
            log.error("Failed to save idempotency record", external_id=outcome.external_id, error=str(e))
