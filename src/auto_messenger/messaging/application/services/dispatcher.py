from __future__ import annotations

import asyncio
from dataclasses import asdict, dataclass
from typing import Optional

from auto_messenger.messaging.application.services.batch_claimer import ClaimedBatch
from auto_messenger.messaging.application.services.delivery_service import (
    DeliveryResult,
    DeliveryService,
)
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BatchReport:
    succeeded: int = 0
    failed: int = 0
    abandoned: int = 0
    errored: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.abandoned + self.errored

    def add(self, result: DeliveryResult) -> None:
        if result is DeliveryResult.SUCCESS:
            self.succeeded += 1
        elif result is DeliveryResult.FAILED:
            self.failed += 1
        else:
            self.abandoned += 1


class Dispatcher:
    """
    Fans a claimed batch out into one delivery task per message and joins on
    all of them. At most `max_concurrency` deliveries run at once (defaults
    to the batch size).
    """

    def __init__(self, delivery: DeliveryService, max_concurrency: Optional[int] = None):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._delivery = delivery
        self._max_concurrency = max_concurrency

    async def process(
        self,
        batch: ClaimedBatch,
        cancel_scope: Optional[asyncio.Event] = None,
        *,
        max_concurrency: Optional[int] = None,
    ) -> BatchReport:
        report = BatchReport()
        if not batch:
            return report

        limit = max_concurrency or self._max_concurrency or len(batch)
        semaphore = asyncio.Semaphore(limit)

        async def run_one(message):
            async with semaphore:
                return await self._delivery.deliver(message, cancel_scope)

        # return_exceptions keeps one crashing delivery from cancelling its siblings
        results = await asyncio.gather(
            *(run_one(message) for message in batch),
            return_exceptions=True,
        )

        for message, result in zip(batch, results):
            if isinstance(result, asyncio.CancelledError):
                report.abandoned += 1
            elif isinstance(result, BaseException):
                report.errored += 1
                logger.error(
                    "Delivery task crashed",
                    message_id=str(message.id),
                    error=repr(result),
                )
                # every claimed message ends in a terminal status
                await self._delivery.mark_failed(message)
            else:
                report.add(result)

        logger.info("Batch processed", size=len(batch), concurrency=limit, **asdict(report))
        return report
