from __future__ import annotations

from typing import List

from auto_messenger.messaging.application.worker.scheduler import Scheduler
from auto_messenger.messaging.domain.entities.message import Message
from auto_messenger.messaging.domain.protocols.message_store import MessageStore


class MessageSenderService:
    """Control surface over the scheduler: start, stop, and list delivered messages."""

    def __init__(self, scheduler: Scheduler, store: MessageStore):
        self.scheduler = scheduler
        self._store = store

    @property
    def is_running(self) -> bool:
        return self.scheduler.is_running

    async def start(self) -> bool:
        return await self.scheduler.start()

    async def stop(self) -> bool:
        return await self.scheduler.stop()

    async def list_delivered(self) -> List[Message]:
        return await self._store.list_delivered()
