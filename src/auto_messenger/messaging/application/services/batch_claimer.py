from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from auto_messenger.messaging.domain.entities.message import Message
from auto_messenger.messaging.domain.exceptions import BatchClaimError
from auto_messenger.messaging.domain.protocols.message_store import MessageStore
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClaimedBatch:
    """Messages moved pending → processing by one claim, in claim order."""
    messages: Tuple[Message, ...] = ()

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    @property
    def ids(self) -> list:
        return [m.id for m in self.messages]


class BatchClaimer:
    """Claims exclusive batches through the store's skip-locked claim contract."""

    def __init__(self, store: MessageStore):
        self._store = store

    async def claim(self, limit: int) -> ClaimedBatch:
        """
        Raises:
            ValueError: If limit < 1
            BatchClaimError: If the claim transaction failed (nothing claimed)
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        try:
            messages = await self._store.claim_pending(limit)
        except Exception as e:
            raise BatchClaimError(f"claim of up to {limit} messages failed: {e}") from e

        batch = ClaimedBatch(tuple(messages))
        if batch:
            logger.info("Claimed message batch", size=len(batch), limit=limit)
        return batch
