"""
Message Store Protocol
The only persistence contract the delivery pipeline depends on.
"""
from abc import abstractmethod
from datetime import datetime
from typing import List, Protocol
from uuid import UUID

from auto_messenger.messaging.domain.entities.message import Message
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus


class MessageStore(Protocol):
    """Repository protocol for outbound messages."""

    @abstractmethod
    async def claim_pending(self, limit: int) -> List[Message]:
        """
        Atomically claim up to `limit` pending messages.

        Rows held by another in-flight claim are skipped, never waited on.
        Returned messages are already in PROCESSING. All-or-nothing: on error
        nothing is claimed.
        """
        ...

    @abstractmethod
    async def update_status(
        self, message_id: UUID, status: MessageStatus, updated_at: datetime
    ) -> None:
        """
        Persist a status change.

        Raises:
            InvalidStatusTransitionError: Row missing or transition illegal
        """
        ...

    @abstractmethod
    async def list_delivered(self) -> List[Message]:
        """List messages the webhook accepted."""
        ...
