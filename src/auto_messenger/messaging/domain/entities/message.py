"""
Message Entity
Outbound message queued for delivery to the webhook.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from auto_messenger.messaging.domain.exceptions import (
    InvalidMessageContentError,
    InvalidStatusTransitionError,
)
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus

MAX_CONTENT_LENGTH = 160
MAX_DESTINATION_LENGTH = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Message:
    """
    Attributes:
        destination: Recipient phone number
        content: Text payload, at most 160 characters
        status: pending, processing, success, failed
        id: Opaque identifier, stable for the message's lifetime
        created_at: Insert timestamp
        updated_at: Last status change, None until the first update
    """
    destination: str
    content: str
    status: MessageStatus = MessageStatus.PENDING
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.destination or len(self.destination) > MAX_DESTINATION_LENGTH:
            raise InvalidMessageContentError(
                f"destination must be 1..{MAX_DESTINATION_LENGTH} characters"
            )
        if len(self.content) > MAX_CONTENT_LENGTH:
            raise InvalidMessageContentError(
                f"content exceeds {MAX_CONTENT_LENGTH} characters"
            )
        self.status = MessageStatus(self.status)

    def transition_to(self, target: MessageStatus, at: Optional[datetime] = None) -> None:
        """Move to `target`, enforcing the status transition table."""
        if not self.status.can_transition_to(target):
            raise InvalidStatusTransitionError(self.id, self.status, target)
        self.status = target
        self.updated_at = at or utcnow()

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, to={self.destination}, status={self.status.value})>"
