"""Message DTOs using Pydantic v2."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from auto_messenger.messaging.domain.entities.message import Message


class MessageResponse(BaseModel):
    """Delivered message as returned by GET /messages."""
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    to: str = Field(..., description="Recipient phone number")
    content: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            to=message.destination,
            content=message.content,
            status=message.status.value,
            created_at=message.created_at,
            updated_at=message.updated_at,
        )


class SchedulerStatusResponse(BaseModel):
    status: Literal["running", "stopped"]
    changed: bool = Field(..., description="False when the call was a no-op")


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    scheduler: Literal["running", "stopped"]
