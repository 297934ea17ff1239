"""Outbound Message ORM Model"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from auto_messenger.messaging.domain.entities.message import (
    MAX_CONTENT_LENGTH,
    MAX_DESTINATION_LENGTH,
)
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus
from auto_messenger.shared.database.base_model import Base


class MessageModel(Base):
    """
    Outbound message ORM model.

    Rows are claimed in batches by the scheduler (status pending → processing)
    and finalized by the delivery loop (success | failed).
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_status_created", "status", "created_at"),
    )

    # Primary key and created_at inherited from Base

    content: Mapped[str] = mapped_column(
        String(MAX_CONTENT_LENGTH),
        nullable=False,
    )

    phone_number: Mapped[str] = mapped_column(
        String(MAX_DESTINATION_LENGTH),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=MessageStatus.PENDING.value,
        nullable=False,
    )

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<MessageModel(id={self.id}, status={self.status})>"
