"""
SQLAlchemy Message Store
Skip-locked batch claiming and guarded status updates.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auto_messenger.messaging.domain.entities.message import Message, utcnow
from auto_messenger.messaging.domain.exceptions import InvalidStatusTransitionError
from auto_messenger.messaging.domain.value_objects.message_status import (
    CLAIMABLE_STATUSES,
    MessageStatus,
    source_statuses,
)
from auto_messenger.messaging.infrastructure.persistence.models.message_model import MessageModel
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


def build_claim_query(limit: int) -> Select:
    """
    SELECT ... FOR UPDATE SKIP LOCKED over claimable rows, oldest first.

    Rows locked by a concurrent claim are left out instead of blocking.
    Dialects without row locks (SQLite) drop the locking clause.
    """
    return (
        select(MessageModel)
        .where(MessageModel.status.in_([s.value for s in CLAIMABLE_STATUSES]))
        .order_by(MessageModel.created_at, MessageModel.id)
        .limit(limit)
        .with_for_update(skip_locked=True)
    )


class SQLAMessageStore:
    """Message store over an async SQLAlchemy session factory; one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_entity(
        model: MessageModel,
        *,
        status: Optional[MessageStatus] = None,
        updated_at: Optional[datetime] = None,
    ) -> Message:
        return Message(
            id=model.id,
            destination=model.phone_number,
            content=model.content,
            status=status or MessageStatus(model.status),
            created_at=model.created_at,
            updated_at=updated_at or model.updated_at,
        )

    async def claim_pending(self, limit: int) -> List[Message]:
        async with self._session_factory() as session:
            async with session.begin():
                rows = (await session.execute(build_claim_query(limit))).scalars().all()
                if not rows:
                    return []

                now = utcnow()
                # The status predicate keeps the claim exclusive on backends without SKIP LOCKED
                result = await session.execute(
                    update(MessageModel)
                    .where(
                        MessageModel.id.in_([row.id for row in rows]),
                        MessageModel.status.in_([s.value for s in CLAIMABLE_STATUSES]),
                    )
                    .values(status=MessageStatus.PROCESSING.value, updated_at=now)
                    .returning(MessageModel.id)
                    .execution_options(synchronize_session=False)
                )
                claimed_ids = set(result.scalars().all())

        return [
            self._to_entity(row, status=MessageStatus.PROCESSING, updated_at=now)
            for row in rows
            if row.id in claimed_ids
        ]

    async def update_status(
        self, message_id: UUID, status: MessageStatus, updated_at: datetime
    ) -> None:
        allowed_from = [s.value for s in source_statuses(status)]
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(MessageModel)
                    .where(
                        MessageModel.id == message_id,
                        MessageModel.status.in_(allowed_from),
                    )
                    .values(status=status.value, updated_at=updated_at)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    current = await session.scalar(
                        select(MessageModel.status).where(MessageModel.id == message_id)
                    )
                    raise InvalidStatusTransitionError(message_id, current, status)

    async def list_delivered(self) -> List[Message]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(MessageModel)
                .where(MessageModel.status == MessageStatus.SUCCESS.value)
                .order_by(MessageModel.updated_at, MessageModel.id)
            )
            return [self._to_entity(row) for row in result.scalars().all()]

    async def get(self, message_id: UUID) -> Optional[Message]:
        async with self._session_factory() as session:
            model = await session.get(MessageModel, message_id)
            return self._to_entity(model) if model else None

    async def add_many(self, messages: Iterable[Message]) -> int:
        models = [
            MessageModel(
                id=m.id,
                content=m.content,
                phone_number=m.destination,
                status=m.status.value,
                created_at=m.created_at,
                updated_at=m.updated_at,
            )
            for m in messages
        ]
        async with self._session_factory() as session:
            async with session.begin():
                session.add_all(models)
        return len(models)

    async def count(self) -> int:
        async with self._session_factory() as session:
            return int(await session.scalar(select(func.count()).select_from(MessageModel)) or 0)
