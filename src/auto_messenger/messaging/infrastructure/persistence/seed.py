"""Demo data for local runs (SEED_DEMO_MESSAGES=true)."""
from __future__ import annotations

from datetime import timedelta

from auto_messenger.messaging.domain.entities.message import Message, utcnow
from auto_messenger.messaging.infrastructure.persistence.repositories.message_repository_impl import (
    SQLAMessageStore,
)
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


def demo_messages(count: int = 8) -> list[Message]:
    base = utcnow()
    return [
        Message(
            destination=f"+90554999{8878 - i:04d}",
            content=f"Hello World {i}",
            # strictly increasing so claims pick them up in order
            created_at=base + timedelta(milliseconds=i),
        )
        for i in range(1, count + 1)
    ]


async def seed_demo_messages(store: SQLAMessageStore, count: int = 8) -> int:
    """Insert demo messages when the table is empty. Returns the number inserted."""
    if await store.count() > 0:
        return 0
    inserted = await store.add_many(demo_messages(count))
    logger.info("Seeded demo messages", count=inserted)
    return inserted
