import asyncio
import dataclasses
import os
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

import httpx
import pytest

from auto_messenger.messaging.domain.entities.message import Message, utcnow
from auto_messenger.messaging.domain.value_objects.delivery_outcome import (
    DeliveryOutcome,
    OutcomeKind,
)
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus
from auto_messenger.messaging.infrastructure.adapters.webhook_client import classify_response
from auto_messenger.shared.database import (
    close_database_engine,
    create_database_engine,
    create_tables,
    get_session_factory,
)
from auto_messenger.messaging.infrastructure.persistence.repositories import SQLAMessageStore


def require_test_db():
    url = os.getenv("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set; skipping DB-dependent tests")
    return url


def make_messages(count: int, prefix: str = "+9055500000") -> List[Message]:
    base = utcnow()
    return [
        Message(
            destination=f"{prefix}{i:02d}",
            content=f"Hello {i}",
            created_at=base + timedelta(milliseconds=i),
        )
        for i in range(count)
    ]


class FakeMessageStore:
    """In-memory MessageStore; claims are serialized by a lock like a row-locking database."""

    def __init__(self, messages: Sequence[Message] = ()):
        self.messages: Dict = {m.id: m for m in messages}
        self.lock = asyncio.Lock()
        self.claim_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.list_error: Optional[Exception] = None
        self.updates: list = []

    def add(self, *messages: Message) -> None:
        for m in messages:
            self.messages[m.id] = m

    def status_of(self, message: Message) -> MessageStatus:
        return self.messages[message.id].status

    async def claim_pending(self, limit: int) -> List[Message]:
        if self.claim_error:
            raise self.claim_error
        async with self.lock:
            pending = sorted(
                (m for m in self.messages.values() if m.status is MessageStatus.PENDING),
                key=lambda m: m.created_at,
            )[:limit]
            for m in pending:
                m.transition_to(MessageStatus.PROCESSING)
            return [dataclasses.replace(m) for m in pending]

    async def update_status(self, message_id, status, updated_at) -> None:
        self.updates.append((message_id, status))
        if self.update_error:
            raise self.update_error
        self.messages[message_id].transition_to(status, updated_at)

    async def list_delivered(self) -> List[Message]:
        if self.list_error:
            raise self.list_error
        return [m for m in self.messages.values() if m.status is MessageStatus.SUCCESS]


class ScriptedDeliveryClient:
    """
    Replies from a per-destination script: an int is an HTTP status, None is a
    transport error, an exception instance is raised. The last entry repeats.
    """

    def __init__(self, default=(202,), scripts: Optional[Dict[str, list]] = None, delay: float = 0.0):
        self.default = list(default)
        self.scripts = {k: list(v) for k, v in (scripts or {}).items()}
        self.delay = delay
        self.calls: List[Message] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.on_call = None

    def _next(self, message: Message):
        script = self.scripts.setdefault(message.destination, list(self.default))
        return script.pop(0) if len(script) > 1 else script[0]

    def calls_for(self, message: Message) -> int:
        return sum(1 for m in self.calls if m.id == message.id)

    async def deliver(self, message: Message) -> DeliveryOutcome:
        self.calls.append(message)
        if self.on_call:
            self.on_call(message)
        step = self._next(message)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        request_id = f"req-{len(self.calls)}"
        if isinstance(step, BaseException):
            raise step
        if step is None:
            return DeliveryOutcome(
                OutcomeKind.RETRYABLE_FAILURE, request_id=request_id, error="connection refused"
            )
        body = {"messageId": f"ext-{message.id}"} if step == 202 else {"error": "nope"}
        return classify_response(httpx.Response(step, json=body), request_id)


@pytest.fixture
def fake_store():
    return FakeMessageStore()


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'messages.db'}"


@pytest.fixture
async def sqla_store(sqlite_url):
    await create_database_engine(sqlite_url, connect_attempts=1)
    await create_tables()
    try:
        yield SQLAMessageStore(get_session_factory())
    finally:
        await close_database_engine()
