import pytest
from sqlalchemy.dialects import postgresql, sqlite

from conftest import make_messages

from auto_messenger.messaging.domain.entities.message import Message, utcnow
from auto_messenger.messaging.domain.exceptions import InvalidStatusTransitionError
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus
from auto_messenger.messaging.infrastructure.persistence.repositories import build_claim_query
from auto_messenger.messaging.infrastructure.persistence.seed import seed_demo_messages


def test_claim_query_skips_locked_rows_on_postgres():
    sql = str(build_claim_query(5).compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE SKIP LOCKED" in sql
    assert "ORDER BY messages.created_at, messages.id" in sql


def test_claim_query_drops_locking_on_sqlite():
    sql = str(build_claim_query(5).compile(dialect=sqlite.dialect()))
    assert "FOR UPDATE" not in sql


async def test_claim_takes_oldest_pending(sqla_store):
    messages = make_messages(5)
    await sqla_store.add_many(messages)

    claimed = await sqla_store.claim_pending(2)

    assert [m.id for m in claimed] == [messages[0].id, messages[1].id]
    assert all(m.status is MessageStatus.PROCESSING for m in claimed)
    stored = await sqla_store.get(messages[0].id)
    assert stored.status is MessageStatus.PROCESSING
    assert stored.updated_at is not None
    assert (await sqla_store.get(messages[2].id)).status is MessageStatus.PENDING


async def test_claim_on_empty_table(sqla_store):
    assert await sqla_store.claim_pending(3) == []


async def test_sequential_claims_are_disjoint(sqla_store):
    await sqla_store.add_many(make_messages(5))

    first = await sqla_store.claim_pending(3)
    second = await sqla_store.claim_pending(3)
    third = await sqla_store.claim_pending(3)

    assert len(first) == 3 and len(second) == 2 and third == []
    assert not {m.id for m in first} & {m.id for m in second}


async def test_failed_messages_are_not_reclaimed(sqla_store):
    failed = Message(destination="+905550000001", content="x", status=MessageStatus.FAILED)
    pending = Message(destination="+905550000002", content="y")
    await sqla_store.add_many([failed, pending])

    claimed = await sqla_store.claim_pending(10)

    assert [m.id for m in claimed] == [pending.id]


async def test_update_status_follows_transitions(sqla_store):
    (message,) = make_messages(1)
    await sqla_store.add_many([message])

    with pytest.raises(InvalidStatusTransitionError):
        await sqla_store.update_status(message.id, MessageStatus.SUCCESS, utcnow())

    await sqla_store.claim_pending(1)
    await sqla_store.update_status(message.id, MessageStatus.SUCCESS, utcnow())
    assert (await sqla_store.get(message.id)).status is MessageStatus.SUCCESS

    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        await sqla_store.update_status(message.id, MessageStatus.FAILED, utcnow())
    assert exc_info.value.current == MessageStatus.SUCCESS.value


async def test_list_delivered_only_returns_success(sqla_store):
    messages = make_messages(3)
    await sqla_store.add_many(messages)
    await sqla_store.claim_pending(2)
    await sqla_store.update_status(messages[0].id, MessageStatus.SUCCESS, utcnow())
    await sqla_store.update_status(messages[1].id, MessageStatus.FAILED, utcnow())

    delivered = await sqla_store.list_delivered()

    assert [m.id for m in delivered] == [messages[0].id]
    assert delivered[0].destination == messages[0].destination


async def test_seed_demo_messages_once(sqla_store):
    assert await seed_demo_messages(sqla_store) == 8
    assert await seed_demo_messages(sqla_store) == 0
    assert await sqla_store.count() == 8

    claimed = await sqla_store.claim_pending(2)
    assert [m.content for m in claimed] == ["Hello World 1", "Hello World 2"]
