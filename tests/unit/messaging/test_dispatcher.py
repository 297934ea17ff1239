import asyncio

import httpx

from conftest import FakeMessageStore, ScriptedDeliveryClient, make_messages

from auto_messenger.messaging.application.services import (
    BatchClaimer,
    ClaimedBatch,
    DeliveryService,
    Dispatcher,
)
from auto_messenger.messaging.domain.services.retry_policy import ExponentialBackoffPolicy
from auto_messenger.messaging.domain.value_objects.message_status import MessageStatus
from auto_messenger.messaging.infrastructure.adapters import WebhookDeliveryClient
from auto_messenger.messaging.infrastructure.idempotency_recorder import IdempotencyRecorder
from auto_messenger.shared.cache import InMemoryTTLCache


def _dispatcher(store, client, max_concurrency=None, cache=None):
    delivery = DeliveryService(
        store,
        client,
        ExponentialBackoffPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0),
        IdempotencyRecorder(cache if cache is not None else InMemoryTTLCache()),
    )
    return Dispatcher(delivery, max_concurrency=max_concurrency)


async def _claim_all(store, n):
    return await BatchClaimer(store).claim(n)


async def test_mixed_batch_of_eight():
    messages = make_messages(8)
    store = FakeMessageStore(messages)
    scripts = {m.destination: [400] for m in messages[5:7]}
    scripts[messages[7].destination] = [500]
    client = ScriptedDeliveryClient(default=[202], scripts=scripts)
    cache = InMemoryTTLCache()

    report = await _dispatcher(store, client, cache=cache).process(await _claim_all(store, 8))

    assert (report.succeeded, report.failed, report.abandoned, report.errored) == (5, 3, 0, 0)
    assert report.total == 8
    assert [store.status_of(m) for m in messages] == [MessageStatus.SUCCESS] * 5 + [MessageStatus.FAILED] * 3
    assert [client.calls_for(m) for m in messages[5:]] == [1, 1, 3]
    assert len(cache) == 5
    assert await cache.get(f"sent_msg:ext-{messages[7].id}") is None


async def test_one_slow_retry_does_not_block_siblings():
    messages = make_messages(3)
    store = FakeMessageStore(messages)
    client = ScriptedDeliveryClient(default=[202], scripts={messages[0].destination: [500, 500, 202]})

    report = await _dispatcher(store, client).process(await _claim_all(store, 3))

    assert report.succeeded == 3
    assert len(client.calls) == 5


async def test_concurrency_defaults_to_batch_size():
    store = FakeMessageStore(make_messages(6))
    client = ScriptedDeliveryClient(delay=0.05)

    await _dispatcher(store, client).process(await _claim_all(store, 6))

    assert client.max_in_flight == 6


async def test_concurrency_is_bounded():
    store = FakeMessageStore(make_messages(6))
    client = ScriptedDeliveryClient(delay=0.02)

    report = await _dispatcher(store, client, max_concurrency=2).process(await _claim_all(store, 6))

    assert report.succeeded == 6
    assert client.max_in_flight == 2


async def test_crashing_delivery_is_isolated():
    messages = make_messages(3)
    store = FakeMessageStore(messages)
    client = ScriptedDeliveryClient(scripts={messages[1].destination: [RuntimeError("bug")]})

    report = await _dispatcher(store, client).process(await _claim_all(store, 3))

    assert report.succeeded == 2
    assert report.errored == 1
    assert store.status_of(messages[1]) is MessageStatus.FAILED
    assert store.updates.count((messages[1].id, MessageStatus.FAILED)) == 1


async def test_malformed_webhook_url_fails_every_message():
    messages = make_messages(2)
    store = FakeMessageStore(messages)
    transport = httpx.MockTransport(lambda request: httpx.Response(202))

    async with httpx.AsyncClient(transport=transport) as http:
        client = WebhookDeliveryClient(http, "http://[::1")
        report = await _dispatcher(store, client).process(await _claim_all(store, 2))

    assert report.failed == 2
    assert report.errored == 0
    assert [store.status_of(m) for m in messages] == [MessageStatus.FAILED] * 2
    assert sorted(s.value for _, s in store.updates) == ["failed", "failed"]


async def test_cancelled_scope_abandons_whole_batch():
    messages = make_messages(2)
    store = FakeMessageStore(messages)
    client = ScriptedDeliveryClient()
    scope = asyncio.Event()
    scope.set()

    report = await _dispatcher(store, client).process(await _claim_all(store, 2), scope)

    assert report.abandoned == 2
    assert client.calls == []


async def test_empty_batch():
    report = await _dispatcher(FakeMessageStore(), ScriptedDeliveryClient()).process(ClaimedBatch())
    assert report.total == 0
