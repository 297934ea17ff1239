"""Object graph for the delivery pipeline."""
from __future__ import annotations

import httpx

from auto_messenger.config import Settings
from auto_messenger.messaging.application.services.batch_claimer import BatchClaimer
from auto_messenger.messaging.application.services.delivery_service import DeliveryService
from auto_messenger.messaging.application.services.dispatcher import Dispatcher
from auto_messenger.messaging.application.services.message_sender_service import (
    MessageSenderService,
)
from auto_messenger.messaging.application.worker.scheduler import Scheduler
from auto_messenger.messaging.domain.protocols.message_store import MessageStore
from auto_messenger.messaging.domain.services.retry_policy import ExponentialBackoffPolicy
from auto_messenger.messaging.infrastructure.adapters.webhook_client import WebhookDeliveryClient
from auto_messenger.messaging.infrastructure.idempotency_recorder import IdempotencyRecorder
from auto_messenger.shared.cache import ICacheProvider, InMemoryTTLCache, RedisCache
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


async def build_cache(settings: Settings) -> ICacheProvider:
    if settings.REDIS_URL:
        return await RedisCache.connect(settings.REDIS_URL)
    logger.warning("REDIS_URL not set; idempotency records are kept in process memory")
    return InMemoryTTLCache()


def build_message_sender(
    settings: Settings,
    store: MessageStore,
    cache: ICacheProvider,
    http_client: httpx.AsyncClient,
) -> MessageSenderService:
    client = WebhookDeliveryClient(
        http_client,
        settings.WEBHOOK_URL,
        timeout=settings.WEBHOOK_TIMEOUT_SECONDS,
    )
    retry_policy = ExponentialBackoffPolicy(
        max_attempts=settings.MSG_MAX_RETRY,
        base_delay=settings.RETRY_BASE_DELAY_SECONDS,
        max_delay=settings.RETRY_MAX_DELAY_SECONDS,
        jitter=settings.RETRY_JITTER_SECONDS,
    )
    delivery = DeliveryService(store, client, retry_policy, IdempotencyRecorder(cache))
    scheduler = Scheduler(
        BatchClaimer(store),
        Dispatcher(delivery),
        batch_size=settings.MSG_BATCH_SIZE,
        interval=settings.MSG_SEND_INTERVAL,
        max_concurrency=settings.DISPATCH_CONCURRENCY,
        shutdown_timeout=settings.SHUTDOWN_TIMEOUT_SECONDS,
    )
    return MessageSenderService(scheduler, store)
