"""
Idempotency Recorder using the cache
Leaves a short-lived marker for every delivery the webhook confirmed, keyed by
the id the remote system assigned, so downstream consumers can detect
duplicates. The core only writes these records; expiry removes them.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from auto_messenger.messaging.domain.exceptions import IdempotencyRecordError
from auto_messenger.shared.cache.cache_protocol import ICacheProvider
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)

SENT_MESSAGE_KEY_PREFIX = "sent_msg:"
IDEMPOTENCY_TTL = timedelta(hours=24)


def idempotency_key(external_id: str) -> str:
    return f"{SENT_MESSAGE_KEY_PREFIX}{external_id}"


def to_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class IdempotencyRecord:
    external_id: str
    sent_at: datetime

    @property
    def key(self) -> str:
        return idempotency_key(self.external_id)

    def to_payload(self) -> Dict[str, Any]:
        return {"messageId": self.external_id, "sentAt": to_rfc3339(self.sent_at)}


class IdempotencyRecorder:
    """
    Writes `sent_msg:<external id>` -> {"messageId", "sentAt"} with a 24h TTL.
    """

    def __init__(self, cache: ICacheProvider, ttl: timedelta = IDEMPOTENCY_TTL):
        self._cache = cache
        self._ttl_seconds = int(ttl.total_seconds())

    async def record(self, external_id: str, sent_at: datetime) -> IdempotencyRecord:
        """
        Store the record for a confirmed delivery.

        Raises:
            ValueError: If external_id is empty
            IdempotencyRecordError: If the cache rejected the write
        """
        if not external_id:
            raise ValueError("external_id is required")

        record = IdempotencyRecord(external_id=external_id, sent_at=sent_at)
        stored = await self._cache.set(record.key, record.to_payload(), ttl=self._ttl_seconds)
        if not stored:
            raise IdempotencyRecordError(f"cache rejected idempotency record {record.key}")

        logger.debug("Idempotency record written", key=record.key, ttl=self._ttl_seconds)
        return record
