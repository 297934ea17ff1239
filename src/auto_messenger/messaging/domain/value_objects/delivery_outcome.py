"""
Delivery Outcome Value Object
Result of a single delivery attempt against the webhook.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeKind(str, Enum):
    DELIVERED = "delivered"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


@dataclass(frozen=True)
class DeliveryOutcome:
    """
    Attributes:
        kind: Classification that drives the retry loop
        request_id: Correlation id sent as X-Request-ID for this attempt
        external_id: Message id echoed by the remote system (delivered only)
        status_code: HTTP status, None on transport failure
        error: Transport error or response excerpt for logging
    """
    kind: OutcomeKind
    request_id: Optional[str] = None
    external_id: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def is_delivered(self) -> bool:
        return self.kind is OutcomeKind.DELIVERED

    @property
    def is_retryable(self) -> bool:
        return self.kind is OutcomeKind.RETRYABLE_FAILURE

    @property
    def is_terminal_failure(self) -> bool:
        return self.kind is OutcomeKind.TERMINAL_FAILURE
