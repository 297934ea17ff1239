"""
Retry policies for the delivery loop.

A policy is asked after every retryable attempt whether another attempt may
start and how long to wait before it. It knows nothing about HTTP; the
delivery loop does the classification.

- ExponentialBackoffPolicy(max_attempts=5, base_delay=1.0, max_delay=30.0, jitter=0.5)
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Protocol

from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RetryDecision:
    should_continue: bool
    delay: float = 0.0


STOP = RetryDecision(should_continue=False)


class RetryPolicy(Protocol):
    def attempt(self, n: int) -> RetryDecision:
        """Called after attempt `n` (1-based) ended retryably."""
        ...


class ExponentialBackoffPolicy:
    """
    delay(n) = min(base_delay * 2**(n-1), max_delay) + uniform(0, jitter)

    max_attempts=None means unbounded; the loop then relies on external
    operational limits (stop, shutdown) to end.
    """

    def __init__(
        self,
        *,
        max_attempts: Optional[int] = None,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: float = 0.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0 or max_delay < 0 or jitter < 0:
            raise ValueError("delays must be non-negative")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self._rng = rng or random.Random()
        if max_attempts is None:
            logger.warning("Retry policy has no attempt limit; retryable failures retry until stopped")

    def backoff(self, n: int) -> float:
        delay = min(self.base_delay * (2 ** max(0, n - 1)), self.max_delay)
        if self.jitter:
            delay += self._rng.uniform(0, self.jitter)
        return delay

    def attempt(self, n: int) -> RetryDecision:
        if self.max_attempts is not None and n >= self.max_attempts:
            return STOP
        return RetryDecision(should_continue=True, delay=self.backoff(n))
