from auto_messenger.messaging.domain.services.retry_policy import (
    STOP,
    ExponentialBackoffPolicy,
    RetryDecision,
    RetryPolicy,
)

__all__ = ["STOP", "ExponentialBackoffPolicy", "RetryDecision", "RetryPolicy"]
