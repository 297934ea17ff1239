from auto_messenger.messaging.domain.value_objects.delivery_outcome import DeliveryOutcome, OutcomeKind
from auto_messenger.messaging.domain.value_objects.message_status import (
    ALLOWED_TRANSITIONS,
    CLAIMABLE_STATUSES,
    MessageStatus,
    source_statuses,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "CLAIMABLE_STATUSES",
    "DeliveryOutcome",
    "MessageStatus",
    "OutcomeKind",
    "source_statuses",
]
