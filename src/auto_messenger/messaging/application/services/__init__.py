from auto_messenger.messaging.application.services.batch_claimer import BatchClaimer, ClaimedBatch
from auto_messenger.messaging.application.services.delivery_service import (
    DeliveryResult,
    DeliveryService,
)
from auto_messenger.messaging.application.services.dispatcher import BatchReport, Dispatcher

__all__ = [
    "BatchClaimer",
    "BatchReport",
    "ClaimedBatch",
    "DeliveryResult",
    "DeliveryService",
    "Dispatcher",
]
