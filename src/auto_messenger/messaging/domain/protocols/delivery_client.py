from typing import Protocol

from auto_messenger.messaging.domain.entities.message import Message
from auto_messenger.messaging.domain.value_objects.delivery_outcome import DeliveryOutcome


class DeliveryClient(Protocol):
    """Performs one outbound delivery attempt and classifies the reply."""

    async def deliver(self, message: Message) -> DeliveryOutcome:
        ...
