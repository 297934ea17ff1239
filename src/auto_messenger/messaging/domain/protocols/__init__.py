from auto_messenger.messaging.domain.protocols.delivery_client import DeliveryClient
from auto_messenger.messaging.domain.protocols.delivery_recorder import DeliveryRecorder
from auto_messenger.messaging.domain.protocols.message_store import MessageStore

__all__ = ["DeliveryClient", "DeliveryRecorder", "MessageStore"]
