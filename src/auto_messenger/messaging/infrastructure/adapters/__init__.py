from auto_messenger.messaging.infrastructure.adapters.webhook_client import (
    WebhookDeliveryClient,
    classify_response,
)

__all__ = ["WebhookDeliveryClient", "classify_response"]
