from auto_messenger.messaging.domain.entities.message import (
    MAX_CONTENT_LENGTH,
    MAX_DESTINATION_LENGTH,
    Message,
    utcnow,
)

__all__ = ["MAX_CONTENT_LENGTH", "MAX_DESTINATION_LENGTH", "Message", "utcnow"]
