from auto_messenger.messaging.infrastructure.persistence.models.message_model import MessageModel

__all__ = ["MessageModel"]
