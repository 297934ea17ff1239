# src/auto_messenger/dependencies.py
from __future__ import annotations

from fastapi import Request

from auto_messenger.messaging.application.services.message_sender_service import (
    MessageSenderService,
)
from auto_messenger.shared.exceptions import ServiceUnavailableError


def get_message_sender(request: Request) -> MessageSenderService:
    """The sender built during app startup (see main.lifespan)."""
    sender = getattr(request.app.state, "message_sender", None)
    if sender is None:
        raise ServiceUnavailableError("Message sender is not initialized")
    return sender
