from __future__ import annotations

from fastapi import APIRouter, Depends

from auto_messenger.dependencies import get_message_sender
from auto_messenger.messaging.api.schemas.message_dto import (
    HealthResponse,
    MessageResponse,
    SchedulerStatusResponse,
)
from auto_messenger.messaging.application.services.message_sender_service import (
    MessageSenderService,
)
from auto_messenger.shared.exceptions import InternalServerError
from auto_messenger.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["control"])


def _status(sender: MessageSenderService) -> str:
    return "running" if sender.is_running else "stopped"


@router.post("/start", response_model=SchedulerStatusResponse)
async def start_process(sender: MessageSenderService = Depends(get_message_sender)):
    """Start the background process that sends a batch every interval."""
    changed = await sender.start()
    return SchedulerStatusResponse(status=_status(sender), changed=changed)


@router.post("/stop", response_model=SchedulerStatusResponse)
async def stop_process(sender: MessageSenderService = Depends(get_message_sender)):
    """Stop the background sending process."""
    changed = await sender.stop()
    return SchedulerStatusResponse(status=_status(sender), changed=changed)


@router.get("/messages", response_model=list[MessageResponse])
async def get_sent_messages(sender: MessageSenderService = Depends(get_message_sender)):
    """List messages the webhook accepted."""
    try:
        messages = await sender.list_delivered()
    except Exception as e:
        logger.error("Failed to list delivered messages", error=str(e))
        raise InternalServerError("Failed to list delivered messages") from e
    return [MessageResponse.from_entity(m) for m in messages]


@router.get("/health", response_model=HealthResponse)
async def health(sender: MessageSenderService = Depends(get_message_sender)):
    return HealthResponse(scheduler=_status(sender))
