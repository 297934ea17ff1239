from auto_messenger.messaging.api.schemas.message_dto import (
    HealthResponse,
    MessageResponse,
    SchedulerStatusResponse,
)

__all__ = ["HealthResponse", "MessageResponse", "SchedulerStatusResponse"]
