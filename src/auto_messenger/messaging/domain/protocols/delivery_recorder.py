from datetime import datetime
from typing import Protocol


class DeliveryRecorder(Protocol):
    """Leaves a marker for a delivery the remote system confirmed."""

    async def record(self, external_id: str, sent_at: datetime) -> object:
        ...
