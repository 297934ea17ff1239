"""
Message Status Enum and transition table
"""
from enum import Enum
from typing import Dict, FrozenSet, Tuple


class MessageStatus(str, Enum):
    """
    Outbound message delivery status.

    Flow: pending → processing → success | failed
    success and failed are terminal.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "MessageStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[MessageStatus, FrozenSet[MessageStatus]] = {
    MessageStatus.PENDING: frozenset({MessageStatus.PROCESSING}),
    MessageStatus.PROCESSING: frozenset({MessageStatus.SUCCESS, MessageStatus.FAILED}),
    MessageStatus.SUCCESS: frozenset(),
    MessageStatus.FAILED: frozenset(),
}

# Failed messages are deliberately not reclaimed; an operator resets them to pending.
CLAIMABLE_STATUSES: Tuple[MessageStatus, ...] = (MessageStatus.PENDING,)


def source_statuses(target: MessageStatus) -> Tuple[MessageStatus, ...]:
    """Statuses from which `target` may legally be entered."""
    return tuple(s for s, targets in ALLOWED_TRANSITIONS.items() if target in targets)
