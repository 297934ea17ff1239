"""
Messaging Domain Exceptions
"""


class MessagingDomainError(Exception):
    """Base exception for messaging domain errors."""
    pass


class InvalidMessageContentError(MessagingDomainError):
    """Raised when message content or destination is invalid."""
    pass


class InvalidStatusTransitionError(MessagingDomainError):
    """Raised when a status update would break the pending → processing → terminal flow."""

    def __init__(self, message_id, current, target):
        super().__init__(f"Message {message_id}: cannot move from {current} to {target}")
        self.message_id = message_id
        self.current = current
        self.target = target


class BatchClaimError(MessagingDomainError):
    """Raised when the claim transaction fails; nothing was claimed."""
    pass


class IdempotencyRecordError(MessagingDomainError):
    """Raised when an idempotency record could not be written to the cache."""
    pass
