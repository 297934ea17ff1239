from auto_messenger.messaging.infrastructure.persistence.repositories.message_repository_impl import (
    SQLAMessageStore,
    build_claim_query,
)

__all__ = ["SQLAMessageStore", "build_claim_query"]
