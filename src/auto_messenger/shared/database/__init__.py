from auto_messenger.shared.database.base_model import Base
from auto_messenger.shared.database.engine import (
    close_database_engine,
    create_database_engine,
    create_tables,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "close_database_engine",
    "create_database_engine",
    "create_tables",
    "get_engine",
    "get_session_factory",
]
