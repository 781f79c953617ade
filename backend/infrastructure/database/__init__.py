"""
Database infrastructure package.

Re-exports commonly used database components for convenient imports.
"""

from .connection import (
    Base,
    async_session_maker,
    get_database_type,
    get_db,
    init_db,
    retry_on_db_lock,
    serialized_commit,
    session_scope,
)
from .models import Conversation, Message, TriggerRecord

__all__ = [
    # Connection
    "Base",
    "async_session_maker",
    "get_database_type",
    "get_db",
    "init_db",
    "retry_on_db_lock",
    "serialized_commit",
    "session_scope",
    # Models
    "Conversation",
    "Message",
    "TriggerRecord",
]
