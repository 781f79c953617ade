"""
CRUD operations module.

This module provides database operations organized by domain aggregate.
All CRUD functions are exported at the package level.
"""

# Conversation operations
from .conversations import get_conversation, list_conversations, upsert_conversation

# Message operations
from .messages import (
    create_message,
    get_recent_messages,
    list_conversation_ids_from_messages,
    list_messages,
)

# Trigger record operations
from .triggers import append_trigger_record, last_trigger_record

__all__ = [
    # Conversations
    "get_conversation",
    "list_conversations",
    "upsert_conversation",
    # Messages
    "create_message",
    "list_messages",
    "list_conversation_ids_from_messages",
    "get_recent_messages",
    # Trigger records
    "append_trigger_record",
    "last_trigger_record",
]
