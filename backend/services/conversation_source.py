"""Enumeration of the conversations a digest run covers."""

import logging

import crud
from domain.value_objects.contexts import ConversationRef
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger("ConversationSource")


async def list_digest_conversations(db: AsyncSession) -> list[ConversationRef]:
    """
    Conversations in store order.

    Falls back to the conversation ids found in the message log when the
    conversations table is empty.
    """
    conversations = await crud.list_conversations(db)
    if conversations:
        return [ConversationRef(id=c.id, kind=c.kind, label=c.label) for c in conversations]

    derived = await crud.list_conversation_ids_from_messages(db)
    if derived:
        logger.info(f"No conversation records, using {len(derived)} conversation(s) from the message log")
    return [ConversationRef(id=conversation_id, kind=kind) for conversation_id, kind in derived]
