"""
CRUD operations for Conversation entities.
"""

from datetime import datetime, timezone
from typing import List, Optional

from domain.value_objects.enums import ConversationKind
from infrastructure.database import models
from infrastructure.database.connection import retry_on_db_lock, serialized_commit
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select


async def get_conversation(db: AsyncSession, conversation_id: str) -> Optional[models.Conversation]:
    """Get a single conversation by id."""
    return await db.get(models.Conversation, conversation_id)


async def list_conversations(db: AsyncSession) -> List[models.Conversation]:
    """
    Enumerate all known conversations.

    Store enumeration order is creation order; the digest pipeline relies on
    it being stable between runs.
    """
    result = await db.execute(
        select(models.Conversation).order_by(models.Conversation.created_at, models.Conversation.id)
    )
    return list(result.scalars().all())


@retry_on_db_lock(max_retries=5, initial_delay=0.1, backoff_factor=2)
async def upsert_conversation(
    db: AsyncSession, conversation_id: str, kind: ConversationKind, label: Optional[str]
) -> models.Conversation:
    """
    Create the conversation on first contact, or refresh its label and activity time.

    Args:
        db: Database session
        conversation_id: Group/room id or user id
        kind: Conversation kind
        label: Latest group name or participant name (None keeps the stored label)

    Returns:
        The stored conversation
    """
    conversation = await db.get(models.Conversation, conversation_id)
    now = datetime.now(timezone.utc)

    if conversation is None:
        conversation = models.Conversation(
            id=conversation_id, kind=kind, label=label, created_at=now, last_activity_at=now
        )
        db.add(conversation)
    else:
        if label:
            conversation.label = label
        conversation.last_activity_at = now

    await serialized_commit(db)
    await db.refresh(conversation)
    return conversation
