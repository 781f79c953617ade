"""
CRUD operations for Message entities.
"""

from datetime import datetime
from typing import List, Optional

from domain.value_objects.enums import ConversationKind
from infrastructure.database import models
from infrastructure.database.connection import retry_on_db_lock, serialized_commit
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select


@retry_on_db_lock(max_retries=5, initial_delay=0.1, backoff_factor=2)
async def create_message(
    db: AsyncSession,
    conversation_id: str,
    text: str,
    author_name: Optional[str],
    conversation_kind: ConversationKind,
    user_id: Optional[str] = None,
    group_name: Optional[str] = None,
    platform_message_id: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> models.Message:
    """
    Append a message to a conversation's log.

    Args:
        db: Database session
        conversation_id: Owning conversation (must already exist)
        text: Message text
        author_name: Display name of the author
        conversation_kind: Kind snapshot at write time
        user_id: Platform user id of the author
        group_name: Group name snapshot at write time
        platform_message_id: Id assigned by the messaging platform
        timestamp: Explicit creation time; the store assigns the current time when omitted

    Returns:
        Created message
    """
    db_message = models.Message(
        conversation_id=conversation_id,
        platform_message_id=platform_message_id,
        text=text,
        author_name=author_name,
        user_id=user_id,
        conversation_kind=conversation_kind,
        group_name=group_name,
    )
    if timestamp is not None:
        db_message.timestamp = timestamp
    db.add(db_message)

    await serialized_commit(db)
    await db.refresh(db_message)
    return db_message


async def list_messages(
    db: AsyncSession, conversation_id: str, since: Optional[datetime] = None, limit: int = 100
) -> List[models.Message]:
    """
    Get the newest messages of a conversation, newest first.

    Args:
        db: Database session
        conversation_id: Conversation id
        since: Only return messages with a timestamp strictly after this (optional)
        limit: Maximum number of messages to return (capped at 1000)

    Returns:
        Messages ordered by timestamp descending
    """
    limit = min(limit, 1000)

    query = select(models.Message).where(models.Message.conversation_id == conversation_id)
    if since is not None:
        query = query.where(models.Message.timestamp > since)

    query = query.order_by(models.Message.timestamp.desc(), models.Message.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_conversation_ids_from_messages(db: AsyncSession) -> List[tuple[str, ConversationKind]]:
    """
    Derive the conversations present in the message log.

    Used when the conversations table is empty (e.g. a store populated by an
    older writer). Ordered by each conversation's first message.
    """
    result = await db.execute(
        select(models.Message.conversation_id, models.Message.conversation_kind, func.min(models.Message.id))
        .group_by(models.Message.conversation_id, models.Message.conversation_kind)
        .order_by(func.min(models.Message.id))
    )
    seen: set[str] = set()
    conversations = []
    for conversation_id, kind, _ in result.all():
        if conversation_id in seen:
            continue
        seen.add(conversation_id)
        conversations.append((conversation_id, kind))
    return conversations


async def get_recent_messages(db: AsyncSession, per_conversation: int = 10, total: int = 20) -> List[models.Message]:
    """
    Get the latest messages across all conversations for the status page.

    Args:
        db: Database session
        per_conversation: Messages to consider from each conversation
        total: Maximum number of messages returned

    Returns:
        Messages ordered newest first
    """
    conversation_ids = (await db.execute(select(models.Conversation.id))).scalars().all()

    collected: List[models.Message] = []
    for conversation_id in conversation_ids:
        collected.extend(await list_messages(db, conversation_id, limit=per_conversation))

    collected.sort(key=lambda m: (m.timestamp is not None, m.timestamp or datetime.min), reverse=True)
    return collected[:total]
