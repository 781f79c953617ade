"""
Incremental message selection.

A digest only covers what happened since the previous summarize command
anywhere in the system (the watermark). On the very first command there is no
watermark and the most recent messages of each conversation are used instead.
"""

import logging
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

import crud
from domain.exceptions import SelectionError
from domain.value_objects.contexts import ConversationRef, MessageSnapshot
from domain.value_objects.slash_commands import is_trigger_command
from infrastructure.database import models
from infrastructure.database.connection import session_scope
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from utils.serializers import as_utc

logger = logging.getLogger("MessageSelector")


def to_snapshot(message: models.Message) -> MessageSnapshot:
    return MessageSnapshot(
        id=message.id,
        text=message.text,
        author_name=message.author_name,
        timestamp=message.timestamp,
        kind=message.conversation_kind,
        group_name=message.group_name,
    )


class MessageSelector:
    """Chooses which stored messages of a conversation go into the next digest."""

    def __init__(
        self,
        get_db_session: Callable[[], AsyncIterator[AsyncSession]],
        trigger_command: str = "/summarize",
        first_run_limit: int = 30,
        superset_limit: int = 100,
    ):
        self.get_db_session = get_db_session
        self.trigger_command = trigger_command
        self.first_run_limit = first_run_limit
        self.superset_limit = superset_limit

    async def resolve_watermark(self) -> Optional[datetime]:
        """Timestamp of the most recent trigger record, or None before the first one."""
        async with session_scope(self.get_db_session) as db:
            record = await crud.last_trigger_record(db)
        if record is None:
            logger.info("No previous summarize command - selecting recent messages")
            return None
        logger.info(f"Watermark: {record.timestamp.isoformat()} (trigger record {record.id})")
        return record.timestamp

    async def select_messages(
        self, conversation: ConversationRef, watermark: Optional[datetime]
    ) -> list[MessageSnapshot]:
        """
        Messages of one conversation that belong in the next digest, oldest first.

        Args:
            conversation: Conversation to read
            watermark: Only messages strictly newer than this; None for the first run

        Returns:
            Selected messages (empty when nothing qualifies)

        Raises:
            SelectionError: The store could not be read
        """
        try:
            async with session_scope(self.get_db_session) as db:
                rows = await crud.list_messages(db, conversation.id, since=watermark, limit=self.superset_limit)
        except SQLAlchemyError as e:
            raise SelectionError(conversation.id, e) from e

        messages = [
            to_snapshot(row)
            for row in reversed(rows)
            if row.text and not is_trigger_command(row.text, self.trigger_command)
        ]

        if watermark is None:
            selected = messages[-self.first_run_limit :] if self.first_run_limit > 0 else []
        else:
            cutoff = as_utc(watermark)
            selected = [m for m in messages if m.timestamp is not None and as_utc(m.timestamp) > cutoff]

        logger.debug(f"Selected {len(selected)} message(s) from {conversation.id}")
        return selected
