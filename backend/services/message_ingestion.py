"""
Persistence of inbound text messages.

Each stored message carries a snapshot of its author's display name and, for
groups, the group name, so digests never need to call the platform again.
"""

import logging

import crud
from domain.value_objects.contexts import InboundTextEvent
from domain.value_objects.enums import ConversationKind
from infrastructure.database import models
from sqlalchemy.ext.asyncio import AsyncSession

from .profile_service import UNKNOWN_GROUP, UNKNOWN_USER, ProfileService

logger = logging.getLogger("MessageIngestion")


class MessageIngestionService:
    def __init__(self, profile_service: ProfileService):
        self.profile_service = profile_service

    async def store(self, db: AsyncSession, event: InboundTextEvent) -> models.Message:
        """
        Record an inbound message under its conversation.

        The conversation is created on first contact. Its label is refreshed
        from the resolved profile; a failed lookup keeps the stored label.
        """
        profile = await self.profile_service.resolve(event)

        if event.kind == ConversationKind.GROUP:
            label = profile.group_name
            group_name = profile.group_name or UNKNOWN_GROUP
        else:
            label = profile.display_name
            group_name = None

        await crud.upsert_conversation(db, event.conversation_id, event.kind, label)
        message = await crud.create_message(
            db,
            conversation_id=event.conversation_id,
            text=event.text,
            author_name=profile.display_name or UNKNOWN_USER,
            conversation_kind=event.kind,
            user_id=event.user_id,
            group_name=group_name,
            platform_message_id=event.message_id,
        )
        logger.info(f"💾 Stored message {message.id} in {event.kind} conversation {event.conversation_id}")
        return message
