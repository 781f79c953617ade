"""
Webhook event routing.

Each inbound text message goes to exactly one of:
- the summarize orchestrator (summarize command)
- the code table (text equals a known code: reply with its link)
- message storage (everything else)

Non-text events are ignored.
"""

import logging
from typing import AsyncIterator, Callable

import schemas
from domain.exceptions import DeliveryError
from domain.value_objects.contexts import InboundTextEvent
from domain.value_objects.slash_commands import SlashCommandType, parse_slash_command
from infrastructure.database.connection import session_scope
from infrastructure.messaging import LineMessagingClient
from infrastructure.sheets import SheetsCodeTable
from services import MessageIngestionService
from sqlalchemy.ext.asyncio import AsyncSession

from .summarize_orchestrator import SummarizeOrchestrator

logger = logging.getLogger("WebhookHandlers")


class WebhookEventHandler:
    def __init__(
        self,
        get_db_session: Callable[[], AsyncIterator[AsyncSession]],
        summarize_orchestrator: SummarizeOrchestrator,
        ingestion_service: MessageIngestionService,
        code_table: SheetsCodeTable,
        messaging_client: LineMessagingClient,
        summarize_command: str = "/summarize",
    ):
        self.get_db_session = get_db_session
        self.summarize_orchestrator = summarize_orchestrator
        self.ingestion_service = ingestion_service
        self.code_table = code_table
        self.messaging_client = messaging_client
        self.summarize_command = summarize_command

    async def handle(self, event: schemas.WebhookEvent) -> None:
        text_event = event.as_text_event()
        if text_event is None:
            logger.debug(f"Ignoring {event.type} event")
            return

        command = parse_slash_command(text_event.text, self.summarize_command)
        if command.command_type == SlashCommandType.SUMMARIZE:
            self.summarize_orchestrator.start(text_event)
            return

        if await self._answer_code(text_event):
            return

        async with session_scope(self.get_db_session) as db:
            await self.ingestion_service.store(db, text_event)

    async def _answer_code(self, event: InboundTextEvent) -> bool:
        """Reply with the link when the text is a known code. Returns True if it was one."""
        row = await self.code_table.lookup(event.text)
        if row is None:
            return False

        logger.info(f"🔗 Code '{row.code}' matched row {row.row}")
        try:
            await self.messaging_client.reply(event.reply_token, [row.link])
        except DeliveryError as e:
            logger.error(f"❌ Failed to reply with link for code '{row.code}': {e}")
        return True
