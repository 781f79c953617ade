"""
Summarize command orchestration.

Entry point of the digest pipeline. For each summarize command:

1. Read the watermark (the previous command, anywhere)
2. Record this command as the next watermark
3. Enumerate conversations and hand them to the BatchScheduler

Runs take minutes (inter-batch pauses), so the webhook starts them as
background tasks and answers the platform immediately.
"""

import asyncio
import logging
from typing import AsyncIterator, Callable, Dict, Optional

import crud
from core.settings import GENERATION_FAILED_TEXT, NO_MESSAGES_TEXT
from domain.entities import DigestRunResult
from domain.value_objects.contexts import InboundTextEvent, TriggerRecordData
from infrastructure.database.connection import session_scope
from services import DeliveryDispatcher, MessageSelector, ProfileService, list_digest_conversations
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .batch_scheduler import BatchScheduler

logger = logging.getLogger("SummarizeOrchestrator")


class SummarizeOrchestrator:
    """Runs digests in response to summarize commands."""

    def __init__(
        self,
        get_db_session: Callable[[], AsyncIterator[AsyncSession]],
        selector: MessageSelector,
        batch_scheduler: BatchScheduler,
        dispatcher: DeliveryDispatcher,
        profile_service: ProfileService,
    ):
        self.get_db_session = get_db_session
        self.selector = selector
        self.batch_scheduler = batch_scheduler
        self.dispatcher = dispatcher
        self.profile_service = profile_service
        # Running digests keyed by reply token
        self.active_tasks: Dict[str, asyncio.Task] = {}

    async def on_summarize_command(self, event: InboundTextEvent) -> Optional[DigestRunResult]:
        """
        Produce and deliver the digest for one summarize command.

        Returns:
            The run result, or None when there was nothing to summarize at all
        """
        logger.info(f"🧾 Summarize command from {event.user_id} in {event.kind} conversation {event.conversation_id}")

        # Must be read before this command is recorded, or it would become its own watermark
        watermark = await self.selector.resolve_watermark()

        display_name = await self.profile_service.display_name(event)
        async with session_scope(self.get_db_session) as db:
            try:
                record_id = await crud.append_trigger_record(
                    db,
                    TriggerRecordData(
                        command_text=event.text,
                        user_id=event.user_id,
                        display_name=display_name,
                        conversation_id=event.conversation_id,
                        conversation_kind=event.kind,
                    ),
                )
                logger.debug(f"Recorded trigger {record_id}")
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"Failed to record summarize command, continuing with the digest: {e}")

            conversations = await list_digest_conversations(db)

        if not conversations:
            await self.dispatcher.notify(NO_MESSAGES_TEXT, event.reply_token, event.conversation_id)
            return None

        result = await self.batch_scheduler.run(
            conversations,
            watermark,
            reply_token=event.reply_token,
            push_target=event.conversation_id,
        )
        logger.info(
            f"✅ Digest run finished: {result.summary_count} summaries, "
            f"{result.delivered_batches}/{len(result.batches)} batches delivered"
            + (f", aborted ({result.error_kind or 'delivery'})" if result.aborted else "")
        )
        return result

    def start(self, event: InboundTextEvent) -> asyncio.Task:
        """Run on_summarize_command in the background and track the task."""
        task = asyncio.create_task(self._run_logged(event))
        self.active_tasks[event.reply_token] = task
        return task

    async def _run_logged(self, event: InboundTextEvent) -> Optional[DigestRunResult]:
        try:
            return await self.on_summarize_command(event)
        except asyncio.CancelledError:
            logger.info(f"Digest run for {event.conversation_id} cancelled")
            raise
        except Exception:
            logger.exception(f"💥 Digest run for {event.conversation_id} failed")
            await self._report_failure(event)
            return None

    async def _report_failure(self, event: InboundTextEvent) -> None:
        # An earlier batch may already have spent the reply token
        if await self.dispatcher.notify(GENERATION_FAILED_TEXT, event.reply_token, event.conversation_id):
            return
        await self.dispatcher.notify(
            GENERATION_FAILED_TEXT, event.reply_token, event.conversation_id, reply_available=False
        )

    def cleanup_finished_tasks(self) -> int:
        """Forget tasks that have completed. Returns the number removed."""
        finished = [token for token, task in self.active_tasks.items() if task.done()]
        for token in finished:
            self.active_tasks.pop(token, None)
        if finished:
            logger.debug(f"Cleaned up {len(finished)} finished digest task(s)")
        return len(finished)

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Cancel digests that are still running."""
        pending = [task for task in self.active_tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.wait(pending, timeout=timeout)
            logger.info(f"🛑 Cancelled {len(pending)} running digest(s)")
        self.active_tasks.clear()
