"""
Batch scheduling for digest runs.

Conversations are summarized in consecutive batches. Each batch produces one
digest message (split into segments if it is long): the first batch answers
the summarize command with the reply token, later batches are pushed. A pause
between productive batches keeps the run under the provider's per-minute
quota even when the rate limiter would let a burst through.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Sequence

from core.settings import GENERATION_FAILED_TEXT, NO_UPDATES_TEXT, RATE_LIMITED_TEXT
from domain.entities import BatchOutcome, DigestEntry, DigestRunResult
from domain.exceptions import DeliveryError, GenerationError, SelectionError
from domain.value_objects.contexts import ConversationRef
from domain.value_objects.enums import DeliveryMode
from services import (
    DeliveryDispatcher,
    DigestFormatter,
    GenerationClient,
    MessageSelector,
    conversation_label,
    split_digest,
)

logger = logging.getLogger("BatchScheduler")


def partition(conversations: Sequence[ConversationRef], batch_size: int) -> list[list[ConversationRef]]:
    """Split conversations into consecutive batches, keeping their order."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [list(conversations[i : i + batch_size]) for i in range(0, len(conversations), batch_size)]


def error_notice(error: GenerationError) -> str:
    return RATE_LIMITED_TEXT if error.is_rate_limited else GENERATION_FAILED_TEXT


class BatchScheduler:
    """Runs one digest over a sequence of conversations."""

    def __init__(
        self,
        selector: MessageSelector,
        formatter: DigestFormatter,
        generation_client: GenerationClient,
        dispatcher: DeliveryDispatcher,
        batch_size: int = 15,
        inter_batch_delay_seconds: float = 60.0,
        max_segment_length: int = 4000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.selector = selector
        self.formatter = formatter
        self.generation_client = generation_client
        self.dispatcher = dispatcher
        self.batch_size = batch_size
        self.inter_batch_delay_seconds = inter_batch_delay_seconds
        self.max_segment_length = max_segment_length
        self._sleep = sleep

    async def run(
        self,
        conversations: Sequence[ConversationRef],
        watermark: Optional[datetime],
        reply_token: str,
        push_target: str,
        batch_size: Optional[int] = None,
    ) -> DigestRunResult:
        """
        Summarize the conversations batch by batch and deliver each batch's digest.

        Args:
            conversations: Conversations in the order they should appear
            watermark: Selection watermark (None on the first-ever run)
            reply_token: Token of the triggering event, used by the first batch
            push_target: Conversation that receives pushed batches and notices
            batch_size: Override for the configured batch size

        Returns:
            What happened in each batch. A generation failure or a rejected
            reply stops the run and sets ``aborted``.
        """
        batches = partition(conversations, batch_size or self.batch_size)
        result = DigestRunResult()
        reply_available = True

        logger.info(f"📚 Digest run: {len(conversations)} conversation(s) in {len(batches)} batch(es)")

        for index, batch in enumerate(batches, start=1):
            outcome = BatchOutcome(index=index, conversation_count=len(batch))
            result.batches.append(outcome)

            for conversation in batch:
                try:
                    messages = await self.selector.select_messages(conversation, watermark)
                except SelectionError as e:
                    logger.error(f"⚠️ Skipping {conversation.id}: {e}")
                    continue

                if not messages:
                    logger.debug(f"No new messages in {conversation.id}")
                    continue

                label = conversation_label(conversation, messages)
                prompt = self.formatter.format_prompt(label, messages, conversation.kind)

                outcome.generation_calls += 1
                try:
                    summary = await self.generation_client.generate(prompt)
                except GenerationError as e:
                    logger.error(f"❌ Digest run aborted in batch {index} at {conversation.id}: {e}")
                    result.aborted = True
                    result.error_kind = e.kind
                    await self.dispatcher.notify(error_notice(e), reply_token, push_target, reply_available)
                    return result

                outcome.entries.append(
                    DigestEntry(
                        conversation_id=conversation.id,
                        label=label,
                        summary=summary,
                        message_count=len(messages),
                    )
                )

            if outcome.entries:
                is_first_batch = index == 1
                segments = split_digest(
                    self.formatter.render_digest(outcome.entries, index), self.max_segment_length
                )
                try:
                    outcome.delivered = await self.dispatcher.deliver(
                        segments, is_first_batch, reply_token, push_target
                    )
                except DeliveryError as e:
                    logger.error(f"❌ Reply for batch {index} rejected, stopping run: {e}")
                    result.aborted = True
                    return result

                if is_first_batch:
                    reply_available = False
                outcome.delivery_mode = DeliveryMode.REPLY if is_first_batch else DeliveryMode.PUSH
                outcome.segments_sent = len(segments) if outcome.delivered else 0
                logger.info(
                    f"📨 Batch {index}/{len(batches)}: {len(outcome.entries)} summaries in "
                    f"{len(segments)} segment(s) via {outcome.delivery_mode}"
                )

            # Only pause after a batch that actually used the generation quota
            if index < len(batches) and outcome.generation_calls > 0:
                logger.info(f"⏸️ Waiting {self.inter_batch_delay_seconds:.0f}s before batch {index + 1}")
                await self._sleep(self.inter_batch_delay_seconds)

        if result.summary_count == 0:
            await self.dispatcher.notify(NO_UPDATES_TEXT, reply_token, push_target, reply_available)

        return result
