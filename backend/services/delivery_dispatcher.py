"""
Delivery of digest segments to the messaging platform.

The first batch of a run answers the triggering event with its reply token.
Reply tokens are single-use and expire quickly, so every later batch is pushed
to the conversation the command came from.
"""

import logging
from typing import Optional, Sequence

from domain.exceptions import DeliveryError
from infrastructure.messaging import MAX_MESSAGES_PER_REQUEST, LineMessagingClient

logger = logging.getLogger("DeliveryDispatcher")


class DeliveryDispatcher:
    """Sends digest segments and notices by reply or push."""

    def __init__(self, messaging_client: LineMessagingClient):
        self.messaging_client = messaging_client

    async def deliver(
        self,
        segments: Sequence[str],
        is_first_batch: bool,
        reply_token: str,
        push_target: str,
    ) -> bool:
        """
        Deliver the segments of one batch.

        Args:
            segments: Digest segments, in order
            is_first_batch: Reply with the token instead of pushing
            reply_token: Token of the triggering event
            push_target: Conversation the command came from

        Returns:
            True if every segment was sent

        Raises:
            ReplyExpiredError: The reply token was rejected (first batch only)
            DeliveryError: The reply failed for another reason (first batch only)
        """
        if not segments:
            return True

        if not is_first_batch:
            return await self._push(push_target, segments)

        head = list(segments[:MAX_MESSAGES_PER_REQUEST])
        overflow = list(segments[MAX_MESSAGES_PER_REQUEST:])

        await self.messaging_client.reply(reply_token, head)
        if overflow:
            logger.info(f"Reply holds {MAX_MESSAGES_PER_REQUEST} messages, pushing {len(overflow)} more")
            return await self._push(push_target, overflow)
        return True

    async def notify(
        self,
        text: str,
        reply_token: Optional[str],
        push_target: str,
        reply_available: bool = True,
    ) -> bool:
        """
        Send a single notice (error or "no updates") to the triggering conversation.

        Uses the reply token while it is unused, otherwise pushes. Failures are
        logged; a notice never raises.
        """
        if reply_available and reply_token:
            try:
                await self.messaging_client.reply(reply_token, [text])
                return True
            except DeliveryError as e:
                logger.error(f"❌ Failed to reply with notice: {e}")
                return False
        return await self._push(push_target, [text])

    async def _push(self, push_target: str, segments: Sequence[str]) -> bool:
        try:
            await self.messaging_client.push(push_target, list(segments))
            return True
        except DeliveryError as e:
            logger.error(f"❌ Push to {push_target} failed: {e}")
            return False
