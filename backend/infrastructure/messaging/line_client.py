"""
LINE Messaging API client.

Covers the small slice of the platform the relay needs: verifying webhook
signatures, replying to an event, pushing to a conversation and resolving
display names. All calls go through one shared httpx.AsyncClient.
"""

import base64
import hashlib
import hmac
import logging
from typing import Optional, Sequence

import httpx
from domain.exceptions import DeliveryError, ReplyExpiredError

logger = logging.getLogger("LineClient")

# The platform accepts at most this many message objects per reply/push call
MAX_MESSAGES_PER_REQUEST = 5


def compute_signature(channel_secret: str, body: bytes) -> str:
    """Base64-encoded HMAC-SHA256 of the raw request body."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_signature(channel_secret: str, body: bytes, signature: Optional[str]) -> bool:
    """
    Check the X-Line-Signature header against the request body.

    Args:
        channel_secret: Channel secret from the developer console
        body: Raw request body bytes (before JSON parsing)
        signature: Header value, if present

    Returns:
        True if the signature matches
    """
    if not signature:
        return False
    return hmac.compare_digest(compute_signature(channel_secret, body), signature)


def _text_messages(segments: Sequence[str]) -> list[dict]:
    return [{"type": "text", "text": segment} for segment in segments]


class LineMessagingClient:
    """Async client for reply/push and profile endpoints."""

    def __init__(
        self,
        channel_access_token: Optional[str],
        api_base: str = "https://api.line.me",
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not channel_access_token:
            logger.warning("No channel access token configured - outbound calls will be rejected")
        self._http = http_client or httpx.AsyncClient(
            base_url=api_base,
            timeout=timeout,
            headers={"Authorization": f"Bearer {channel_access_token or ''}"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    # -------------------------
    # Outbound messages
    # -------------------------
    async def reply(self, reply_token: str, segments: Sequence[str]) -> None:
        """
        Reply to an event with up to MAX_MESSAGES_PER_REQUEST text messages.

        Raises:
            ValueError: Too many segments for a single reply
            ReplyExpiredError: The token is stale or already used
            DeliveryError: Any other rejection
        """
        if not segments:
            return
        if len(segments) > MAX_MESSAGES_PER_REQUEST:
            raise ValueError(f"A reply carries at most {MAX_MESSAGES_PER_REQUEST} messages, got {len(segments)}")

        await self._post(
            "/v2/bot/message/reply",
            {"replyToken": reply_token, "messages": _text_messages(segments)},
            is_reply=True,
        )
        logger.info(f"↩️ Replied with {len(segments)} message(s)")

    async def push(self, target_id: str, segments: Sequence[str]) -> None:
        """Push text messages to a user/group, chunked per request limit."""
        for start in range(0, len(segments), MAX_MESSAGES_PER_REQUEST):
            chunk = segments[start : start + MAX_MESSAGES_PER_REQUEST]
            await self._post("/v2/bot/message/push", {"to": target_id, "messages": _text_messages(chunk)})
        logger.info(f"📤 Pushed {len(segments)} message(s) to {target_id}")

    async def _post(self, path: str, payload: dict, is_reply: bool = False) -> None:
        try:
            response = await self._http.post(path, json=payload)
        except httpx.HTTPError as e:
            raise DeliveryError(f"Request to {path} failed: {e}") from e

        if response.is_success:
            return

        detail = response.text
        if is_reply and response.status_code == 400 and "reply token" in detail.lower():
            raise ReplyExpiredError(f"Reply token rejected: {detail}", status_code=response.status_code)
        raise DeliveryError(f"{path} returned {response.status_code}: {detail}", status_code=response.status_code)

    # -------------------------
    # Profiles
    # -------------------------
    async def get_profile(self, user_id: str) -> str:
        """Display name of a user who has added the bot."""
        data = await self._get_json(f"/v2/bot/profile/{user_id}")
        return data["displayName"]

    async def get_group_member_profile(self, group_id: str, user_id: str) -> str:
        """Display name of a member of a group chat."""
        data = await self._get_json(f"/v2/bot/group/{group_id}/member/{user_id}")
        return data["displayName"]

    async def get_group_summary(self, group_id: str) -> str:
        """Name of a group chat."""
        data = await self._get_json(f"/v2/bot/group/{group_id}/summary")
        return data["groupName"]

    async def _get_json(self, path: str) -> dict:
        response = await self._http.get(path)
        response.raise_for_status()
        return response.json()
