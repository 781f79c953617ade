"""
Display name resolution for inbound messages.

Names come from the platform's profile endpoints and are cached for a few
minutes. A failed lookup yields None for that field; callers pick their own
fallback text.
"""

import logging
from typing import Optional

import httpx
from domain.value_objects.contexts import AuthorProfile, InboundTextEvent
from domain.value_objects.enums import ConversationKind
from infrastructure.cache import CacheManager, get_cache, group_member_key, group_name_key, user_profile_key
from infrastructure.messaging import LineMessagingClient

logger = logging.getLogger("ProfileService")

UNKNOWN_USER = "Unknown User"
UNKNOWN_GROUP = "Unknown Group"


class ProfileService:
    def __init__(
        self,
        messaging_client: LineMessagingClient,
        cache: Optional[CacheManager] = None,
        ttl_seconds: float = 300,
    ):
        self.messaging_client = messaging_client
        self.cache = cache or get_cache()
        self.ttl_seconds = ttl_seconds

    async def resolve(self, event: InboundTextEvent) -> AuthorProfile:
        """Look up the author's display name and, for groups, the group name."""
        if event.kind == ConversationKind.GROUP and event.group_id:
            display_name = None
            if event.user_id:
                display_name = await self._lookup(
                    group_member_key(event.group_id, event.user_id),
                    lambda: self.messaging_client.get_group_member_profile(event.group_id, event.user_id),
                )
            group_name = await self._lookup(
                group_name_key(event.group_id),
                lambda: self.messaging_client.get_group_summary(event.group_id),
            )
            return AuthorProfile(display_name=display_name, group_name=group_name)

        if event.user_id:
            display_name = await self._lookup(
                user_profile_key(event.user_id),
                lambda: self.messaging_client.get_profile(event.user_id),
            )
            return AuthorProfile(display_name=display_name)

        return AuthorProfile()

    async def display_name(self, event: InboundTextEvent) -> str:
        """Author display name with the default applied."""
        profile = await self.resolve(event)
        return profile.display_name or UNKNOWN_USER

    async def _lookup(self, key, factory) -> Optional[str]:
        try:
            return await self.cache.get_or_set_async(key, factory, self.ttl_seconds)
        except (httpx.HTTPError, KeyError) as e:
            logger.warning(f"Profile lookup failed for {key}: {e}")
            return None
