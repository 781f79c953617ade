"""
Unit tests for ProfileService.
"""

import httpx
import pytest
from domain.value_objects.contexts import InboundTextEvent
from domain.value_objects.enums import ConversationKind
from infrastructure.cache import CacheManager
from services import UNKNOWN_USER, ProfileService


def _event(kind=ConversationKind.GROUP, user_id="U1") -> InboundTextEvent:
    conversation_id = "G1" if kind == ConversationKind.GROUP else user_id
    return InboundTextEvent(
        reply_token="reply-token",
        user_id=user_id,
        conversation_id=conversation_id,
        kind=kind,
        text="hello",
        group_id="G1" if kind == ConversationKind.GROUP else None,
    )


@pytest.fixture
def profile_service(mock_messaging_client):
    return ProfileService(mock_messaging_client, cache=CacheManager())


class TestResolve:
    @pytest.mark.unit
    async def test_group_member(self, profile_service, mock_messaging_client):
        profile = await profile_service.resolve(_event())

        assert profile.display_name == "Alice"
        assert profile.group_name == "Team"
        mock_messaging_client.get_group_member_profile.assert_awaited_once_with("G1", "U1")
        mock_messaging_client.get_profile.assert_not_awaited()

    @pytest.mark.unit
    async def test_direct_chat(self, profile_service, mock_messaging_client):
        profile = await profile_service.resolve(_event(kind=ConversationKind.DIRECT))

        assert profile.display_name == "Alice"
        assert profile.group_name is None
        mock_messaging_client.get_profile.assert_awaited_once_with("U1")

    @pytest.mark.unit
    async def test_lookups_are_cached(self, profile_service, mock_messaging_client):
        await profile_service.resolve(_event())
        await profile_service.resolve(_event())

        mock_messaging_client.get_group_member_profile.assert_awaited_once()
        mock_messaging_client.get_group_summary.assert_awaited_once()

    @pytest.mark.unit
    async def test_failed_lookup_yields_none(self, profile_service, mock_messaging_client):
        mock_messaging_client.get_group_member_profile.side_effect = httpx.ConnectError("unreachable")
        mock_messaging_client.get_group_summary.side_effect = KeyError("groupName")

        profile = await profile_service.resolve(_event())

        assert profile.display_name is None
        assert profile.group_name is None

    @pytest.mark.unit
    async def test_missing_user_id(self, profile_service, mock_messaging_client):
        profile = await profile_service.resolve(_event(kind=ConversationKind.DIRECT, user_id=None))

        assert profile.display_name is None
        mock_messaging_client.get_profile.assert_not_awaited()


class TestDisplayName:
    @pytest.mark.unit
    async def test_falls_back_to_unknown_user(self, profile_service, mock_messaging_client):
        mock_messaging_client.get_profile.side_effect = httpx.ConnectError("unreachable")

        assert await profile_service.display_name(_event(kind=ConversationKind.DIRECT)) == UNKNOWN_USER
