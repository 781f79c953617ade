"""
Unit tests for MessageIngestionService.
"""

import crud
import httpx
import pytest
from domain.value_objects.contexts import InboundTextEvent
from domain.value_objects.enums import ConversationKind
from infrastructure.cache import CacheManager
from services import UNKNOWN_GROUP, UNKNOWN_USER, MessageIngestionService, ProfileService


def _event(kind=ConversationKind.GROUP, text="hello") -> InboundTextEvent:
    group = kind == ConversationKind.GROUP
    return InboundTextEvent(
        reply_token="reply-token",
        user_id="U-alice",
        conversation_id="G-team" if group else "U-alice",
        kind=kind,
        text=text,
        message_id="m-1",
        group_id="G-team" if group else None,
    )


@pytest.fixture
def ingestion(mock_messaging_client):
    return MessageIngestionService(ProfileService(mock_messaging_client, cache=CacheManager()))


class TestStore:
    @pytest.mark.unit
    async def test_group_message_creates_conversation(self, ingestion, test_db):
        message = await ingestion.store(test_db, _event())

        assert message.author_name == "Alice"
        assert message.group_name == "Team"
        assert message.conversation_kind == ConversationKind.GROUP
        assert message.platform_message_id == "m-1"

        conversation = await crud.get_conversation(test_db, "G-team")
        assert conversation.label == "Team"

    @pytest.mark.unit
    async def test_direct_message_labels_conversation_with_author(self, ingestion, test_db):
        message = await ingestion.store(test_db, _event(kind=ConversationKind.DIRECT))

        assert message.group_name is None
        conversation = await crud.get_conversation(test_db, "U-alice")
        assert conversation.kind == ConversationKind.DIRECT
        assert conversation.label == "Alice"

    @pytest.mark.unit
    async def test_failed_lookups_use_placeholders(self, ingestion, test_db, mock_messaging_client):
        mock_messaging_client.get_group_member_profile.side_effect = httpx.ConnectError("unreachable")
        mock_messaging_client.get_group_summary.side_effect = httpx.ConnectError("unreachable")

        message = await ingestion.store(test_db, _event())

        assert message.author_name == UNKNOWN_USER
        assert message.group_name == UNKNOWN_GROUP

    @pytest.mark.unit
    async def test_failed_lookup_keeps_stored_label(self, ingestion, test_db, sample_group, mock_messaging_client):
        mock_messaging_client.get_group_summary.side_effect = httpx.ConnectError("unreachable")

        await ingestion.store(test_db, _event())

        conversation = await crud.get_conversation(test_db, "G-team")
        assert conversation.label == "Team"
