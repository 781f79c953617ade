"""
Unit tests for DeliveryDispatcher.
"""

import pytest
from domain.exceptions import DeliveryError, ReplyExpiredError
from services.delivery_dispatcher import DeliveryDispatcher


@pytest.fixture
def dispatcher(mock_messaging_client):
    return DeliveryDispatcher(mock_messaging_client)


class TestDeliver:
    @pytest.mark.unit
    async def test_first_batch_replies_with_all_segments(self, dispatcher, mock_messaging_client):
        delivered = await dispatcher.deliver(["a", "b"], True, "token", "G1")

        assert delivered
        mock_messaging_client.reply.assert_awaited_once_with("token", ["a", "b"])
        mock_messaging_client.push.assert_not_awaited()

    @pytest.mark.unit
    async def test_later_batches_push(self, dispatcher, mock_messaging_client):
        delivered = await dispatcher.deliver(["a"], False, "token", "G1")

        assert delivered
        mock_messaging_client.push.assert_awaited_once_with("G1", ["a"])
        mock_messaging_client.reply.assert_not_awaited()

    @pytest.mark.unit
    async def test_reply_overflow_is_pushed(self, dispatcher, mock_messaging_client):
        segments = [f"s{i}" for i in range(7)]

        await dispatcher.deliver(segments, True, "token", "G1")

        mock_messaging_client.reply.assert_awaited_once_with("token", segments[:5])
        mock_messaging_client.push.assert_awaited_once_with("G1", segments[5:])

    @pytest.mark.unit
    async def test_expired_reply_token_propagates(self, dispatcher, mock_messaging_client):
        mock_messaging_client.reply.side_effect = ReplyExpiredError("Invalid reply token")

        with pytest.raises(ReplyExpiredError):
            await dispatcher.deliver(["a"], True, "token", "G1")

    @pytest.mark.unit
    async def test_push_failure_is_reported_not_raised(self, dispatcher, mock_messaging_client):
        mock_messaging_client.push.side_effect = DeliveryError("502")

        assert await dispatcher.deliver(["a"], False, "token", "G1") is False

    @pytest.mark.unit
    async def test_nothing_to_send(self, dispatcher, mock_messaging_client):
        assert await dispatcher.deliver([], True, "token", "G1")
        mock_messaging_client.reply.assert_not_awaited()


class TestNotify:
    @pytest.mark.unit
    async def test_uses_reply_while_available(self, dispatcher, mock_messaging_client):
        assert await dispatcher.notify("No more updates", "token", "G1")

        mock_messaging_client.reply.assert_awaited_once_with("token", ["No more updates"])

    @pytest.mark.unit
    async def test_pushes_once_reply_is_used(self, dispatcher, mock_messaging_client):
        await dispatcher.notify("busy", "token", "G1", reply_available=False)

        mock_messaging_client.push.assert_awaited_once_with("G1", ["busy"])
        mock_messaging_client.reply.assert_not_awaited()

    @pytest.mark.unit
    async def test_reply_failure_is_logged(self, dispatcher, mock_messaging_client):
        mock_messaging_client.reply.side_effect = ReplyExpiredError("expired")

        assert await dispatcher.notify("busy", "token", "G1") is False
