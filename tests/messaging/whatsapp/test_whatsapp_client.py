"""
Test suite for the WhatsApp transport client.

The aiohttp session is replaced by a MagicMock whose ``post`` returns an
async context manager, so no network access is needed.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from multidict import CIMultiDict, CIMultiDictProxy

from wabridge.core.errors import ApiError, MessageValidationError, RateLimitError
from wabridge.messaging.whatsapp.builder import build
from wabridge.messaging.whatsapp.client import WhatsAppClient

TO = "+15551234567"


def mock_session(status: int = 200, body=None, headers=None) -> MagicMock:
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=body)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post = MagicMock(return_value=context)
    return session


def sent_response(message_id: str = "wamid.OUT1") -> dict:
    return {
        "messaging_product": "whatsapp",
        "contacts": [{"input": TO, "wa_id": "15551234567"}],
        "messages": [{"id": message_id}],
    }


class TestWhatsAppClient:
    """Test request building and response mapping."""

    @pytest.mark.asyncio
    async def test_send_posts_payload(self):
        session = mock_session(body=sent_response())
        client = WhatsAppClient(
            session,
            access_token="token",
            phone_number_id="106540352242922",
            api_version="v23.0",
            base_url="https://graph.facebook.com/",
        )
        message = build("text", TO, {"text": "hi"})

        response = await client.send(message)

        assert response.message_id == "wamid.OUT1"
        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        assert url == "https://graph.facebook.com/v23.0/106540352242922/messages"
        assert kwargs["headers"]["Authorization"] == "Bearer token"
        assert kwargs["json"] == message.to_payload()

    @pytest.mark.asyncio
    async def test_send_message_builds_first(self):
        session = mock_session(body=sent_response("wamid.OUT2"))
        client = WhatsAppClient(session, "token", "123")

        response = await client.send_message("text", TO, {"text": "hi"}, reply_to="wamid.IN")

        assert response.message_id == "wamid.OUT2"
        assert session.post.call_args.kwargs["json"]["context"] == {"message_id": "wamid.IN"}

    @pytest.mark.asyncio
    async def test_invalid_message_is_never_sent(self):
        session = mock_session(body=sent_response())
        client = WhatsAppClient(session, "token", "123")

        with pytest.raises(MessageValidationError):
            await client.send_message("text", "bad", {"text": "hi"})

        session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error(self):
        body = {
            "error": {
                "message": "(#131030) Recipient phone number not in allowed list",
                "type": "OAuthException",
                "code": 131030,
                "fbtrace_id": "trace",
            }
        }
        client = WhatsAppClient(mock_session(400, body), "token", "123")

        with pytest.raises(ApiError) as exc_info:
            await client.send_message("text", TO, {"text": "hi"})

        assert exc_info.value.code == 131030
        assert exc_info.value.status == 400
        assert exc_info.value.fbtrace_id == "trace"

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        session = mock_session(
            429, {"error": {"message": "Rate limit hit", "code": 130429}}, {"Retry-After": "12"}
        )
        client = WhatsAppClient(session, "token", "123")

        with pytest.raises(RateLimitError) as exc_info:
            await client.send_message("text", TO, {"text": "hi"})

        assert exc_info.value.retry_after == 12

    @pytest.mark.asyncio
    async def test_rate_limit_lowercase_retry_after(self):
        headers = CIMultiDictProxy(CIMultiDict({"retry-after": "30"}))
        session = mock_session(429, {"error": {"message": "Rate limit hit"}}, headers)
        client = WhatsAppClient(session, "token", "123")

        with pytest.raises(RateLimitError) as exc_info:
            await client.send_message("text", TO, {"text": "hi"})

        assert exc_info.value.retry_after == 30

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        session = mock_session(502)
        session.post.return_value.__aenter__.return_value.json = AsyncMock(
            side_effect=ValueError("not json")
        )
        client = WhatsAppClient(session, "token", "123")

        with pytest.raises(ApiError) as exc_info:
            await client.send_message("text", TO, {"text": "hi"})

        assert exc_info.value.status == 502

    def test_from_settings(self):
        client = WhatsAppClient.from_settings(MagicMock())

        assert client.access_token == "test_token"
        assert client.url_builder.get_messages_url().endswith("/106540352242922/messages")
