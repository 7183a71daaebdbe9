"""
WhatsApp Cloud API transport client.

Key Design Decisions:
- The aiohttp session is injected; the client never creates or closes one
- Messages are built and validated before any request is made
- Graph API error envelopes become ApiError / RateLimitError
- No retries: callers decide what to do with a RateLimitError
"""

from typing import Any

import aiohttp

from wabridge.core.config.settings import settings
from wabridge.core.errors import ApiError
from wabridge.core.logging.logger import get_logger
from wabridge.core.types import MessageType
from wabridge.messaging.whatsapp.builder import build
from wabridge.messaging.whatsapp.models import MessageResponse, OutgoingMessageBase


class WhatsAppUrlBuilder:
    """Builds URLs for WhatsApp Business API endpoints."""

    def __init__(self, base_url: str, api_version: str, phone_number_id: str):
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.phone_number_id = phone_number_id

    def get_messages_url(self) -> str:
        """Build URL for sending messages."""
        return f"{self.base_url}/{self.api_version}/{self.phone_number_id}/messages"


class WhatsAppClient:
    """
    Async client for ``POST /{phone_number_id}/messages``.

    Example:
        async with aiohttp.ClientSession() as session:
            client = WhatsAppClient(session, token, phone_number_id)
            response = await client.send_message("text", "+15551234567", {"text": "hi"})
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        access_token: str,
        phone_number_id: str,
        api_version: str = settings.api_version,
        base_url: str = settings.base_url,
        timeout: float = settings.request_timeout,
    ):
        """Initialize the client.

        Args:
            session: Caller-owned aiohttp session
            access_token: WhatsApp Business API access token
            phone_number_id: Business phone number ID that sends the messages
            api_version: Graph API version, e.g. "v23.0"
            base_url: Graph API base URL
            timeout: Total request timeout in seconds
        """
        self.session = session
        self.access_token = access_token
        self.phone_number_id = phone_number_id
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.url_builder = WhatsAppUrlBuilder(base_url, api_version, phone_number_id)
        self.logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, session: aiohttp.ClientSession) -> "WhatsAppClient":
        """
        Create a client from environment configuration.

        Raises:
            ConfigurationError: If WP_ACCESS_TOKEN or WP_PHONE_ID is not set
        """
        settings.require_client_settings()
        return cls(
            session,
            access_token=settings.wp_access_token,
            phone_number_id=settings.wp_phone_id,
            api_version=settings.api_version,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
        )

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def post_request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a JSON POST to the messages endpoint.

        Args:
            payload: JSON body

        Returns:
            Decoded JSON response

        Raises:
            ApiError: For non-2xx responses (RateLimitError for 429)
            aiohttp.ClientError: For connection failures
        """
        url = self.url_builder.get_messages_url()
        self.logger.debug(f"Sending request to {url}")

        async with self.session.post(
            url, headers=self._get_headers(), json=payload, timeout=self.timeout
        ) as response:
            try:
                body = await response.json(content_type=None)
            except ValueError:
                body = None

            if response.status >= 400:
                error = ApiError.from_response(
                    response.status,
                    body if isinstance(body, dict) else None,
                    response.headers,
                )
                if response.status == 401:
                    self.logger.error(
                        f"WhatsApp access token rejected for {self.phone_number_id}: "
                        f"{error.message}"
                    )
                else:
                    self.logger.error(
                        f"WhatsApp API error {response.status} ({error.kind.value}): "
                        f"{error.message}"
                    )
                raise error

            self.logger.debug(f"Response: {body}")
            return body if isinstance(body, dict) else {}

    async def send(self, message: OutgoingMessageBase) -> MessageResponse:
        """
        Send an already built message.

        Args:
            message: OutgoingMessage from the builder

        Returns:
            MessageResponse with the ID assigned by WhatsApp
        """
        response_data = await self.post_request(message.to_payload())
        response = MessageResponse.model_validate(response_data)
        self.logger.info(f"Sent {message.type} message {response.message_id}")
        return response

    async def send_message(
        self,
        message_type: MessageType | str,
        to: str,
        content: dict[str, Any],
        *,
        reply_to: str | None = None,
        truncate: bool = False,
    ) -> MessageResponse:
        """
        Build, validate and send a message.

        Raises:
            MessageValidationError: Before any request when the message is invalid
            ApiError: When WhatsApp rejects the request
        """
        message = build(message_type, to, content, reply_to=reply_to, truncate=truncate)
        return await self.send(message)
