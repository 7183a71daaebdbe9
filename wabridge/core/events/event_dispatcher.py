"""
Webhook dispatcher for WhatsApp Business webhooks.

Implements both halves of the webhook protocol:
- verification (GET): echo the challenge when mode and token match
- delivery (POST): normalize the payload, route every message to at most one
  handler and acknowledge with ``EVENT_RECEIVED``

Handlers run one after another in delivery order. A failing handler is
reported to ``on_error`` and never stops the rest of the delivery.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wabridge.core.config.settings import settings
from wabridge.core.errors import (
    ConfigurationError,
    HandlerError,
    VerificationError,
    WhatsAppError,
)
from wabridge.core.events.handlers import WebhookHandlers
from wabridge.core.logging.context import dispatch_context
from wabridge.core.logging.logger import get_logger
from wabridge.core.types import (
    EVENT_RECEIVED,
    WHATSAPP_OBJECT_TAG,
    HandlerCategory,
    InteractiveReplyType,
    MessageType,
)
from wabridge.processors.whatsapp_processor import WhatsAppMessageNormalizer
from wabridge.schemas.whatsapp.processed import (
    MessageStatusUpdate,
    ProcessedIncomingMessage,
)

SUBSCRIBE_MODE = "subscribe"

# Explicit message types routed directly by their type tag
_TYPE_CATEGORIES: dict[MessageType, HandlerCategory] = {
    MessageType.TEXT: HandlerCategory.TEXT,
    MessageType.IMAGE: HandlerCategory.IMAGE,
    MessageType.VIDEO: HandlerCategory.VIDEO,
    MessageType.AUDIO: HandlerCategory.AUDIO,
    MessageType.DOCUMENT: HandlerCategory.DOCUMENT,
    MessageType.LOCATION: HandlerCategory.LOCATION,
    MessageType.STICKER: HandlerCategory.STICKER,
    MessageType.CONTACTS: HandlerCategory.CONTACT,
    MessageType.REACTION: HandlerCategory.REACTION,
}


class WebhookResponse(BaseModel):
    """HTTP response the transport should send back to Meta."""

    model_config = ConfigDict(frozen=True)

    status: int
    body: str = ""


class DispatchResult(WebhookResponse):
    """Outcome of one delivery: the acknowledgment plus what was dispatched."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    messages: list[ProcessedIncomingMessage] = Field(default_factory=list)
    statuses: list[MessageStatusUpdate] = Field(default_factory=list)
    errors: list[WhatsAppError] = Field(default_factory=list)
    dispatched: list[HandlerCategory] = Field(
        default_factory=list, description="Categories invoked, in order"
    )


def resolve_category(message: ProcessedIncomingMessage) -> HandlerCategory:
    """
    Pick the handler category for a normalized message.

    The explicit type wins. Button and list replies (template quick replies
    included) are resolved by the identifier they carry, Flow submissions by
    their ``nfm_reply`` type; everything else is unknown.
    """
    category = _TYPE_CATEGORIES.get(message.type)
    if category is not None:
        return category

    interactive = message.interactive
    if interactive is not None:
        if interactive.button_id is not None:
            return HandlerCategory.BUTTON_CLICK
        if interactive.list_id is not None:
            return HandlerCategory.LIST_SELECT
        if interactive.type == InteractiveReplyType.NFM_REPLY.value:
            return HandlerCategory.FLOW_RESPONSE

    return HandlerCategory.UNKNOWN


async def _invoke(callback: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callback and await its result when needed."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class WebhookDispatcher:
    """
    Dispatcher for WhatsApp webhook verification and deliveries.

    Stateless between calls; one instance can serve concurrent requests.
    """

    def __init__(
        self,
        verify_token: str,
        handlers: WebhookHandlers | None = None,
        business_id: str | None = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            verify_token: Token configured in the Meta app dashboard
            handlers: Callbacks per category (all optional)
            business_id: Business id copied into normalized records

        Raises:
            ConfigurationError: If the verify token is missing or empty
        """
        if not verify_token:
            raise ConfigurationError(
                "Webhook verify token is required", ["verify_token"]
            )

        self.logger = get_logger(__name__)
        self._verify_token = verify_token
        self.handlers = handlers or WebhookHandlers()
        self.normalizer = WhatsAppMessageNormalizer(business_id=business_id)

        registered = ", ".join(c.value for c in self.handlers.registered_categories)
        self.logger.debug(
            f"WebhookDispatcher initialized with handlers: {registered or 'none'}"
        )

    @classmethod
    def from_settings(
        cls, handlers: WebhookHandlers | None = None
    ) -> "WebhookDispatcher":
        """
        Create a dispatcher from environment configuration.

        Raises:
            ConfigurationError: If WHATSAPP_WEBHOOK_VERIFY_TOKEN is not set
        """
        settings.require_webhook_settings()
        return cls(
            verify_token=settings.whatsapp_webhook_verify_token,
            handlers=handlers,
            business_id=settings.wp_bid,
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(
        self, mode: str | None, token: str | None, challenge: str | None
    ) -> WebhookResponse:
        """
        Answer a webhook verification request.

        Args:
            mode: ``hub.mode`` query parameter
            token: ``hub.verify_token`` query parameter
            challenge: ``hub.challenge`` query parameter

        Returns:
            200 with the challenge as body, or 403 with an empty body
        """
        if mode == SUBSCRIBE_MODE and token == self._verify_token:
            self.logger.info("Webhook verification succeeded")
            return WebhookResponse(status=200, body=challenge or "")

        self.logger.warning(f"Webhook verification failed (mode={mode!r})")
        return WebhookResponse(status=403)

    def verify_or_raise(
        self, mode: str | None, token: str | None, challenge: str | None
    ) -> str:
        """
        Verify and return the challenge.

        Raises:
            VerificationError: If mode or token do not match
        """
        response = self.verify(mode, token, challenge)
        if response.status != 200:
            raise VerificationError()
        return response.body

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _reject(self, reason: str) -> DispatchResult:
        self.logger.warning(f"Rejected webhook delivery: {reason}")
        return DispatchResult(status=400, body=reason)

    async def dispatch(self, payload: Any) -> DispatchResult:
        """
        Normalize one delivery and run the matching handlers.

        Args:
            payload: Decoded JSON body of the POST

        Returns:
            DispatchResult: 400 for payloads that are not WhatsApp Business
            deliveries, otherwise 200 ``EVENT_RECEIVED``
        """
        if not isinstance(payload, Mapping):
            return self._reject("Payload must be a JSON object")

        if payload.get("object") != WHATSAPP_OBJECT_TAG:
            return self._reject(f"Unsupported webhook object: {payload.get('object')!r}")

        try:
            webhook = self.normalizer.parse_webhook_container(dict(payload))
        except ValueError as e:
            return self._reject(str(e))

        result = self.normalizer.normalize(webhook)

        errors: list[WhatsAppError] = []
        dispatched: list[HandlerCategory] = []

        for normalization_error in result.errors:
            errors.append(normalization_error)
            await self._report_error(normalization_error, None)

        for message in result.messages:
            with dispatch_context(message.phone_number_id, message.from_):
                category = await self._dispatch_message(message, errors)
            if category is not None:
                dispatched.append(category)

        for status in result.statuses:
            with dispatch_context(status.phone_number_id, status.recipient_id):
                if await self._dispatch_status(status, errors):
                    dispatched.append(HandlerCategory.STATUS)

        self.logger.info(
            f"Processed delivery: {len(result.messages)} messages, "
            f"{len(result.statuses)} statuses, {len(errors)} errors"
        )
        return DispatchResult(
            status=200,
            body=EVENT_RECEIVED,
            messages=result.messages,
            statuses=result.statuses,
            errors=errors,
            dispatched=dispatched,
        )

    async def _dispatch_message(
        self, message: ProcessedIncomingMessage, errors: list[WhatsAppError]
    ) -> HandlerCategory | None:
        """
        Run the handler for one message.

        Returns:
            The category invoked, or None when no handler is registered
        """
        category = resolve_category(message)
        callback = self.handlers.for_category(category)
        if callback is None:
            self.logger.debug(
                f"No handler for '{category.value}', skipping message {message.id}"
            )
            return None

        try:
            await _invoke(callback, message)
        except Exception as e:
            self.logger.error(
                f"Handler '{category.value}' failed for message {message.id}: {e}",
                exc_info=True,
            )
            error = HandlerError(category, e, message)
            error.__cause__ = e
            errors.append(error)
            await self._report_error(error, message)
        return category

    async def _dispatch_status(
        self, status: MessageStatusUpdate, errors: list[WhatsAppError]
    ) -> bool:
        callback = self.handlers.on_status
        if callback is None:
            return False

        try:
            await _invoke(callback, status)
        except Exception as e:
            self.logger.error(
                f"Status handler failed for message {status.id}: {e}", exc_info=True
            )
            error = HandlerError(HandlerCategory.STATUS, e)
            error.__cause__ = e
            errors.append(error)
            await self._report_error(error, None)
        return True

    async def _report_error(
        self, error: WhatsAppError, message: ProcessedIncomingMessage | None
    ) -> None:
        """Pass an error to ``on_error``; failures there are logged only."""
        callback = self.handlers.on_error
        if callback is None:
            return
        try:
            await _invoke(callback, error, message)
        except Exception as e:
            self.logger.error(f"Error handler failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Framework-agnostic entry point
    # ------------------------------------------------------------------

    async def handle(
        self,
        method: str,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> WebhookResponse:
        """
        Handle a raw webhook request from any HTTP framework.

        Args:
            method: HTTP method ("GET" for verification, "POST" for deliveries)
            query: Query parameters (``hub.mode``, ``hub.verify_token``,
                ``hub.challenge``)
            body: Decoded JSON body for POST requests

        Returns:
            WebhookResponse to send back; 405 for other methods
        """
        method = method.upper()
        if method == "GET":
            query = query or {}
            return self.verify(
                query.get("hub.mode"),
                query.get("hub.verify_token"),
                query.get("hub.challenge"),
            )
        if method == "POST":
            result = await self.dispatch(body)
            return WebhookResponse(status=result.status, body=result.body)
        return WebhookResponse(status=405, body="Method not allowed")
