"""
Handler table for the webhook dispatcher.

Users supply one optional callback per category. A callback may be a plain
function or a coroutine function; a missing callback means the category is
ignored.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict

from wabridge.core.errors import WhatsAppError
from wabridge.core.types import HandlerCategory
from wabridge.schemas.whatsapp.processed import (
    MessageStatusUpdate,
    ProcessedIncomingMessage,
)

MessageCallback = Callable[[ProcessedIncomingMessage], Awaitable[Any] | Any]
StatusCallback = Callable[[MessageStatusUpdate], Awaitable[Any] | Any]
ErrorCallback = Callable[
    [WhatsAppError, ProcessedIncomingMessage | None], Awaitable[Any] | Any
]


class WebhookHandlers(BaseModel):
    """
    Callbacks keyed by handler category.

    Example:
        async def reply(message):
            ...

        handlers = WebhookHandlers(on_text=reply, on_error=report)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    on_text: MessageCallback | None = None
    on_image: MessageCallback | None = None
    on_video: MessageCallback | None = None
    on_audio: MessageCallback | None = None
    on_document: MessageCallback | None = None
    on_location: MessageCallback | None = None
    on_button_click: MessageCallback | None = None
    on_list_select: MessageCallback | None = None
    on_flow_response: MessageCallback | None = None
    on_sticker: MessageCallback | None = None
    on_contact: MessageCallback | None = None
    on_reaction: MessageCallback | None = None
    on_unknown: MessageCallback | None = None
    on_status: StatusCallback | None = None
    on_error: ErrorCallback | None = None

    def for_category(self, category: HandlerCategory) -> Callable[..., Any] | None:
        """Get the callback registered for a category, if any."""
        return getattr(self, f"on_{category.value}")

    @property
    def registered_categories(self) -> list[HandlerCategory]:
        """Categories that have a callback."""
        return [c for c in HandlerCategory if self.for_category(c) is not None]
