"""
Events module for wabridge.

Handler table and dispatcher for WhatsApp webhook deliveries.
"""

from .event_dispatcher import (
    DispatchResult,
    WebhookDispatcher,
    WebhookResponse,
    resolve_category,
)
from .handlers import WebhookHandlers

__all__ = [
    "WebhookHandlers",
    "WebhookDispatcher",
    "WebhookResponse",
    "DispatchResult",
    "resolve_category",
]
