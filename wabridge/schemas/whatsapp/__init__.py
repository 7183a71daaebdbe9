"""
WhatsApp webhook schemas.

Raw wire models (envelope, message, status) and the normalized records built
from them.
"""

from .base_models import ContactProfile, MessageContext, WhatsAppContact, WhatsAppMetadata
from .message_types import WhatsAppIncomingMessage
from .processed import (
    InteractiveInfo,
    LocationInfo,
    MediaInfo,
    MessageStatusUpdate,
    NormalizationResult,
    ProcessedIncomingMessage,
    ReactionInfo,
)
from .status_models import StatusError, WhatsAppStatus
from .webhook_container import WebhookChange, WebhookEntry, WebhookValue, WhatsAppWebhook

__all__ = [
    # Wire models
    "WhatsAppWebhook",
    "WebhookEntry",
    "WebhookChange",
    "WebhookValue",
    "WhatsAppMetadata",
    "WhatsAppContact",
    "ContactProfile",
    "MessageContext",
    "WhatsAppIncomingMessage",
    "WhatsAppStatus",
    "StatusError",
    # Normalized records
    "ProcessedIncomingMessage",
    "MediaInfo",
    "LocationInfo",
    "InteractiveInfo",
    "ReactionInfo",
    "MessageStatusUpdate",
    "NormalizationResult",
]
