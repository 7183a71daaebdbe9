"""
wabridge - WhatsApp Business Cloud API client

Normalizes inbound webhook deliveries, dispatches them to your handlers and
builds validated outgoing messages.

Clean Import Interface:
- Everyday entry points exposed at top level
- Wire schemas available via wabridge.schemas.whatsapp
"""

from .core.config.settings import settings
from .core.errors import (
    ApiError,
    ConfigurationError,
    FieldViolation,
    HandlerError,
    MessageValidationError,
    NormalizationError,
    RateLimitError,
    VerificationError,
    WhatsAppError,
)
from .core.events import (
    DispatchResult,
    WebhookDispatcher,
    WebhookHandlers,
    WebhookResponse,
)
from .core.types import ErrorKind, HandlerCategory, MessageType
from .messaging.whatsapp import (
    MessageBuilder,
    MessageResponse,
    OutgoingMessage,
    WhatsAppClient,
    build,
    parse_outgoing,
    validate,
)
from .processors import WhatsAppMessageNormalizer, normalize
from .schemas.whatsapp import (
    MessageStatusUpdate,
    NormalizationResult,
    ProcessedIncomingMessage,
)

# Dynamic version from pyproject.toml
__version__ = settings.version

__all__ = [
    # Inbound
    "WebhookDispatcher",
    "WebhookHandlers",
    "WebhookResponse",
    "DispatchResult",
    "WhatsAppMessageNormalizer",
    "normalize",
    "ProcessedIncomingMessage",
    "MessageStatusUpdate",
    "NormalizationResult",
    # Outbound
    "MessageBuilder",
    "build",
    "validate",
    "OutgoingMessage",
    "parse_outgoing",
    "WhatsAppClient",
    "MessageResponse",
    # Types
    "MessageType",
    "HandlerCategory",
    "ErrorKind",
    # Errors
    "WhatsAppError",
    "ConfigurationError",
    "MessageValidationError",
    "FieldViolation",
    "NormalizationError",
    "VerificationError",
    "HandlerError",
    "ApiError",
    "RateLimitError",
]
