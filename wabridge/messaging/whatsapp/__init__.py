"""Outgoing WhatsApp messaging: models, builder and transport client."""

from .builder import MessageBuilder, build, validate
from .client import WhatsAppClient
from .models import MessageResponse, OutgoingMessage, parse_outgoing

__all__ = [
    "MessageBuilder",
    "build",
    "validate",
    "WhatsAppClient",
    "MessageResponse",
    "OutgoingMessage",
    "parse_outgoing",
]
