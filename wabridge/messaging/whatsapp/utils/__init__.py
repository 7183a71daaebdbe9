"""WhatsApp utility functions and helpers."""

from wabridge.messaging.whatsapp.utils.format_helpers import (
    is_valid_phone_number,
    is_valid_url,
    normalize_phone_number,
    sanitize_text,
    truncate_text,
)

__all__ = [
    "is_valid_phone_number",
    "is_valid_url",
    "normalize_phone_number",
    "sanitize_text",
    "truncate_text",
]
