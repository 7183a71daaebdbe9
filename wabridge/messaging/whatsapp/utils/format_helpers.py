"""
Formatting helpers for outgoing WhatsApp messages.

Phone numbers, URLs and text are checked here so the builder can report
violations without raising on the first problem.
"""

import re
import unicodedata
from urllib.parse import urlparse

# E.164: optional '+', no leading zero, 7 to 15 ASCII digits in total
PHONE_NUMBER_PATTERN = re.compile(r"\+?[1-9][0-9]{6,14}")

# Separators users commonly type inside phone numbers
_PHONE_SEPARATORS = re.compile(r"[\s\-.()]")

ELLIPSIS = "..."


def _strip_separators(phone_number: str) -> str:
    return _PHONE_SEPARATORS.sub("", phone_number)


def is_valid_phone_number(phone_number: str) -> bool:
    """Check a phone number is E.164 once separators are removed."""
    if not isinstance(phone_number, str):
        return False
    return bool(PHONE_NUMBER_PATTERN.fullmatch(_strip_separators(phone_number)))


def normalize_phone_number(phone_number: str) -> str:
    """
    Normalize a phone number to ``+digits``.

    Args:
        phone_number: Number as typed, e.g. ``"+1 (555) 123-4567"``

    Returns:
        Normalized number, e.g. ``"+15551234567"``

    Raises:
        ValueError: If the number is not a valid E.164 number
    """
    if not is_valid_phone_number(phone_number):
        raise ValueError(f"Invalid phone number: {phone_number!r}")
    cleaned = _strip_separators(phone_number)
    return cleaned if cleaned.startswith("+") else f"+{cleaned}"


def is_valid_url(url: str) -> bool:
    """Check the value is an absolute http(s) URL."""
    if not isinstance(url, str) or not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def truncate_text(text: str, max_length: int) -> str:
    """
    Shorten text to ``max_length`` characters, ending with an ellipsis.

    Text that already fits is returned unchanged.
    """
    if len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def sanitize_text(text: str) -> str:
    """
    Remove control characters and surrounding whitespace.

    Newlines and tabs are kept; WhatsApp renders them.
    """
    cleaned = "".join(
        char
        for char in text
        if char in "\n\t" or unicodedata.category(char) != "Cc"
    )
    return cleaned.strip()
