"""
Pytest configuration and common fixtures for wabridge tests.

Provides webhook payload builders shared by the normalizer, dispatcher and
route tests.
"""

from typing import Any

import pytest

from wabridge.core.config.settings import settings
from wabridge.core.logging.context import clear_dispatch_context

PHONE_NUMBER_ID = "106540352242922"
BUSINESS_ID = "102290129340398"
SENDER = "16315551234"


def make_message(
    message_id: str = "wamid.TEXT1",
    message_type: str = "text",
    sender: str = SENDER,
    **payload: Any,
) -> dict[str, Any]:
    """Build a raw inbound message; defaults to a text message."""
    if message_type == "text" and "text" not in payload:
        payload = {"text": {"body": "Hello"}, **payload}
    return {
        "from": sender,
        "id": message_id,
        "timestamp": "1717000000",
        "type": message_type,
        **payload,
    }


def make_webhook(
    messages: list[Any] | None = None,
    statuses: list[Any] | None = None,
    contacts: list[dict[str, Any]] | None = None,
    entry_id: str = BUSINESS_ID,
) -> dict[str, Any]:
    """Wrap messages and statuses in a full webhook envelope."""
    value: dict[str, Any] = {
        "messaging_product": "whatsapp",
        "metadata": {
            "display_phone_number": "15550783881",
            "phone_number_id": PHONE_NUMBER_ID,
        },
    }
    if contacts is None and messages:
        contacts = [{"profile": {"name": "Kerry Fisher"}, "wa_id": SENDER}]
    if contacts is not None:
        value["contacts"] = contacts
    if messages is not None:
        value["messages"] = messages
    if statuses is not None:
        value["statuses"] = statuses
    return {
        "object": "whatsapp_business_account",
        "entry": [{"id": entry_id, "changes": [{"field": "messages", "value": value}]}],
    }


def make_status(
    message_id: str = "wamid.OUT1", status: str = "delivered"
) -> dict[str, Any]:
    return {
        "id": message_id,
        "status": status,
        "timestamp": "1717000100",
        "recipient_id": SENDER,
    }


@pytest.fixture
def text_webhook() -> dict[str, Any]:
    """Webhook with a single text message."""
    return make_webhook([make_message()])


@pytest.fixture
def status_webhook() -> dict[str, Any]:
    """Webhook carrying only a delivery status."""
    return make_webhook(statuses=[make_status()])


# Environment setup for tests
@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Pin configuration so a local .env cannot leak into tests."""
    monkeypatch.setenv("ENVIRONMENT", "DEV")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(settings, "wp_bid", None)
    monkeypatch.setattr(settings, "whatsapp_webhook_verify_token", "test_verify_token")
    monkeypatch.setattr(settings, "wp_access_token", "test_token")
    monkeypatch.setattr(settings, "wp_phone_id", PHONE_NUMBER_ID)
    yield
    clear_dispatch_context()


@pytest.fixture
def webhook_factory():
    """Factory for webhook envelopes (see make_webhook)."""
    return make_webhook


@pytest.fixture
def message_factory():
    """Factory for raw inbound messages (see make_message)."""
    return make_message


@pytest.fixture
def status_factory():
    """Factory for raw status entries (see make_status)."""
    return make_status
