"""
Specialized message models for WhatsApp messaging.

Location pins and contact cards.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from wabridge.messaging.whatsapp.models.base_models import (
    OUTGOING_MODEL_CONFIG,
    OutgoingMessageBase,
)


class LocationObject(BaseModel):
    model_config = OUTGOING_MODEL_CONFIG

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    name: str | None = None
    address: str | None = None


class LocationMessage(OutgoingMessageBase):
    """Outgoing location pin."""

    type: Literal["location"] = "location"
    location: LocationObject


class ContactsMessage(OutgoingMessageBase):
    """Outgoing contact cards.

    Each card follows the Cloud API contact object: ``name`` (with
    ``formatted_name``), ``phones``, ``emails``, ``org``, ``urls``...
    """

    type: Literal["contacts"] = "contacts"
    contacts: list[dict[str, Any]] = Field(..., min_length=1)
