"""
WhatsApp outgoing-message status schema.

Status updates arrive in ``value.statuses`` for messages the business sent:
sent, delivered, read, failed, ...
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from wabridge.schemas.whatsapp.base_models import INBOUND_MODEL_CONFIG


class StatusError(BaseModel):
    """Error information attached to a failed status."""

    model_config = INBOUND_MODEL_CONFIG

    code: int = Field(..., description="Error code")
    title: str = Field("", description="Error title")
    message: str | None = Field(None, description="Error message")
    error_data: dict[str, Any] | None = Field(None, description="Error details")


class WhatsAppStatus(BaseModel):
    """A raw status entry from ``value.statuses``."""

    model_config = INBOUND_MODEL_CONFIG

    id: str = Field(..., description="ID of the outgoing message")
    status: str = Field(..., description="sent, delivered, read, failed, ...")
    timestamp: str = Field(..., description="Unix timestamp of the status change")
    recipient_id: str = Field(..., description="WhatsApp ID of the recipient")
    conversation: dict[str, Any] | None = Field(None, description="Conversation info")
    pricing: dict[str, Any] | None = Field(None, description="Pricing info")
    errors: list[StatusError] = Field(default_factory=list)

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Any:
        """Accept numeric timestamps and keep them as strings."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("errors", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v
