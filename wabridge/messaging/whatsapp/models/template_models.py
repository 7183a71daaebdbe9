"""
Template message models for WhatsApp messaging.

Templates are pre-approved in WhatsApp Manager; the message only names the
template, its language and the parameters for its components.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from wabridge.messaging.whatsapp.models.base_models import (
    OUTGOING_MODEL_CONFIG,
    OutgoingMessageBase,
)


class TemplateLanguage(BaseModel):
    model_config = OUTGOING_MODEL_CONFIG

    code: str = Field(..., description="Language code, e.g. 'en_US'")
    policy: str | None = Field(None, description="Language policy ('deterministic')")


class TemplateObject(BaseModel):
    """The ``template`` payload."""

    model_config = OUTGOING_MODEL_CONFIG

    name: str = Field(..., description="Approved template name")
    language: TemplateLanguage
    components: list[dict[str, Any]] | None = Field(
        None, description="Header/body/button parameters"
    )


class TemplateMessage(OutgoingMessageBase):
    """Outgoing template message."""

    type: Literal["template"] = "template"
    template: TemplateObject
