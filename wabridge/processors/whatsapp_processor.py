"""
WhatsApp webhook normalizer.

Turns one raw webhook delivery into flat ``ProcessedIncomingMessage`` records,
one per inbound message, plus ``MessageStatusUpdate`` records for status
callbacks. A malformed message becomes a ``NormalizationError`` in the result
and never aborts the rest of the delivery.
"""

import json
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from wabridge.core.config.settings import settings
from wabridge.core.errors import NormalizationError
from wabridge.core.logging.logger import get_logger
from wabridge.core.types import MEDIA_MESSAGE_TYPES, InteractiveReplyType, MessageType
from wabridge.schemas.whatsapp.message_types import WhatsAppIncomingMessage
from wabridge.schemas.whatsapp.processed import (
    InteractiveInfo,
    LocationInfo,
    MediaInfo,
    MessageStatusUpdate,
    NormalizationResult,
    ProcessedIncomingMessage,
    ReactionInfo,
)
from wabridge.schemas.whatsapp.status_models import WhatsAppStatus
from wabridge.schemas.whatsapp.webhook_container import (
    WebhookEntry,
    WebhookValue,
    WhatsAppWebhook,
)

# Extractors return the payload-group fields for ProcessedIncomingMessage
PayloadExtractor = Callable[[WhatsAppIncomingMessage, list[str]], dict[str, Any]]


def _first_error(exc: ValidationError) -> str:
    """Render the first pydantic error as 'loc: msg'."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


class WhatsAppMessageNormalizer:
    """
    Normalizer for WhatsApp Business Platform webhook deliveries.

    Stateless apart from its configuration: ``normalize`` can be called
    concurrently for independent deliveries.
    """

    def __init__(self, business_id: str | None = None):
        """
        Initialize the normalizer.

        Args:
            business_id: Business id copied into every record. Defaults to
                ``settings.wp_bid``; when neither is set the entry id is used.
        """
        self.logger = get_logger(__name__)
        self.business_id = business_id or settings.wp_bid

        self._payload_extractors: dict[MessageType, PayloadExtractor] = {}
        self._register_payload_extractors()

    def _register_payload_extractors(self) -> None:
        """Register payload extractors for all supported message types."""
        self.register_payload_extractor(MessageType.TEXT, self._extract_text)
        for media_type in MEDIA_MESSAGE_TYPES:
            self.register_payload_extractor(media_type, self._extract_media)
        self.register_payload_extractor(MessageType.LOCATION, self._extract_location)
        self.register_payload_extractor(MessageType.CONTACTS, self._extract_contacts)
        self.register_payload_extractor(
            MessageType.INTERACTIVE, self._extract_interactive
        )
        self.register_payload_extractor(MessageType.BUTTON, self._extract_button)
        self.register_payload_extractor(MessageType.REACTION, self._extract_reaction)

    def register_payload_extractor(
        self, message_type: MessageType, extractor: PayloadExtractor
    ) -> None:
        """Register the payload extractor for a message type."""
        self._payload_extractors[message_type] = extractor

    # ------------------------------------------------------------------
    # Envelope
    # ------------------------------------------------------------------

    def parse_webhook_container(self, payload: dict[str, Any]) -> WhatsAppWebhook:
        """
        Parse the top-level WhatsApp webhook structure.

        Args:
            payload: Raw webhook payload

        Returns:
            Parsed webhook envelope

        Raises:
            ValueError: If the envelope structure itself is invalid
        """
        try:
            return WhatsAppWebhook.model_validate(payload)
        except ValidationError as e:
            error_msg = f"Failed to parse WhatsApp webhook structure: {_first_error(e)}"
            self.logger.error(error_msg)
            raise ValueError(error_msg) from e

    def normalize(
        self, payload: dict[str, Any] | WhatsAppWebhook
    ) -> NormalizationResult:
        """
        Normalize one webhook delivery.

        Output order follows entry order, then change order, then message
        order.

        Args:
            payload: Raw webhook JSON body or an already parsed envelope

        Returns:
            NormalizationResult with messages, per-message errors, statuses
            and warnings

        Raises:
            ValueError: If the envelope structure itself is invalid
        """
        webhook = (
            payload
            if isinstance(payload, WhatsAppWebhook)
            else self.parse_webhook_container(payload)
        )

        messages: list[ProcessedIncomingMessage] = []
        errors: list[NormalizationError] = []
        statuses: list[MessageStatusUpdate] = []
        warnings: list[str] = []

        for entry_index, entry in enumerate(webhook.entry):
            business_id = self._resolve_business_id(entry)
            for change_index, change in enumerate(entry.changes):
                position = {"entry_index": entry_index, "change_index": change_index}
                if not change.carries_messages:
                    self.logger.debug(
                        f"Skipping '{change.field}' change at "
                        f"entry[{entry_index}].changes[{change_index}]"
                    )
                    continue

                try:
                    value = WebhookValue.model_validate(change.value)
                except ValidationError as e:
                    errors.append(
                        NormalizationError(
                            f"invalid change value: {_first_error(e)}",
                            raw=change.value,
                            **position,
                        )
                    )
                    continue

                for message_index, raw_message in enumerate(value.messages):
                    result = self._normalize_message(
                        raw_message, value, business_id, warnings
                    )
                    if isinstance(result, ProcessedIncomingMessage):
                        messages.append(result)
                    else:
                        errors.append(
                            NormalizationError(
                                result,
                                message_index=message_index,
                                message_id=self._peek_id(raw_message),
                                raw=raw_message,
                                **position,
                            )
                        )

                for status_index, raw_status in enumerate(value.statuses):
                    try:
                        statuses.append(
                            self._normalize_status(raw_status, value, business_id)
                        )
                    except ValidationError as e:
                        errors.append(
                            NormalizationError(
                                f"invalid status: {_first_error(e)}",
                                message_index=status_index,
                                message_id=self._peek_id(raw_status),
                                raw=raw_status,
                                **position,
                            )
                        )

        for error in errors:
            self.logger.warning(str(error))

        self.logger.debug(
            f"Normalized {len(messages)} messages, {len(statuses)} statuses, "
            f"{len(errors)} errors"
        )
        return NormalizationResult(
            messages=messages, errors=errors, statuses=statuses, warnings=warnings
        )

    def _resolve_business_id(self, entry: WebhookEntry) -> str:
        return self.business_id or entry.id

    @staticmethod
    def _peek_id(raw: Any) -> str | None:
        """Read the id of a raw message without trusting its shape."""
        if isinstance(raw, dict) and isinstance(raw.get("id"), str):
            return raw["id"]
        return None

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def _normalize_message(
        self,
        raw_message: Any,
        value: WebhookValue,
        business_id: str,
        warnings: list[str],
    ) -> ProcessedIncomingMessage | str:
        """
        Normalize a single raw message.

        Returns:
            The processed message, or the failure reason as a string
        """
        if not isinstance(raw_message, dict):
            return "message is not a JSON object"

        try:
            message = WhatsAppIncomingMessage.model_validate(raw_message)
        except ValidationError as e:
            return _first_error(e)

        message_type = message.message_type
        extractor = self._payload_extractors.get(message_type)
        payload_fields = extractor(message, warnings) if extractor else {}

        if extractor is None:
            self.logger.info(
                f"Unknown message type '{message.type}' for message {message.id}"
            )

        contact = value.find_contact(message.from_)

        return ProcessedIncomingMessage(
            id=message.id,
            from_=message.from_,
            timestamp=message.timestamp,
            type=message_type,
            raw_type=message.type,
            context=message.context.id if message.context else None,
            profile_name=contact.profile.name if contact else None,
            phone_number_id=value.metadata.phone_number_id,
            business_id=business_id,
            **payload_fields,
        )

    def _extract_text(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        return {"text": message.text.body}

    def _extract_media(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        media = getattr(message, message.message_type.value)
        return {
            "media": MediaInfo(
                id=media.id,
                mime_type=media.mime_type,
                caption=media.caption,
                filename=media.filename,
                sha256=media.sha256,
            )
        }

    def _extract_location(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        return {"location": LocationInfo(**message.location.model_dump())}

    def _extract_contacts(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        return {"contact": list(message.contacts)}

    def _extract_reaction(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        return {
            "reaction": ReactionInfo(
                message_id=message.reaction.message_id, emoji=message.reaction.emoji
            )
        }

    def _extract_button(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        # Template quick replies behave like interactive button replies
        return {
            "interactive": InteractiveInfo(
                type=MessageType.BUTTON.value,
                button_id=message.button.payload,
                title=message.button.text,
            )
        }

    def _extract_interactive(
        self, message: WhatsAppIncomingMessage, warnings: list[str]
    ) -> dict[str, Any]:
        interactive = message.interactive
        info: dict[str, Any] = {"type": interactive.type}

        if interactive.type == InteractiveReplyType.BUTTON_REPLY.value:
            info["button_id"] = interactive.button_reply.id
            info["title"] = interactive.button_reply.title
        elif interactive.type == InteractiveReplyType.LIST_REPLY.value:
            info["list_id"] = interactive.list_reply.id
            info["title"] = interactive.list_reply.title
            info["description"] = interactive.list_reply.description
        elif interactive.type == InteractiveReplyType.NFM_REPLY.value:
            info["title"] = interactive.nfm_reply.name
            info["flow_response"] = self._parse_flow_response(
                message.id, interactive.nfm_reply.response_json, warnings
            )

        return {"interactive": InteractiveInfo(**info)}

    def _parse_flow_response(
        self, message_id: str, response_json: str, warnings: list[str]
    ) -> Any:
        """
        Parse a Flow ``response_json`` string.

        Unparseable responses are kept as the raw string and reported as a
        warning; the message itself stays valid.
        """
        try:
            return json.loads(response_json)
        except (TypeError, ValueError) as e:
            warning = f"Flow response for message {message_id} is not valid JSON: {e}"
            self.logger.warning(warning)
            warnings.append(warning)
            return response_json

    # ------------------------------------------------------------------
    # Statuses
    # ------------------------------------------------------------------

    def _normalize_status(
        self, raw_status: Any, value: WebhookValue, business_id: str
    ) -> MessageStatusUpdate:
        status = WhatsAppStatus.model_validate(raw_status)
        return MessageStatusUpdate(
            id=status.id,
            status=status.status,
            timestamp=status.timestamp,
            recipient_id=status.recipient_id,
            phone_number_id=value.metadata.phone_number_id,
            business_id=business_id,
            conversation=status.conversation,
            pricing=status.pricing,
            errors=[error.model_dump(exclude_none=True) for error in status.errors],
        )


def normalize(
    payload: dict[str, Any] | WhatsAppWebhook, business_id: str | None = None
) -> NormalizationResult:
    """
    Normalize one webhook delivery with a throwaway normalizer.

    Args:
        payload: Raw webhook JSON body or parsed envelope
        business_id: Business id for every record (see WhatsAppMessageNormalizer)

    Returns:
        NormalizationResult for the delivery
    """
    return WhatsAppMessageNormalizer(business_id=business_id).normalize(payload)
