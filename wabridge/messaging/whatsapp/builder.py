"""
Outgoing message builder and validator.

``build`` turns a message type, a recipient and a content dictionary into a
typed OutgoingMessage. Every rule is checked before anything is built, so a
single ``MessageValidationError`` lists every offending field of the call.
``validate`` runs the same rules and returns the violations instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Self

from wabridge.core.errors import FieldViolation, MessageValidationError
from wabridge.core.types import (
    MAX_BUTTON_TITLE_LENGTH,
    MAX_BUTTONS,
    MAX_CAPTION_LENGTH,
    MAX_LIST_ROWS,
    MAX_LIST_SECTIONS,
    MAX_TEXT_LENGTH,
    MEDIA_MESSAGE_TYPES,
    InteractiveType,
    MessageType,
)
from wabridge.messaging.whatsapp.models import (
    AudioMessage,
    ContactsMessage,
    DocumentMessage,
    ImageMessage,
    InteractiveMessage,
    LocationMessage,
    OutgoingMessageBase,
    ReplyContext,
    StickerMessage,
    TemplateMessage,
    TextMessage,
    VideoMessage,
)
from wabridge.messaging.whatsapp.utils import (
    is_valid_phone_number,
    is_valid_url,
    normalize_phone_number,
    truncate_text,
)

# Types that may be sent; inbound-only tags are rejected
OUTGOING_MESSAGE_TYPES = frozenset(
    {
        MessageType.TEXT,
        MessageType.IMAGE,
        MessageType.VIDEO,
        MessageType.AUDIO,
        MessageType.DOCUMENT,
        MessageType.STICKER,
        MessageType.INTERACTIVE,
        MessageType.TEMPLATE,
        MessageType.LOCATION,
        MessageType.CONTACTS,
    }
)

_MEDIA_MODELS: dict[MessageType, type[OutgoingMessageBase]] = {
    MessageType.IMAGE: ImageMessage,
    MessageType.VIDEO: VideoMessage,
    MessageType.AUDIO: AudioMessage,
    MessageType.DOCUMENT: DocumentMessage,
    MessageType.STICKER: StickerMessage,
}

# Header types accepted on interactive messages
_HEADER_TYPES = frozenset({"text", "image", "video", "document"})

# Media types that cannot carry a caption
_CAPTIONLESS_TYPES = frozenset({MessageType.AUDIO, MessageType.STICKER})

Violations = list[FieldViolation]


def _drop_none(value: Any) -> Any:
    """Recursively remove None values from dictionaries and lists."""
    if isinstance(value, Mapping):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(item) for item in value if item is not None]
    return value


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _resolve_type(message_type: MessageType | str) -> MessageType | None:
    try:
        resolved = MessageType(message_type)
    except ValueError:
        return None
    return resolved if resolved in OUTGOING_MESSAGE_TYPES else None


# ----------------------------------------------------------------------
# Rules
# ----------------------------------------------------------------------


def _check_recipient(to: Any, violations: Violations) -> None:
    if not is_valid_phone_number(to):
        violations.append(
            FieldViolation(
                field="to", message="must be an E.164 phone number (7 to 15 digits)"
            )
        )


def _text_body(content: Mapping[str, Any]) -> Any:
    return content.get("text", content.get("body"))


def _check_text(
    content: Mapping[str, Any], violations: Violations, truncate: bool
) -> None:
    body = _text_body(content)
    if isinstance(body, Mapping):
        body = body.get("body")
    if _is_blank(body):
        violations.append(FieldViolation(field="text.body", message="is required"))
    elif len(body) > MAX_TEXT_LENGTH and not truncate:
        violations.append(
            FieldViolation(
                field="text.body",
                message=f"must be at most {MAX_TEXT_LENGTH} characters",
            )
        )


def _check_media(
    message_type: MessageType, content: Mapping[str, Any], violations: Violations
) -> None:
    prefix = message_type.value
    media_id = content.get("id")
    link = content.get("link")

    if media_id is not None and _is_blank(media_id):
        violations.append(
            FieldViolation(field=f"{prefix}.id", message="must be a non-empty string")
        )
    elif _is_blank(media_id) and _is_blank(link):
        violations.append(
            FieldViolation(field=f"{prefix}.id", message="either 'id' or 'link' is required")
        )
    if link is not None and not is_valid_url(link):
        violations.append(
            FieldViolation(field=f"{prefix}.link", message="must be an http(s) URL")
        )

    if message_type == MessageType.DOCUMENT and _is_blank(content.get("filename")):
        violations.append(
            FieldViolation(field="document.filename", message="is required")
        )

    caption = content.get("caption")
    if caption is not None:
        if message_type in _CAPTIONLESS_TYPES:
            violations.append(
                FieldViolation(
                    field=f"{prefix}.caption",
                    message=f"is not supported for {prefix} messages",
                )
            )
        elif not isinstance(caption, str) or len(caption) > MAX_CAPTION_LENGTH:
            violations.append(
                FieldViolation(
                    field=f"{prefix}.caption",
                    message=f"must be text of at most {MAX_CAPTION_LENGTH} characters",
                )
            )


def _check_buttons(action: Mapping[str, Any], violations: Violations) -> None:
    buttons = action.get("buttons")
    if not isinstance(buttons, list) or not buttons:
        violations.append(
            FieldViolation(
                field="interactive.action.buttons", message="at least one button is required"
            )
        )
        return
    if len(buttons) > MAX_BUTTONS:
        violations.append(
            FieldViolation(
                field="interactive.action.buttons",
                message=f"at most {MAX_BUTTONS} buttons are allowed",
            )
        )

    seen_ids: set[str] = set()
    for index, button in enumerate(buttons):
        path = f"interactive.action.buttons[{index}].reply"
        reply = button.get("reply") if isinstance(button, Mapping) else None
        if not isinstance(reply, Mapping):
            violations.append(FieldViolation(field=path, message="is required"))
            continue

        button_id = reply.get("id")
        if _is_blank(button_id):
            violations.append(FieldViolation(field=f"{path}.id", message="is required"))
        elif button_id in seen_ids:
            violations.append(
                FieldViolation(field=f"{path}.id", message="must be unique")
            )
        else:
            seen_ids.add(button_id)

        title = reply.get("title")
        if _is_blank(title):
            violations.append(
                FieldViolation(field=f"{path}.title", message="is required")
            )
        elif len(title) > MAX_BUTTON_TITLE_LENGTH:
            violations.append(
                FieldViolation(
                    field=f"{path}.title",
                    message=f"must be at most {MAX_BUTTON_TITLE_LENGTH} characters",
                )
            )


def _check_list(action: Mapping[str, Any], violations: Violations) -> None:
    if _is_blank(action.get("button")):
        violations.append(
            FieldViolation(field="interactive.action.button", message="is required")
        )

    sections = action.get("sections")
    if not isinstance(sections, list) or not sections:
        violations.append(
            FieldViolation(
                field="interactive.action.sections",
                message="at least one section is required",
            )
        )
        return
    if len(sections) > MAX_LIST_SECTIONS:
        violations.append(
            FieldViolation(
                field="interactive.action.sections",
                message=f"at most {MAX_LIST_SECTIONS} sections are allowed",
            )
        )

    for index, section in enumerate(sections):
        path = f"interactive.action.sections[{index}].rows"
        rows = section.get("rows") if isinstance(section, Mapping) else None
        if not isinstance(rows, list) or not rows:
            violations.append(
                FieldViolation(field=path, message="at least one row is required")
            )
            continue
        if len(rows) > MAX_LIST_ROWS:
            violations.append(
                FieldViolation(
                    field=path, message=f"at most {MAX_LIST_ROWS} rows are allowed"
                )
            )
        for row_index, row in enumerate(rows):
            row_path = f"{path}[{row_index}]"
            if not isinstance(row, Mapping) or _is_blank(row.get("id")):
                violations.append(
                    FieldViolation(field=f"{row_path}.id", message="is required")
                )
            if not isinstance(row, Mapping) or _is_blank(row.get("title")):
                violations.append(
                    FieldViolation(field=f"{row_path}.title", message="is required")
                )


def _check_cta_url(action: Mapping[str, Any], violations: Violations) -> None:
    parameters = action.get("parameters")
    parameters = parameters if isinstance(parameters, Mapping) else {}
    if not is_valid_url(parameters.get("url")):
        violations.append(
            FieldViolation(
                field="interactive.action.parameters.url",
                message="must be an http(s) URL",
            )
        )
    if _is_blank(parameters.get("display_text")):
        violations.append(
            FieldViolation(
                field="interactive.action.parameters.display_text",
                message="is required",
            )
        )


def _check_flow(action: Mapping[str, Any], violations: Violations) -> None:
    parameters = action.get("parameters")
    parameters = parameters if isinstance(parameters, Mapping) else {}
    if _is_blank(parameters.get("flow_id")) and _is_blank(parameters.get("flow_name")):
        violations.append(
            FieldViolation(
                field="interactive.action.parameters.flow_id",
                message="either 'flow_id' or 'flow_name' is required",
            )
        )


_ACTION_RULES: dict[InteractiveType, Callable[[Mapping[str, Any], Violations], None]] = {
    InteractiveType.BUTTON: _check_buttons,
    InteractiveType.LIST: _check_list,
    InteractiveType.CTA_URL: _check_cta_url,
    InteractiveType.FLOW: _check_flow,
}


def _check_interactive(content: Mapping[str, Any], violations: Violations) -> None:
    try:
        interactive_type = InteractiveType(content.get("type"))
    except ValueError:
        allowed = ", ".join(t.value for t in InteractiveType)
        violations.append(
            FieldViolation(field="interactive.type", message=f"must be one of: {allowed}")
        )
        interactive_type = None

    header = content.get("header")
    if header is not None and not isinstance(header, str):
        header_type = header.get("type") if isinstance(header, Mapping) else None
        if header_type not in _HEADER_TYPES:
            violations.append(
                FieldViolation(
                    field="interactive.header.type",
                    message=f"must be one of: {', '.join(sorted(_HEADER_TYPES))}",
                )
            )

    body = content.get("body")
    body_text = body.get("text") if isinstance(body, Mapping) else body
    if _is_blank(body_text):
        violations.append(
            FieldViolation(field="interactive.body.text", message="is required")
        )
    elif len(body_text) > MAX_TEXT_LENGTH:
        violations.append(
            FieldViolation(
                field="interactive.body.text",
                message=f"must be at most {MAX_TEXT_LENGTH} characters",
            )
        )

    action = content.get("action")
    if not isinstance(action, Mapping):
        violations.append(
            FieldViolation(field="interactive.action", message="is required")
        )
        return
    if interactive_type is not None:
        _ACTION_RULES[interactive_type](action, violations)


def _check_template(content: Mapping[str, Any], violations: Violations) -> None:
    if _is_blank(content.get("name")):
        violations.append(FieldViolation(field="template.name", message="is required"))
    language = content.get("language")
    code = language.get("code") if isinstance(language, Mapping) else language
    if _is_blank(code):
        violations.append(
            FieldViolation(field="template.language.code", message="is required")
        )
    components = content.get("components")
    if components is not None and (
        not isinstance(components, list)
        or not all(isinstance(c, Mapping) for c in components)
    ):
        violations.append(
            FieldViolation(field="template.components", message="must be a list of objects")
        )


def _check_coordinate(
    content: Mapping[str, Any], name: str, bound: int, violations: Violations
) -> None:
    value = content.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        violations.append(
            FieldViolation(field=f"location.{name}", message="must be a number")
        )
    elif not -bound <= value <= bound:
        violations.append(
            FieldViolation(
                field=f"location.{name}", message=f"must be between -{bound} and {bound}"
            )
        )


def _check_location(content: Mapping[str, Any], violations: Violations) -> None:
    _check_coordinate(content, "latitude", 90, violations)
    _check_coordinate(content, "longitude", 180, violations)


def _check_contacts(content: Mapping[str, Any], violations: Violations) -> None:
    contacts = content.get("contacts")
    if not isinstance(contacts, list) or not contacts:
        violations.append(
            FieldViolation(field="contacts", message="at least one contact is required")
        )
        return
    for index, card in enumerate(contacts):
        name = card.get("name") if isinstance(card, Mapping) else None
        formatted = name.get("formatted_name") if isinstance(name, Mapping) else None
        if _is_blank(formatted):
            violations.append(
                FieldViolation(
                    field=f"contacts[{index}].name.formatted_name",
                    message="is required",
                )
            )


def _check_content(
    message_type: MessageType,
    content: Mapping[str, Any],
    violations: Violations,
    truncate: bool,
) -> None:
    if message_type == MessageType.TEXT:
        _check_text(content, violations, truncate)
    elif message_type in MEDIA_MESSAGE_TYPES:
        _check_media(message_type, content, violations)
    elif message_type == MessageType.INTERACTIVE:
        _check_interactive(content, violations)
    elif message_type == MessageType.TEMPLATE:
        _check_template(content, violations)
    elif message_type == MessageType.LOCATION:
        _check_location(content, violations)
    elif message_type == MessageType.CONTACTS:
        _check_contacts(content, violations)


def _collect_violations(
    message_type: MessageType | str,
    to: Any,
    content: Any,
    reply_to: str | None = None,
    truncate: bool = False,
) -> tuple[MessageType | None, Violations]:
    violations: Violations = []
    _check_recipient(to, violations)

    resolved = _resolve_type(message_type)
    if resolved is None:
        allowed = ", ".join(t.value for t in MessageType if t in OUTGOING_MESSAGE_TYPES)
        violations.append(
            FieldViolation(
                field="type",
                message=f"unsupported message type {message_type!r}; expected one of: {allowed}",
            )
        )

    if not isinstance(content, Mapping):
        violations.append(FieldViolation(field="content", message="must be a mapping"))
    elif resolved is not None:
        _check_content(resolved, content, violations, truncate)

    if reply_to is not None and _is_blank(reply_to):
        violations.append(
            FieldViolation(field="context.message_id", message="must not be empty")
        )

    return resolved, violations


# ----------------------------------------------------------------------
# Construction (content is known to be valid here)
# ----------------------------------------------------------------------


def _text_payload(content: Mapping[str, Any], truncate: bool) -> dict[str, Any]:
    body = _text_body(content)
    preview_url = content.get("preview_url")
    if isinstance(body, Mapping):
        preview_url = body.get("preview_url", preview_url)
        body = body["body"]
    if truncate:
        body = truncate_text(body, MAX_TEXT_LENGTH)
    return {"text": {"body": body, "preview_url": preview_url}}


def _media_payload(message_type: MessageType, content: Mapping[str, Any]) -> dict[str, Any]:
    fields = ("id", "link", "caption", "filename")
    return {message_type.value: {key: content.get(key) for key in fields}}


def _interactive_payload(content: Mapping[str, Any]) -> dict[str, Any]:
    body = content["body"]
    footer = content.get("footer")
    header = content.get("header")
    return {
        "interactive": _drop_none(
            {
                "type": content["type"],
                "header": {"type": "text", "text": header}
                if isinstance(header, str)
                else header,
                "body": body if isinstance(body, Mapping) else {"text": body},
                "footer": {"text": footer} if isinstance(footer, str) else footer,
                "action": content["action"],
            }
        )
    }


def _template_payload(content: Mapping[str, Any]) -> dict[str, Any]:
    language = content["language"]
    return {
        "template": _drop_none(
            {
                "name": content["name"],
                "language": language
                if isinstance(language, Mapping)
                else {"code": language},
                "components": content.get("components"),
            }
        )
    }


def _location_payload(content: Mapping[str, Any]) -> dict[str, Any]:
    fields = ("latitude", "longitude", "name", "address")
    return {"location": {key: content.get(key) for key in fields}}


def _contacts_payload(content: Mapping[str, Any]) -> dict[str, Any]:
    return {"contacts": _drop_none(list(content["contacts"]))}


def _construct(
    message_type: MessageType,
    content: Mapping[str, Any],
    envelope: dict[str, Any],
    truncate: bool,
) -> OutgoingMessageBase:
    if message_type == MessageType.TEXT:
        return TextMessage(**envelope, **_text_payload(content, truncate))
    if message_type in _MEDIA_MODELS:
        return _MEDIA_MODELS[message_type](
            **envelope, **_media_payload(message_type, content)
        )
    if message_type == MessageType.INTERACTIVE:
        return InteractiveMessage(**envelope, **_interactive_payload(content))
    if message_type == MessageType.TEMPLATE:
        return TemplateMessage(**envelope, **_template_payload(content))
    if message_type == MessageType.LOCATION:
        return LocationMessage(**envelope, **_location_payload(content))
    return ContactsMessage(**envelope, **_contacts_payload(content))


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------


def validate(
    message_type: MessageType | str,
    to: Any,
    content: Any,
    *,
    reply_to: str | None = None,
    truncate: bool = False,
) -> list[FieldViolation]:
    """
    Check an outgoing message without building it.

    Args:
        message_type: Outgoing type tag ("text", "image", "interactive", ...)
        to: Recipient phone number
        content: Type-specific content dictionary
        reply_to: Optional ID of the message being replied to
        truncate: Whether over-long text would be truncated by ``build``

    Returns:
        Every violation found, empty when the message is valid
    """
    _, violations = _collect_violations(message_type, to, content, reply_to, truncate)
    return violations


def build(
    message_type: MessageType | str,
    to: str,
    content: Mapping[str, Any],
    *,
    reply_to: str | None = None,
    truncate: bool = False,
) -> OutgoingMessageBase:
    """
    Build a validated outgoing message.

    Args:
        message_type: Outgoing type tag ("text", "image", "interactive", ...)
        to: Recipient phone number; separators are removed and the result is
            normalized to ``+digits``
        content: Type-specific content dictionary
        reply_to: Optional ID of the message being replied to
        truncate: Shorten text longer than the provider limit instead of
            rejecting it

    Returns:
        The OutgoingMessage variant for ``message_type``

    Raises:
        MessageValidationError: Listing every violated rule
    """
    resolved, violations = _collect_violations(
        message_type, to, content, reply_to, truncate
    )
    if violations:
        raise MessageValidationError(violations)

    envelope: dict[str, Any] = {"to": normalize_phone_number(to)}
    if reply_to is not None:
        envelope["context"] = ReplyContext(message_id=reply_to)
    return _construct(resolved, content, envelope, truncate)


class MessageBuilder:
    """
    Per-recipient builder with one helper per message type.

    Example:
        builder = MessageBuilder("+15551234567").reply_to("wamid.123")
        message = builder.text("Thanks, got it!")
    """

    def __init__(self, to: str, *, truncate: bool = False):
        """
        Initialize the builder.

        Args:
            to: Recipient phone number
            truncate: Shorten over-long text instead of rejecting it
        """
        self.to = to
        self.truncate = truncate
        self._reply_to: str | None = None

    def reply_to(self, message_id: str) -> Self:
        """Send the following messages as replies to ``message_id``."""
        self._reply_to = message_id
        return self

    def build(
        self, message_type: MessageType | str, content: Mapping[str, Any]
    ) -> OutgoingMessageBase:
        return build(
            message_type,
            self.to,
            content,
            reply_to=self._reply_to,
            truncate=self.truncate,
        )

    def text(self, body: str, *, preview_url: bool | None = None) -> OutgoingMessageBase:
        return self.build(MessageType.TEXT, {"text": body, "preview_url": preview_url})

    def _media(
        self,
        message_type: MessageType,
        media: str,
        caption: str | None = None,
        filename: str | None = None,
    ) -> OutgoingMessageBase:
        # URLs are sent as links, anything else as an uploaded media ID
        key = "link" if media.startswith(("http://", "https://")) else "id"
        return self.build(
            message_type, {key: media, "caption": caption, "filename": filename}
        )

    def image(self, media: str, caption: str | None = None) -> OutgoingMessageBase:
        return self._media(MessageType.IMAGE, media, caption)

    def video(self, media: str, caption: str | None = None) -> OutgoingMessageBase:
        return self._media(MessageType.VIDEO, media, caption)

    def audio(self, media: str) -> OutgoingMessageBase:
        return self._media(MessageType.AUDIO, media)

    def sticker(self, media: str) -> OutgoingMessageBase:
        return self._media(MessageType.STICKER, media)

    def document(
        self, media: str, filename: str, caption: str | None = None
    ) -> OutgoingMessageBase:
        return self._media(MessageType.DOCUMENT, media, caption, filename)

    def buttons(
        self,
        body: str,
        buttons: list[dict[str, str]],
        *,
        header: str | None = None,
        footer: str | None = None,
    ) -> OutgoingMessageBase:
        """
        Build a quick reply button message.

        Args:
            body: Main message text
            buttons: ``[{"id": ..., "title": ...}]``, at most 3
            header: Optional text header
            footer: Optional footer text
        """
        action = {
            "buttons": [
                {"type": "reply", "reply": {"id": b.get("id"), "title": b.get("title")}}
                for b in buttons
            ]
        }
        return self.build(
            MessageType.INTERACTIVE,
            {
                "type": InteractiveType.BUTTON.value,
                "header": header,
                "body": {"text": body},
                "footer": footer,
                "action": action,
            },
        )

    def list(
        self,
        body: str,
        button_text: str,
        sections: list[dict[str, Any]],
        *,
        header: str | None = None,
        footer: str | None = None,
    ) -> OutgoingMessageBase:
        """
        Build a list message.

        Args:
            body: Main message text
            button_text: Label of the button that opens the list
            sections: ``[{"title": ..., "rows": [{"id", "title", "description"}]}]``
        """
        return self.build(
            MessageType.INTERACTIVE,
            {
                "type": InteractiveType.LIST.value,
                "header": header,
                "body": {"text": body},
                "footer": footer,
                "action": {"button": button_text, "sections": sections},
            },
        )

    def cta_url(
        self,
        body: str,
        display_text: str,
        url: str,
        *,
        header: str | None = None,
        footer: str | None = None,
    ) -> OutgoingMessageBase:
        return self.build(
            MessageType.INTERACTIVE,
            {
                "type": InteractiveType.CTA_URL.value,
                "header": header,
                "body": {"text": body},
                "footer": footer,
                "action": {
                    "name": "cta_url",
                    "parameters": {"display_text": display_text, "url": url},
                },
            },
        )

    def flow(
        self,
        body: str,
        parameters: dict[str, Any],
        *,
        header: str | None = None,
        footer: str | None = None,
    ) -> OutgoingMessageBase:
        """
        Build a message that opens a WhatsApp Flow.

        Args:
            body: Main message text
            parameters: Flow action parameters; ``flow_id`` or ``flow_name``
                is required, plus ``flow_cta``, ``flow_message_version``...
        """
        return self.build(
            MessageType.INTERACTIVE,
            {
                "type": InteractiveType.FLOW.value,
                "header": header,
                "body": {"text": body},
                "footer": footer,
                "action": {"name": "flow", "parameters": parameters},
            },
        )

    def template(
        self,
        name: str,
        language_code: str,
        components: list[dict[str, Any]] | None = None,
    ) -> OutgoingMessageBase:
        return self.build(
            MessageType.TEMPLATE,
            {"name": name, "language": {"code": language_code}, "components": components},
        )

    def location(
        self,
        latitude: float,
        longitude: float,
        name: str | None = None,
        address: str | None = None,
    ) -> OutgoingMessageBase:
        return self.build(
            MessageType.LOCATION,
            {
                "latitude": latitude,
                "longitude": longitude,
                "name": name,
                "address": address,
            },
        )

    def contacts(self, contacts: list[dict[str, Any]]) -> OutgoingMessageBase:
        return self.build(MessageType.CONTACTS, {"contacts": contacts})
