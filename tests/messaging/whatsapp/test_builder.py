"""
Test suite for the outgoing message builder and validator.
"""

import json

import pytest

from wabridge.core.errors import MessageValidationError
from wabridge.core.types import ErrorKind, InteractiveType, MessageType
from wabridge.messaging.whatsapp.builder import MessageBuilder, build, validate
from wabridge.messaging.whatsapp.models import (
    ContactsMessage,
    DocumentMessage,
    InteractiveMessage,
    LocationMessage,
    TemplateMessage,
    TextMessage,
    parse_outgoing,
)

TO = "+15551234567"


def violation_fields(message_type, to, content, **kwargs) -> list[str]:
    with pytest.raises(MessageValidationError) as exc_info:
        build(message_type, to, content, **kwargs)
    assert exc_info.value.kind == ErrorKind.VALIDATION
    return exc_info.value.fields


def button_content(*titles: str) -> dict:
    return {
        "type": "button",
        "body": {"text": "Pick one"},
        "action": {
            "buttons": [
                {"type": "reply", "reply": {"id": f"b{i}", "title": title}}
                for i, title in enumerate(titles)
            ]
        },
    }


class TestTextMessages:
    """Test text building and recipient normalization."""

    def test_build_text(self):
        message = build("text", TO, {"text": "hi"})

        assert isinstance(message, TextMessage)
        assert message.type == "text"
        assert message.to == TO
        assert message.text.body == "hi"
        assert message.messaging_product == "whatsapp"
        assert message.recipient_type == "individual"

    def test_payload_shape(self):
        payload = build(MessageType.TEXT, TO, {"body": "hi"}).to_payload()

        assert payload == {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": TO,
            "type": "text",
            "text": {"body": "hi"},
        }

    def test_invalid_recipient(self):
        assert violation_fields("text", "not-a-phone", {"text": "hi"}) == ["to"]

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("15551234567", "+15551234567"),
            ("+1 (555) 123-4567", "+15551234567"),
            ("57.300.123.4567", "+573001234567"),
        ],
    )
    def test_recipient_is_normalized(self, raw, expected):
        assert build("text", raw, {"text": "hi"}).to == expected

    @pytest.mark.parametrize("raw", ["+0123456789", "12345", "+1234567890123456", ""])
    def test_recipient_out_of_range(self, raw):
        assert "to" in violation_fields("text", raw, {"text": "hi"})

    def test_recipient_with_non_ascii_digits(self):
        arabic_indic = "1٥٥٥١٢٣٤٥٦٧"

        assert violation_fields("text", arabic_indic, {"text": "hi"}) == ["to"]

    def test_empty_text(self):
        assert violation_fields("text", TO, {"text": "   "}) == ["text.body"]

    def test_text_limit(self):
        assert build("text", TO, {"text": "a" * 4096}).text.body == "a" * 4096
        assert violation_fields("text", TO, {"text": "a" * 4097}) == ["text.body"]

    def test_truncation_is_opt_in(self):
        message = build("text", TO, {"text": "a" * 5000}, truncate=True)

        assert len(message.text.body) == 4096
        assert message.text.body.endswith("...")

    def test_reply_context(self):
        message = build("text", TO, {"text": "hi"}, reply_to="wamid.ORIGINAL")

        assert message.context.message_id == "wamid.ORIGINAL"
        assert message.to_payload()["context"] == {"message_id": "wamid.ORIGINAL"}

    def test_empty_reply_id(self):
        assert violation_fields("text", TO, {"text": "hi"}, reply_to="") == [
            "context.message_id"
        ]

    def test_preview_url(self):
        payload = build("text", TO, {"text": "see https://x.io", "preview_url": True}).to_payload()

        assert payload["text"] == {"body": "see https://x.io", "preview_url": True}

    def test_all_violations_are_reported_together(self):
        fields = violation_fields("text", "bad", {"text": ""})

        assert fields == ["to", "text.body"]


class TestMediaMessages:
    """Test media rules."""

    def test_document_requires_filename(self):
        content = {"link": "https://example.com/y.pdf"}

        assert violation_fields("document", TO, content) == ["document.filename"]

        message = build("document", TO, {**content, "filename": "y.pdf"})
        assert isinstance(message, DocumentMessage)
        assert message.document.filename == "y.pdf"

    @pytest.mark.parametrize("media_type", ["image", "video", "audio", "sticker"])
    def test_id_or_link_required(self, media_type):
        assert violation_fields(media_type, TO, {}) == [f"{media_type}.id"]

    def test_media_by_id(self):
        payload = build("image", TO, {"id": "1234", "caption": "Look"}).to_payload()

        assert payload["image"] == {"id": "1234", "caption": "Look"}

    @pytest.mark.parametrize("link", ["ftp://example.com/a.png", "example.com/a.png", "/a.png"])
    def test_link_must_be_http(self, link):
        assert violation_fields("image", TO, {"link": link}) == ["image.link"]

    @pytest.mark.parametrize("media_type", ["audio", "sticker"])
    def test_caption_not_allowed(self, media_type):
        fields = violation_fields(media_type, TO, {"id": "1", "caption": "nope"})

        assert fields == [f"{media_type}.caption"]

    def test_caption_limit(self):
        assert violation_fields("video", TO, {"id": "1", "caption": "c" * 1025}) == [
            "video.caption"
        ]


class TestInteractiveMessages:
    """Test interactive rules."""

    def test_buttons(self):
        message = build("interactive", TO, button_content("Yes", "No"))

        assert isinstance(message, InteractiveMessage)
        assert message.interactive.type == InteractiveType.BUTTON
        assert len(message.interactive.action["buttons"]) == 2

    def test_too_many_buttons(self):
        fields = violation_fields("interactive", TO, button_content("A", "B", "C", "D"))

        assert fields == ["interactive.action.buttons"]

    def test_no_buttons(self):
        fields = violation_fields("interactive", TO, button_content())

        assert fields == ["interactive.action.buttons"]

    def test_button_title_limit(self):
        fields = violation_fields("interactive", TO, button_content("x" * 21))

        assert fields == ["interactive.action.buttons[0].reply.title"]

    def test_duplicate_button_ids(self):
        content = button_content("A", "B")
        content["action"]["buttons"][1]["reply"]["id"] = "b0"

        assert violation_fields("interactive", TO, content) == [
            "interactive.action.buttons[1].reply.id"
        ]

    def test_body_required(self):
        content = button_content("A")
        content["body"] = {"text": ""}

        assert violation_fields("interactive", TO, content) == ["interactive.body.text"]

    def test_unknown_interactive_type(self):
        content = button_content("A")
        content["type"] = "carousel"

        assert violation_fields("interactive", TO, content) == ["interactive.type"]

    def test_list_limits(self):
        rows = [{"id": f"r{i}", "title": f"Row {i}"} for i in range(11)]
        content = {
            "type": "list",
            "body": {"text": "Menu"},
            "action": {"button": "Open", "sections": [{"title": "All", "rows": rows}]},
        }

        assert violation_fields("interactive", TO, content) == [
            "interactive.action.sections[0].rows"
        ]

    def test_list_requires_button_and_sections(self):
        content = {"type": "list", "body": {"text": "Menu"}, "action": {}}

        assert violation_fields("interactive", TO, content) == [
            "interactive.action.button",
            "interactive.action.sections",
        ]

    def test_cta_url(self):
        builder = MessageBuilder(TO)

        message = builder.cta_url("Visit us", "Open", "https://example.com")

        assert message.interactive.action["parameters"]["url"] == "https://example.com"

    def test_cta_url_requires_valid_url(self):
        content = {
            "type": "cta_url",
            "body": {"text": "Visit"},
            "action": {
                "name": "cta_url",
                "parameters": {"display_text": "Open", "url": "not a url"},
            },
        }

        assert violation_fields("interactive", TO, content) == [
            "interactive.action.parameters.url"
        ]

    def test_flow_requires_id_or_name(self):
        content = {
            "type": "flow",
            "body": {"text": "Book"},
            "action": {"name": "flow", "parameters": {"flow_cta": "Start"}},
        }

        assert violation_fields("interactive", TO, content) == [
            "interactive.action.parameters.flow_id"
        ]

    def test_text_header_shorthand(self):
        content = {**button_content("A"), "header": "Welcome", "footer": "Reply below"}

        payload = build("interactive", TO, content).to_payload()

        assert payload["interactive"]["header"] == {"type": "text", "text": "Welcome"}
        assert payload["interactive"]["footer"] == {"text": "Reply below"}

    def test_invalid_header_type(self):
        content = {**button_content("A"), "header": {"type": "audio"}}

        assert violation_fields("interactive", TO, content) == ["interactive.header.type"]


class TestOtherMessages:
    """Test template, location and contacts rules."""

    def test_template(self):
        message = build(
            "template",
            TO,
            {"name": "order_update", "language": {"code": "en_US"}},
        )

        assert isinstance(message, TemplateMessage)
        assert message.template.language.code == "en_US"

    def test_template_requires_name_and_language(self):
        assert violation_fields("template", TO, {"language": {}}) == [
            "template.name",
            "template.language.code",
        ]

    def test_location(self):
        message = build("location", TO, {"latitude": 4.711, "longitude": -74.07})

        assert isinstance(message, LocationMessage)
        assert message.location.latitude == 4.711

    def test_location_ranges(self):
        assert violation_fields("location", TO, {"latitude": 91, "longitude": -181}) == [
            "location.latitude",
            "location.longitude",
        ]

    def test_contacts(self):
        cards = [{"name": {"formatted_name": "Jane Doe"}, "phones": [{"phone": TO}]}]

        message = build("contacts", TO, {"contacts": cards})

        assert isinstance(message, ContactsMessage)
        assert message.contacts[0]["name"]["formatted_name"] == "Jane Doe"

    def test_contacts_rules(self):
        assert violation_fields("contacts", TO, {"contacts": []}) == ["contacts"]
        assert violation_fields("contacts", TO, {"contacts": [{"name": {}}]}) == [
            "contacts[0].name.formatted_name"
        ]

    @pytest.mark.parametrize("message_type", ["fax", "reaction", "unknown"])
    def test_unknown_type(self, message_type):
        assert violation_fields(message_type, TO, {}) == ["type"]


class TestValidate:
    """Test the non-raising validator."""

    def test_valid_message(self):
        assert validate("text", TO, {"text": "hi"}) == []

    def test_returns_violations(self):
        violations = validate("document", "nope", {"id": "1"})

        assert [v.field for v in violations] == ["to", "document.filename"]
        assert all(v.message for v in violations)

    def test_content_must_be_a_mapping(self):
        assert [v.field for v in validate("text", TO, "hi")] == ["content"]


class TestMessageBuilder:
    """Test the per-recipient helpers."""

    def test_reply_to_is_chainable(self):
        message = MessageBuilder(TO).reply_to("wamid.1").text("Thanks!")

        assert message.context.message_id == "wamid.1"

    def test_media_helpers_pick_link_or_id(self):
        builder = MessageBuilder(TO)

        assert builder.image("https://example.com/a.png").image.link == "https://example.com/a.png"
        assert builder.audio("media-id").audio.id == "media-id"
        assert builder.document("media-id", "a.pdf").document.filename == "a.pdf"

    def test_buttons_helper(self):
        message = MessageBuilder(TO).buttons(
            "Continue?", [{"id": "yes", "title": "Yes"}, {"id": "no", "title": "No"}]
        )

        replies = [b["reply"]["id"] for b in message.interactive.action["buttons"]]
        assert replies == ["yes", "no"]

    def test_list_helper(self):
        message = MessageBuilder(TO).list(
            "Our menu",
            "View",
            [{"title": "Pizza", "rows": [{"id": "p1", "title": "Margherita"}]}],
        )

        assert message.interactive.type == InteractiveType.LIST

    def test_flow_helper(self):
        message = MessageBuilder(TO).flow(
            "Book a table", {"flow_id": "123", "flow_cta": "Book"}
        )

        assert message.interactive.action["parameters"]["flow_id"] == "123"

    def test_template_location_contacts_helpers(self):
        builder = MessageBuilder(TO)

        assert builder.template("hello_world", "en_US").template.name == "hello_world"
        assert builder.location(1.0, 2.0, name="HQ").location.name == "HQ"
        assert len(builder.contacts([{"name": {"formatted_name": "A"}}]).contacts) == 1

    def test_helpers_raise_on_violations(self):
        with pytest.raises(MessageValidationError) as exc_info:
            MessageBuilder("bad").sticker("https://example.com/s.webp")

        assert exc_info.value.field == "to"


class TestRoundTrip:
    """Test serialization back into the same model."""

    @pytest.mark.parametrize(
        ("message_type", "content"),
        [
            ("text", {"text": "hi", "preview_url": False}),
            ("document", {"link": "https://example.com/y.pdf", "filename": "y.pdf"}),
            ("interactive", button_content("Yes", "No")),
            (
                "template",
                {
                    "name": "order_update",
                    "language": {"code": "es"},
                    "components": [
                        {"type": "body", "parameters": [{"type": "text", "text": "42"}]}
                    ],
                },
            ),
            ("location", {"latitude": 10, "longitude": 20, "name": "Pin"}),
            ("contacts", {"contacts": [{"name": {"formatted_name": "Jane"}}]}),
        ],
    )
    def test_payload_json_round_trip(self, message_type, content):
        message = build(message_type, TO, content, reply_to="wamid.1")

        decoded = json.loads(json.dumps(message.to_payload()))

        assert parse_outgoing(decoded) == message
