"""Tests for form data sanitization."""

import pytest

from flyouts.base.errors import CallbackFailure
from flyouts.fields import Sanitizer, build_field, normalize_fields
from flyouts.fields.sanitizer import (
    sanitize_email,
    sanitize_feature_list,
    sanitize_hex_color,
    sanitize_key,
    sanitize_key_value_list,
    sanitize_line_items,
    sanitize_number,
    sanitize_text_field,
    sanitize_textarea_field,
    sanitize_toggle,
    sanitize_url,
)


class TestFieldSanitizers:
    """Test the individual sanitizing functions."""

    def test_text_strips_tags_and_whitespace(self):
        assert sanitize_text_field("  <b>Hello</b>   world ") == "Hello world"
        assert sanitize_text_field(None) == ""

    def test_textarea_keeps_line_breaks(self):
        assert sanitize_textarea_field("line one  \n<i>line</i> two") == "line one\nline two"

    def test_key(self):
        assert sanitize_key("My Key!") == "mykey"

    @pytest.mark.parametrize(
        "value, expected",
        [("alice@example.com", "alice@example.com"), ("not-an-email", ""), (None, "")],
    )
    def test_email(self, value, expected):
        assert sanitize_email(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("https://example.com/a b", "https://example.com/ab"),
            ("example.com", "http://example.com"),
            ("javascript:alert(1)", ""),
            ("/wp-admin", "/wp-admin"),
        ],
    )
    def test_url(self, value, expected):
        assert sanitize_url(value) == expected

    def test_number(self):
        assert sanitize_number("42") == 42
        assert sanitize_number("4.5") == 4.5
        assert sanitize_number("abc") == 0

    def test_toggle(self):
        assert sanitize_toggle("on") == "1"
        assert sanitize_toggle("false") == "0"
        assert sanitize_toggle(0) == "0"

    def test_hex_color(self):
        assert sanitize_hex_color("#fff") == "#fff"
        assert sanitize_hex_color("red") == ""


class TestComponentSanitizers:
    """Test the data-bearing component sanitizers."""

    def test_line_items_drop_invalid_rows(self):
        items = [
            {"id": "3", "name": "<b>Shoe</b>", "quantity": "0", "price": "-1999"},
            {"id": 0, "name": "Ghost"},
            "junk",
        ]
        assert sanitize_line_items(items) == [{"id": 3, "name": "Shoe", "quantity": 1, "price": 1999}]

    def test_key_value_list(self):
        data = [{"key": "Color", "value": "Blue"}, {"key": "", "value": "x"}]
        assert sanitize_key_value_list(data) == [{"key": "color", "value": "Blue"}]

    def test_feature_list(self):
        assert sanitize_feature_list(["Fast", {"value": "Cheap"}, "  "]) == ["Fast", "Cheap"]


class TestSanitizer:
    """Test the Sanitizer tables."""

    def test_form_data_by_field_type(self):
        fields = normalize_fields(
            {
                "email": {"type": "email"},
                "count": {"type": "number"},
                "tags": {"type": "tags"},
                "notes": {"type": "textarea"},
            }
        )
        raw = {"email": "bad", "count": "7", "tags": ["<a>vip</a>", "new"], "notes": "a\nb", "id": "<i>12</i>"}

        assert Sanitizer().sanitize_form_data(raw, fields) == {
            "email": "",
            "count": 7,
            "tags": ["vip", "new"],
            "notes": "a\nb",
            "id": "12",
        }

    def test_field_callback_wins(self):
        field = build_field("code", {"type": "text", "sanitize_callback": str.upper})
        assert Sanitizer().sanitize_field("abc", field) == "ABC"

    def test_failing_field_callback_is_wrapped(self):
        def reject(value):
            raise ValueError("bad input")

        fields = normalize_fields({"code": {"type": "text", "sanitize_callback": reject}})
        with pytest.raises(CallbackFailure, match="bad input") as exc_info:
            Sanitizer().sanitize_form_data({"code": "abc"}, fields)
        assert exc_info.value.callback_name == "code.sanitize_callback"

    def test_register_and_unregister(self):
        sanitizer = Sanitizer()
        field = build_field("code", {"type": "text"})

        sanitizer.register_field_sanitizer("text", lambda value: "custom")
        assert sanitizer.sanitize_field("abc", field) == "custom"

        assert sanitizer.unregister_field_sanitizer("text")
        assert not sanitizer.unregister_field_sanitizer("text")
        assert sanitizer.sanitize_field("<b>abc</b>", field) == "abc"

    def test_registration_is_per_instance(self):
        Sanitizer().register_field_sanitizer("email", lambda value: value)
        assert Sanitizer().sanitize_field("bad", build_field("e", {"type": "email"})) == ""

    def test_unknown_component_falls_back_to_text(self):
        field = build_field("summary", {"type": "price_summary"})
        sanitizer = Sanitizer()
        assert sanitizer.sanitize_field("<b>$5</b>", field) == "$5"
        assert sanitizer.sanitize_field(["<b>a</b>"], field) == ["a"]

    def test_field_keyed_by_name(self):
        fields = normalize_fields({"key": {"type": "number", "name": "qty"}})
        assert Sanitizer().sanitize_form_data({"qty": "3"}, fields) == {"qty": 3}
