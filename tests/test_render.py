"""Tests for mail_enrich.render."""

from __future__ import annotations

import base64

import markdown
import pytest

from tests.conftest import _build_html_email, _build_plain_email, parse

from mail_enrich.errors import MissingMessageIdError, MissingTextBodyError
from mail_enrich.parser import ParsedMessage
from mail_enrich.render import (
    GENERATOR,
    encode_message_id,
    get_pixel_element,
    pixel_url,
    pre_markdown,
    render_html,
    text_body,
    text_body_as_html,
)


class TestPreMarkdown:
    def test_appends_two_spaces_per_line(self):
        assert pre_markdown("line one\nline two") == "line one  \nline two  \n"

    def test_trailing_newline_not_doubled(self):
        assert pre_markdown("a\nb\n") == "a  \nb  \n"

    def test_crlf_lines(self):
        assert pre_markdown("a\r\nb") == "a  \nb  \n"

    def test_blank_lines_kept(self):
        assert pre_markdown("a\n\nb") == "a  \n  \nb  \n"

    def test_empty(self):
        assert pre_markdown("") == ""


class TestRenderHtml:
    def test_hard_line_breaks(self):
        html = render_html("line one\nline two")
        assert "line one<br />" in html
        assert markdown.markdown("line one  \nline two  \n") in html

    def test_template(self):
        html = render_html("body")
        assert html.startswith("<html>")
        assert f'<meta name="generator" content="{GENERATOR}" />' in html
        assert "code {" in html
        assert "blockquote {" in html
        assert "white-space: normal" in html

    def test_append_follows_body(self):
        html = render_html("body text", "<img alt='x' />")
        assert html.index("body text") < html.index("<img alt='x' />")

    def test_markdown_is_rendered(self):
        html = render_html("# Title\n\n> quoted")
        assert "<h1>Title</h1>" in html
        assert "<blockquote>" in html

    def test_deterministic(self):
        assert render_html("same\ntext", "x") == render_html("same\ntext", "x")


class TestTextBody:
    def test_first_text_body(self, example_message: ParsedMessage):
        assert text_body(example_message) == "line one\nline two"

    def test_missing_text_body(self):
        with pytest.raises(MissingTextBodyError):
            text_body(parse(_build_html_email()))

    def test_text_body_as_html(self, example_message: ParsedMessage):
        assert text_body_as_html(example_message) == render_html("line one\nline two")


class TestTrackingPixel:
    def test_encoding_is_url_safe_without_padding(self):
        encoded = encode_message_id("<abc123@example.com>")
        assert "=" not in encoded
        assert encoded == base64.urlsafe_b64encode(b"<abc123@example.com>").decode().rstrip("=")

    def test_url_safe_alphabet(self):
        # Standard base64 of this input contains both "+" and "/"
        assert base64.b64encode(b"??>>??") == b"Pz8+Pj8/"
        assert encode_message_id("??>>??") == "Pz8-Pj8_"
        assert "+" not in encode_message_id("??>>??")
        assert "/" not in encode_message_id("??>>??")

    def test_pixel_element(self, example_message: ParsedMessage):
        encoded = encode_message_id("<abc123@example.com>")
        element = get_pixel_element("https://t.example", example_message)
        assert f'src="https://t.example/image/{encoded}.gif"' in element
        assert 'alt="Open pixel"' in element
        assert "border: 0px; width: 0px" in element

    def test_deterministic(self, example_message: ParsedMessage):
        assert get_pixel_element("https://t.example", example_message) == get_pixel_element(
            "https://t.example", example_message
        )

    def test_one_character_changes_encoding(self):
        first = pixel_url("https://t.example", "<abc123@example.com>")
        second = pixel_url("https://t.example", "<abc124@example.com>")
        assert first != second

    def test_missing_message_id(self):
        message = parse(_build_plain_email(message_id=None))
        with pytest.raises(MissingMessageIdError):
            get_pixel_element("https://t.example", message)
