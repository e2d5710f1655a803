"""Tests for styled caption parsing and entity rendering."""
import pytest
from telethon.tl import types
from tgpush.errors import StyleError
from tgpush.models import CaptionSegment, Style
from tgpush.telegram.styling import parse_styled, render


class TestParse:

    def test_code(self):
        assert parse_styled({"style": "code", "text": "x"}) == CaptionSegment(Style.CODE, "x")

    def test_keys_and_style_are_case_insensitive(self):
        assert parse_styled({"Style": "BOLD", "Text": "x"}).style == Style.BOLD

    def test_missing_style_is_plain(self):
        assert parse_styled({"text": "x"}).style == Style.PLAIN

    def test_number_text(self):
        assert parse_styled({"style": "italic", "text": 42}).text == "42"

    def test_pre_language(self):
        segment = parse_styled({"style": "pre", "text": "x = 1", "language": "python"})
        assert segment.language == "python"

    def test_unknown_style(self):
        with pytest.raises(StyleError, match="unknown style"):
            parse_styled({"style": "blink", "text": "x"})

    def test_text_url_needs_url(self):
        with pytest.raises(StyleError, match="url"):
            parse_styled({"style": "text_url", "text": "x"})


class TestRender:

    def test_plain_only(self):
        text, entities = render([CaptionSegment(Style.PLAIN, "hello")])
        assert text == "hello"
        assert entities == []

    def test_offsets_are_utf16(self):
        text, entities = render([
            CaptionSegment(Style.PLAIN, "\U0001F600 "),
            CaptionSegment(Style.CODE, "abc"),
        ])
        assert text == "\U0001F600 abc"
        assert len(entities) == 1
        assert isinstance(entities[0], types.MessageEntityCode)
        assert (entities[0].offset, entities[0].length) == (3, 3)

    def test_empty_segments_are_skipped(self):
        text, entities = render([
            CaptionSegment(Style.BOLD, ""),
            CaptionSegment(Style.TEXT_URL, "site", url="https://example.com"),
        ])
        assert text == "site"
        assert len(entities) == 1
        assert entities[0].url == "https://example.com"
        assert entities[0].offset == 0

    def test_default_caption_shape(self):
        text, entities = render([
            CaptionSegment(Style.CODE, "clip"),
            CaptionSegment(Style.PLAIN, " - "),
            CaptionSegment(Style.CODE, "video/mp4"),
        ])
        assert text == "clip - video/mp4"
        assert [(e.offset, e.length) for e in entities] == [(0, 4), (7, 9)]
