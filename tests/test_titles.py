"""Tests for title heuristics and fallback summaries."""

import pytest

from keepson.summaries import fallback_summary, summarize_record
from keepson.titles import (
    derive_title,
    title_from_filename,
    title_from_text,
    title_from_url,
    truncate_title,
)


class TestTitles:
    """Title derivation for untitled records."""

    @pytest.mark.parametrize("filename,expected", [
        ("my_holiday-photo.jpg", "my holiday photo"),
        ("Voice Memo 12.m4a", "Voice Memo 12"),
        ("__.png", "Photo"),
    ])
    def test_from_filename(self, filename, expected):
        assert title_from_filename(filename, "image") == expected

    @pytest.mark.parametrize("url,expected", [
        ("https://www.example.com/article?id=1", "example.com"),
        ("http://blog.example.org", "blog.example.org"),
        ("example.net/path", "example.net"),
    ])
    def test_from_url(self, url, expected):
        assert title_from_url(url) == expected

    def test_from_malformed_url(self):
        """An unparseable netloc falls back to the host pattern."""
        assert title_from_url("http://[oops") == "[oops"

    def test_malformed_link_still_saved(self, temp_config):
        from keepson import core

        record_id = core.add_record(owner="alice", type="link", content="http://[oops", config=temp_config)

        assert core.get_record("alice", record_id, config=temp_config).title

    def test_from_text_first_sentence(self):
        assert title_from_text("Remember the milk! And eggs.") == "Remember the milk"

    def test_from_text_too_short(self):
        assert title_from_text("Hi. Long second sentence here.") == "Note"

    def test_from_text_too_long(self):
        assert title_from_text("word " * 30, "link") == "Link"

    def test_truncate(self):
        title = truncate_title("x" * 150)

        assert len(title) == 100
        assert title.endswith("...")

    def test_derive_prefers_file_name(self):
        assert derive_title("video", "ignored text here", "clip_01.mp4") == "clip 01"

    @pytest.mark.parametrize("record_type,expected", [
        ("note", "Note"),
        ("image", "Photo"),
        ("audio", "Audio Recording"),
        ("video", "Video Recording"),
        ("link", "Link"),
    ])
    def test_derive_defaults(self, record_type, expected):
        assert derive_title(record_type) == expected


class TestFallbackSummary:
    """Deterministic summaries when no LLM is available."""

    def test_first_paragraph(self):
        assert fallback_summary("One.\n\nTwo.", "note") == "SUMMARY: One."

    def test_long_paragraph_truncated(self):
        summary = fallback_summary("a" * 250, "link")

        assert summary == "SUMMARY: " + "a" * 200 + "..."

    @pytest.mark.parametrize("content,record_type,expected", [
        ("", "note", "Note content saved"),
        ("   ", "link", "Link saved"),
        ("", "image", "Image file uploaded"),
        ("ignored", "video", "Video file uploaded"),
    ])
    def test_placeholders(self, content, record_type, expected):
        assert fallback_summary(content, record_type) == expected

    def test_summarize_without_llm(self, temp_config):
        assert summarize_record("Hello there", "note", temp_config) == "SUMMARY: Hello there"
