"""
Unit tests for the storage key naming policy.
"""

import re

from src.core.images.naming import (
    file_extension,
    generate_object_key,
    replace_extension,
    sanitize_filename,
)


class TestDefaultMode:
    """Timestamp-prefixed, sanitized names."""

    def test_spaces_become_underscores(self):
        """'a b.png' at a fixed time T becomes 'T_a_b.png'."""
        assert generate_object_key("a b.png", now_ms=1700000000123) == "1700000000123_a_b.png"

    def test_only_alnum_dot_and_dash_survive(self):
        """Every other character becomes an underscore."""
        assert sanitize_filename("héllo (1)+final-v2.JPG") == "h_llo__1__final-v2.JPG"

    def test_uses_current_time_when_not_given(self):
        """The timestamp defaults to now."""
        key = generate_object_key("photo.png")
        assert re.fullmatch(r"\d{13}_photo\.png", key)


class TestRandomMode:
    """Random hex names keep only the extension."""

    def test_key_is_32_hex_chars_plus_extension(self):
        """Random keys are 128 bits of hex."""
        key = generate_object_key("My Holiday.webp", use_random_name=True)
        assert re.fullmatch(r"[0-9a-f]{32}\.webp", key)

    def test_two_calls_differ(self):
        """Random keys do not repeat."""
        keys = {generate_object_key("x.png", use_random_name=True) for _ in range(50)}
        assert len(keys) == 50

    def test_name_without_extension_gets_no_trailing_dot(self):
        """No extension means no dot."""
        key = generate_object_key("README", use_random_name=True)
        assert re.fullmatch(r"[0-9a-f]{32}", key)


class TestExtensions:
    """Tests for extension helpers."""

    def test_replace_swaps_last_extension(self):
        """Only the last extension is replaced."""
        assert replace_extension("archive.tar.png", "webp") == "archive.tar.webp"

    def test_replace_appends_when_missing(self):
        """A name without extension gets one appended."""
        assert replace_extension("scan", "png") == "scan.png"

    def test_file_extension(self):
        """The extension is the text after the last dot."""
        assert file_extension("a.b.gif") == "gif"
        assert file_extension("noext") == ""
