"""Tests for capsule.tools.sanitize."""
import logging

import pytest

from capsule.tools.sanitize import sanitize_filename, sanitize_text, unescape_text


def test_sanitize_text_escapes_markup() -> None:
    assert sanitize_text("<b>Tom & Jerry</b>") == "&lt;b&gt;Tom &amp; Jerry&lt;/b&gt;"


def test_sanitize_text_leaves_quotes_and_cyrillic() -> None:
    assert sanitize_text('Он сказал "привет"') == 'Он сказал "привет"'


def test_sanitize_text_is_idempotent() -> None:
    once = sanitize_text("a < b & c")
    assert sanitize_text(once) == once
    assert unescape_text(once) == "a < b & c"


@pytest.mark.parametrize("value", [None, 42, ["x"]])
def test_sanitize_text_non_string(value) -> None:
    assert sanitize_text(value) == ""


@pytest.mark.parametrize("value", ["../etc/passwd", "photos/../../x.png", "..\\secret.txt"])
def test_sanitize_filename_rejects_traversal(value: str, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="capsule.tools.sanitize"):
        assert sanitize_filename(value) == ""
    assert "unsafe filename" in caplog.text


def test_sanitize_filename_preserves_name() -> None:
    assert sanitize_filename("05_мем (копия).png") == "05_мем (копия).png"
    assert sanitize_filename("file..name.txt") == "file..name.txt"


def test_sanitize_filename_strips_line_breaks() -> None:
    assert sanitize_filename("a\r\nb.txt") == "ab.txt"


def test_sanitize_filename_non_string() -> None:
    assert sanitize_filename(None) == ""
