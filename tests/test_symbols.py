"""
Tests for Symbols — Visual vocabulary validation

Tests Unicode/ASCII detection, status markers and safe output.
"""

import io
from dataclasses import fields
from unittest.mock import patch

from helm.presentation.symbols import (
    get_symbols, supports_unicode, UNICODE, ASCII,
    symbol_for_status, sanitize_control_chars, safe_print,
)


class TestSymbolSets:
    """Test symbol set completeness."""

    def test_every_symbol_defined(self):
        for symbol_set in (UNICODE, ASCII):
            for f in fields(symbol_set):
                assert getattr(symbol_set, f.name), f.name

    def test_ascii_is_ascii(self):
        for f in fields(ASCII):
            assert getattr(ASCII, f.name).isascii(), f.name

    def test_artifact_states_distinct(self):
        for symbol_set in (UNICODE, ASCII):
            states = {symbol_set.stowed, symbol_set.reduced, symbol_set.jettisoned}
            assert len(states) == 3


class TestGetSymbols:
    def test_explicit_preference(self):
        assert get_symbols("unicode") is UNICODE
        assert get_symbols("ascii") is ASCII

    def test_ascii_only_env(self, monkeypatch):
        monkeypatch.setenv("HELM_ASCII_ONLY", "1")
        assert supports_unicode() is False
        assert get_symbols("auto") is ASCII

    def test_unicode_env(self, monkeypatch):
        monkeypatch.setenv("HELM_UNICODE", "true")
        assert supports_unicode() is True

    def test_cp_encoding_is_ascii(self, monkeypatch):
        monkeypatch.setenv("LANG", "en_US.UTF-8")
        with patch("helm.presentation.symbols.sys.stdout", io.TextIOWrapper(io.BytesIO(), encoding="cp1252")):
            assert supports_unicode() is False


class TestSymbolForStatus:
    def test_known_statuses(self):
        assert symbol_for_status(ASCII, "active") == ASCII.active
        assert symbol_for_status(ASCII, "reduced") == ASCII.reduced
        assert symbol_for_status(UNICODE, "jettisoned") == UNICODE.jettisoned

    def test_unknown_falls_back_to_bullet(self):
        assert symbol_for_status(ASCII, "sideways") == ASCII.bullet


class TestSafeOutput:
    def test_strips_escape_sequences(self):
        assert sanitize_control_chars("ok\x1b[31mred\x00") == "ok[31mred"

    def test_keeps_whitespace(self):
        assert sanitize_control_chars("a\tb\nc\r") == "a\tb\nc\r"

    def test_empty(self):
        assert sanitize_control_chars("") == ""

    def test_safe_print_falls_back_to_ascii(self):
        buffer = io.BytesIO()
        stream = io.TextIOWrapper(buffer, encoding="ascii")
        safe_print("done → next ✓", file=stream)
        stream.flush()
        assert buffer.getvalue() == b"done -> next [+]\n"

    def test_safe_print_last_resort(self):
        buffer = io.BytesIO()
        stream = io.TextIOWrapper(buffer, encoding="ascii")
        safe_print("café", file=stream)
        stream.flush()
        assert buffer.getvalue() == b"caf?\n"
