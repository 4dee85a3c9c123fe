"""
Tests for Formatters — Text utilities and one-line renderings
"""

from datetime import datetime, timedelta, timezone

import pytest

from helm.core.action import Comment, Log
from helm.core.logbook import BearingObservation, LogbookEntry
from helm.core.slate import SlateEntry
from helm.core.target import FileContents, GitHubPullRequest
from helm.core.voyage import Voyage, VoyageStatus
from helm.presentation.formatters import (
    format_logbook_entry, format_size, format_slate_entry, format_timestamp,
    format_voyage, short_hash, truncate,
)
from helm.presentation.symbols import ASCII


def _ago(**delta):
    return (datetime.now(timezone.utc) - timedelta(**delta)).isoformat()


HASH = "ab" * 32


class TestTextUtilities:
    def test_truncate_short(self):
        assert truncate("Short", 50) == "Short"

    def test_truncate_long(self):
        assert truncate("x" * 20, 10) == "x" * 7 + "..."

    def test_truncate_full(self):
        assert truncate("x" * 20, 10, full=True) == "x" * 20

    def test_truncate_empty(self):
        assert truncate(None) == ""

    def test_short_hash(self):
        assert short_hash(HASH) == HASH[:12]

    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5.0 MB"),
        (3 * 1024 ** 4, "3072.0 GB"),
    ])
    def test_format_size(self, size, expected):
        assert format_size(size) == expected


class TestFormatTimestamp:
    def test_just_now(self):
        assert format_timestamp(_ago(seconds=5)) == "just now"

    def test_minutes(self):
        assert format_timestamp(_ago(minutes=23)) == "23m ago"

    def test_hours(self):
        assert format_timestamp(_ago(hours=5)) == "5h ago"

    def test_days(self):
        assert format_timestamp(_ago(days=3)) == "3d ago"

    def test_old_dates_show_month(self):
        assert format_timestamp("2020-01-15T10:00:00+00:00") == "Jan 15"

    def test_zulu_suffix(self):
        assert format_timestamp("2020-01-15T10:00:00Z") == "Jan 15"

    def test_future_is_just_now(self):
        future = (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()
        assert format_timestamp(future) == "just now"

    @pytest.mark.parametrize("value", ["", "yesterday", None])
    def test_invalid(self, value):
        assert format_timestamp(value) == "unknown"


class TestDomainFormatting:
    def test_active_voyage(self):
        voyage = Voyage(id="3f2a9c1e-0000-4000-8000-000000000000", intent="Fix login",
                        created_at=_ago(hours=2), status=VoyageStatus.ACTIVE)
        assert format_voyage(ASCII, voyage) == "* [3f2a9c1e] Fix login (2h ago)"

    def test_ended_voyage_shows_status(self):
        voyage = Voyage(id="3f2a9c1e-0000-4000-8000-000000000000", intent="Fix login",
                        created_at=_ago(hours=2), status=VoyageStatus.ENDED,
                        ended_at=_ago(hours=1), ended_status="merged")
        line = format_voyage(ASCII, voyage)
        assert line.startswith("o [3f2a9c1e]")
        assert line.endswith("-> merged")

    def test_intent_sanitized(self):
        voyage = Voyage(id="3f2a9c1e-0000-4000-8000-000000000000", intent="bad\x1b[2Jintent",
                        created_at=_ago(hours=2), status=VoyageStatus.ACTIVE)
        assert "\x1b" not in format_voyage(ASCII, voyage)

    def test_slate_entry(self):
        entry = SlateEntry(target=FileContents(paths=["src/main.rs"]), artifact_hash=HASH,
                           observed_at=_ago(minutes=5))
        assert format_slate_entry(ASCII, entry) == f"~ file src/main.rs  {HASH[:12]}  (5m ago)"

    def test_logbook_entry_with_bearing(self):
        entry = LogbookEntry(
            id=3, recorded_at=_ago(hours=1), identity="alice",
            action=Comment(number=12, target="pullRequest"), summary="Asked for a smaller diff",
            role="human", method="manual",
            bearing=[
                BearingObservation(3, FileContents(paths=["src/lib.rs"]), HASH, _ago(hours=2)),
                BearingObservation(3, GitHubPullRequest(number=12), HASH, _ago(hours=2)),
            ],
        )
        lines = format_logbook_entry(ASCII, entry)

        assert lines[0] == "[M] #3 alice (human/manual) commented on PR #12 (1h ago)"
        assert lines[1] == "    Asked for a smaller diff"
        assert lines[2].startswith("    |- @ file src/lib.rs")
        assert lines[3].startswith("    `- @ PR #12")

    def test_log_entry_marker(self):
        entry = LogbookEntry(id=1, recorded_at=_ago(minutes=1), identity="bot",
                             action=Log(status="idle"), summary="s", role="agent", method="model")
        assert format_logbook_entry(ASCII, entry)[0].startswith("[L] #1 bot (agent/model) logged: idle")
