"""
Tests for Schema — Connection setup, transactions, and structural guards

Tests verify:
- Required pragmas on every connection (foreign keys, WAL)
- Version marker written at creation and checked on open
- Transactions commit atomically and roll back on error
- Triggers refuse history edits, artifact deletion and lifecycle reversal
- Lock contention surfaces as Contention
"""

import sqlite3

import pytest

from helm.core.errors import Contention, IntegrityViolation, SchemaVersionMismatch
from helm.core.schema import (
    SCHEMA_VERSION, check_version, connect, schema_version, text_value,
    transaction, translate_errors,
)


class TestConnection:
    """Every connection is configured the same way."""

    def test_foreign_keys_enabled(self, store):
        assert store.conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_wal_journal_mode(self, store):
        assert store.conn.execute("PRAGMA journal_mode").fetchone()[0].lower() == "wal"

    def test_autocommit_mode(self, store):
        assert store.conn.isolation_level is None
        assert not store.conn.in_transaction


class TestVersionMarker:
    def test_marker_written_on_create(self, store):
        assert schema_version(store.conn) == SCHEMA_VERSION

    def test_mismatch_raises(self, tmp_path):
        conn = connect(tmp_path / "other.sqlite")
        try:
            conn.execute("PRAGMA user_version = 99")
            with pytest.raises(SchemaVersionMismatch) as exc:
                check_version(conn)
            assert exc.value.expected == SCHEMA_VERSION
            assert exc.value.found == 99
        finally:
            conn.close()

    def test_open_refuses_other_version(self, helm_factory, store):
        store.conn.execute("PRAGMA user_version = 2")
        store.close()

        with pytest.raises(SchemaVersionMismatch):
            helm_factory.storage.open(store.voyage_id)


class TestTransaction:
    """transaction() is all-or-nothing."""

    def test_commits_on_success(self, store):
        with transaction(store.conn):
            store.artifacts.put(b"one")
            store.artifacts.put(b"two")

        assert store.artifacts.stats()["total"] == 2
        assert not store.conn.in_transaction

    def test_rolls_back_on_error(self, store):
        with pytest.raises(RuntimeError):
            with transaction(store.conn):
                store.artifacts.put(b"one")
                raise RuntimeError("boom")

        assert store.artifacts.stats()["total"] == 0
        assert not store.conn.in_transaction

    def test_integrity_error_translated(self, store):
        with pytest.raises(IntegrityViolation):
            with transaction(store.conn):
                store.conn.execute(
                    "INSERT INTO slate (target, artifact_hash, observed_at) VALUES ('t', ?, 'now')",
                    ("0" * 64,)
                )


class TestStructuralGuards:
    """Triggers and constraints hold even against raw SQL."""

    def test_logbook_rows_cannot_be_updated(self, helm_env):
        conn = helm_env.sample.conn
        with pytest.raises(IntegrityViolation, match="append-only"):
            with translate_errors():
                conn.execute("UPDATE logbook SET summary = 'rewritten'")

    def test_logbook_rows_cannot_be_deleted(self, helm_env):
        conn = helm_env.sample.conn
        with pytest.raises(IntegrityViolation, match="append-only"):
            with translate_errors():
                conn.execute("DELETE FROM logbook")

    def test_bearings_cannot_be_deleted(self, helm_env):
        conn = helm_env.sample.conn
        with pytest.raises(IntegrityViolation, match="append-only"):
            with translate_errors():
                conn.execute("DELETE FROM bearing_observations")

    def test_artifacts_cannot_be_deleted(self, store):
        artifact_hash = store.artifacts.put(b"payload")
        with pytest.raises(IntegrityViolation, match="never deleted"):
            with translate_errors():
                store.conn.execute("DELETE FROM artifacts WHERE hash = ?", (artifact_hash,))

    def test_payload_cannot_be_swapped(self, store):
        artifact_hash = store.artifacts.put(b"payload")
        with pytest.raises(IntegrityViolation, match="immutable"):
            with translate_errors():
                store.conn.execute("UPDATE artifacts SET data = x'00' WHERE hash = ?", (artifact_hash,))

    def test_lifecycle_cannot_move_backwards(self, store):
        artifact_hash = store.artifacts.put(b"payload")
        store.artifacts.jettison(artifact_hash)
        with pytest.raises(IntegrityViolation, match="backwards"):
            with translate_errors():
                store.conn.execute(
                    "UPDATE artifacts SET status = 'reduced' WHERE hash = ?", (artifact_hash,)
                )

    def test_stowed_requires_data(self, store):
        with pytest.raises(IntegrityViolation):
            with translate_errors():
                store.conn.execute(
                    """INSERT INTO artifacts (hash, data, size, status, created_at)
                       VALUES (?, NULL, 0, 'stowed', 'now')""",
                    ("a" * 64,)
                )

    def test_ended_voyage_needs_ended_at(self, store):
        with pytest.raises(IntegrityViolation):
            with translate_errors():
                store.conn.execute("UPDATE voyage SET status = 'ended'")


class TestContention:
    def test_held_lock_raises_contention(self, helm_factory, store):
        other = connect(store.path, busy_timeout_ms=50)
        store.conn.execute("PRAGMA busy_timeout = 50")
        try:
            other.execute("BEGIN IMMEDIATE")
            with pytest.raises(Contention):
                with transaction(store.conn):
                    pass
            other.execute("ROLLBACK")
        finally:
            other.close()

    def test_other_operational_errors_pass_through(self, store):
        with pytest.raises(sqlite3.OperationalError):
            with translate_errors():
                store.conn.execute("SELECT * FROM no_such_table")


class TestTextValue:
    def test_accepts_enum_and_text(self):
        from helm.core.action import Role
        assert text_value(Role.AGENT, "role") == "agent"
        assert text_value("human", "role") == "human"

    def test_rejects_blank(self):
        with pytest.raises(ValueError):
            text_value(" ", "identity")
