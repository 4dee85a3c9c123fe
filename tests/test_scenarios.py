"""
Scenario tests — End-to-end behavior of one voyage store

Walks the observe -> seal cycle through the public facade, checking the
properties callers rely on:
- one slate row per target, latest payload wins
- identical bytes stored once, whatever target they came from
- sealing moves exactly the slate into one entry's bearing
"""

import pytest

from helm.core.action import Log
from helm.core.errors import IntegrityViolation
from helm.core.target import FileContents


F1 = FileContents(paths=["f1"])
F2 = FileContents(paths=["f2"])


def _rows(store, table):
    return store.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestScenarios:
    def test_observe_then_seal(self, store):
        """One observation sealed under one entry."""
        entry = store.observe(F1, {"a": 1})
        assert [e.target for e in store.slate.list()] == [F1]

        result = store.seal("alice", Log(status="recorded state"), "checkpoint", "human", "manual")

        assert store.logbook.count() == 1
        bearing = store.logbook.bearing(result.entry_id)
        assert [(o.target, o.artifact_hash) for o in bearing] == [(F1, entry.artifact_hash)]
        assert store.slate.count() == 0

    def test_reobserve_before_seal(self, store):
        """Second payload replaces the first on the slate; the first artifact stays."""
        first = store.observe(F1, {"a": 1})
        second = store.observe(F1, {"a": 2})

        entries = store.slate.list()
        assert len(entries) == 1
        assert entries[0].artifact_hash == second.artifact_hash
        assert store.artifacts.get_json(first.artifact_hash) == {"a": 1}
        referenced = store.conn.execute(
            """SELECT COUNT(*) FROM slate WHERE artifact_hash = :h""", {"h": first.artifact_hash}
        ).fetchone()[0]
        assert referenced == 0

    def test_erase_then_seal(self, store):
        """Only what remains on the slate is sealed."""
        store.observe(F1, b"one")
        store.observe(F2, b"two")
        store.slate.erase(F1)

        result = store.seal("alice", Log(status="x"), "after erase", "human", "manual")

        assert [o.target for o in store.logbook.bearing(result.entry_id)] == [F2]

    def test_seal_empty_slate(self, store):
        """An entry with no bearing is valid."""
        result = store.seal("alice", Log(status="starting"), "No observations", "human", "manual")

        assert store.logbook.count() == 1
        assert store.logbook.bearing(result.entry_id) == []

    def test_same_bytes_two_targets(self, store):
        """Dedup across targets: one artifact, two slate rows."""
        a = store.observe(F1, b"identical")
        b = store.observe(F2, b"identical")

        assert _rows(store, "artifacts") == 1
        assert store.slate.count() == 2
        assert a.artifact_hash == b.artifact_hash


class TestProperties:
    """Properties that hold across sequences of operations."""

    @pytest.mark.parametrize("payloads", [
        [b"a"],
        [b"a", b"b"],
        [b"a", b"b", b"a"],
        [{"x": 1}, {"x": 1}, {"x": 2}],
    ])
    def test_last_observation_wins(self, store, payloads):
        for payload in payloads:
            last = store.observe(F1, payload)

        assert store.slate.count() == 1
        assert store.slate.get(F1).artifact_hash == last.artifact_hash

    def test_erase_is_idempotent(self, store):
        store.observe(F2, b"two")
        before = store.slate.list()

        store.slate.erase(F1)
        store.slate.erase(F1)

        assert store.slate.list() == before

    def test_no_dangling_references(self, store):
        entry = store.observe(F1, b"one")
        store.seal("alice", Log(status="x"), "sealed", "human", "manual")
        store.observe(F2, b"two")

        orphans = store.conn.execute(
            """SELECT COUNT(*) FROM (
                   SELECT artifact_hash FROM slate
                   UNION ALL SELECT artifact_hash FROM bearing_observations
               ) WHERE artifact_hash NOT IN (SELECT hash FROM artifacts)"""
        ).fetchone()[0]
        assert orphans == 0

        for artifact_hash in (entry.artifact_hash, store.slate.get(F2).artifact_hash):
            with pytest.raises(IntegrityViolation):
                store.artifacts.jettison(artifact_hash)

    def test_full_cycle_with_compaction(self, store):
        """Observe, seal, reduce the sealed payload, and still read its summary."""
        entry = store.observe(F1, {"diff": "+" * 2000})
        result = store.seal("alice", Log(status="reviewed"), "Reviewed the diff", "agent", "model")
        summary = store.artifacts.reduce(entry.artifact_hash, {"summary": "2000 additions"}, "model")

        observation = store.logbook.bearing(result.entry_id)[0]
        readable = store.artifacts.resolve(observation.artifact_hash)
        assert readable == summary
        assert store.artifacts.get_json(readable) == {"summary": "2000 additions"}
