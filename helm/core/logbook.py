"""
Logbook — Append-only history of committed decisions, with bearings

Each entry records who acted, what was done, why (summary), and the
provenance tags role and method. Its bearing is the set of
(target, artifact, observed_at) rows that were on the slate when it was
sealed.

Entries are never updated or deleted; triggers in the schema reject both.
Ids come from AUTOINCREMENT, so they only ever increase.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Tuple, Union

from .action import Action, parse_action
from .errors import LogbookEntryNotFound, StateError
from .schema import text_value, transaction, translate_errors, utc_now
from .slate import SlateEntry
from .target import Target, parse_target


logger = logging.getLogger(__name__)


@dataclass
class BearingObservation:
    logbook_id: int
    target: Target
    artifact_hash: str
    observed_at: str


@dataclass
class LogbookEntry:
    id: int
    recorded_at: str
    identity: str
    action: Action
    summary: str
    role: str
    method: str
    bearing: List[BearingObservation] = field(default_factory=list)


BearingRow = Union[SlateEntry, Tuple[Any, str, str]]


def _bearing_triple(row: BearingRow) -> Tuple[str, str, str]:
    if isinstance(row, SlateEntry):
        return row.key, row.artifact_hash, row.observed_at
    target, artifact_hash, observed_at = row
    return parse_target(target).key, artifact_hash, observed_at


class Logbook:
    """Logbook and bearing_observations access for one voyage connection."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def append(self, identity: str, action: Any, summary: str, role: Any, method: Any,
               bearing_rows: Iterable[BearingRow] = ()) -> int:
        """
        Append one entry and its bearing rows in a single transaction.

        A bearing row pointing at a missing artifact is an IntegrityViolation
        and nothing is written.
        """
        with transaction(self.conn):
            return self.record(identity, action, summary, role, method, bearing_rows)

    def record(self, identity: str, action: Any, summary: str, role: Any, method: Any,
               bearing_rows: Iterable[BearingRow] = ()) -> int:
        """
        Write an entry within the caller's open transaction. Returns the entry id.

        Outside a transaction the two inserts would commit separately, so the
        call is refused; use append() instead.
        """
        if not self.conn.in_transaction:
            raise StateError("logbook record requires an open transaction; use append")
        identity = text_value(identity, "identity")
        summary = text_value(summary, "summary")
        role = text_value(role, "role")
        method = text_value(method, "method")
        action_key = parse_action(action).key
        triples = [_bearing_triple(row) for row in bearing_rows]

        with translate_errors():
            cursor = self.conn.execute(
                """INSERT INTO logbook (recorded_at, identity, action, summary, role, method)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (utc_now(), identity, action_key, summary, role, method)
            )
            entry_id = cursor.lastrowid
            self.conn.executemany(
                """INSERT INTO bearing_observations (logbook_id, target, artifact_hash, observed_at)
                   VALUES (?, ?, ?, ?)""",
                [(entry_id, key, artifact_hash, observed_at)
                 for key, artifact_hash, observed_at in triples]
            )
        logger.debug("Logbook entry %d by %s with %d bearing rows", entry_id, identity, len(triples))
        return entry_id

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def entries(self, limit: Optional[int] = None, with_bearing: bool = False) -> List[LogbookEntry]:
        """Entries in append order. With `limit`, only the most recent ones."""
        with translate_errors():
            if limit is None:
                rows = self.conn.execute("SELECT * FROM logbook ORDER BY id").fetchall()
            else:
                rows = self.conn.execute(
                    "SELECT * FROM (SELECT * FROM logbook ORDER BY id DESC LIMIT ?) ORDER BY id",
                    (limit,)
                ).fetchall()
        entries = [self._to_entry(row) for row in rows]
        if with_bearing:
            for entry in entries:
                entry.bearing = self._bearing_rows(entry.id)
        return entries

    def entry(self, entry_id: int) -> LogbookEntry:
        """One entry with its bearing. Raises LogbookEntryNotFound."""
        with translate_errors():
            row = self.conn.execute("SELECT * FROM logbook WHERE id = ?", (entry_id,)).fetchone()
        if row is None:
            raise LogbookEntryNotFound(entry_id)
        entry = self._to_entry(row)
        entry.bearing = self._bearing_rows(entry_id)
        return entry

    def bearing(self, entry_id: int) -> List[BearingObservation]:
        """Observations sealed with an entry. Raises LogbookEntryNotFound."""
        with translate_errors():
            exists = self.conn.execute(
                "SELECT 1 FROM logbook WHERE id = ?", (entry_id,)
            ).fetchone()
        if exists is None:
            raise LogbookEntryNotFound(entry_id)
        return self._bearing_rows(entry_id)

    def count(self) -> int:
        with translate_errors():
            return self.conn.execute("SELECT COUNT(*) FROM logbook").fetchone()[0]

    def latest(self) -> Optional[LogbookEntry]:
        with translate_errors():
            row = self.conn.execute("SELECT * FROM logbook ORDER BY id DESC LIMIT 1").fetchone()
        if row is None:
            return None
        entry = self._to_entry(row)
        entry.bearing = self._bearing_rows(entry.id)
        return entry

    def _bearing_rows(self, entry_id: int) -> List[BearingObservation]:
        with translate_errors():
            rows = self.conn.execute(
                """SELECT logbook_id, target, artifact_hash, observed_at
                   FROM bearing_observations WHERE logbook_id = ?
                   ORDER BY observed_at, target""",
                (entry_id,)
            ).fetchall()
        return [
            BearingObservation(
                logbook_id=row['logbook_id'],
                target=Target.from_key(row['target']),
                artifact_hash=row['artifact_hash'],
                observed_at=row['observed_at'],
            )
            for row in rows
        ]

    @staticmethod
    def _to_entry(row: sqlite3.Row) -> LogbookEntry:
        return LogbookEntry(
            id=row['id'],
            recorded_at=row['recorded_at'],
            identity=row['identity'],
            action=Action.from_key(row['action']),
            summary=row['summary'],
            role=row['role'],
            method=row['method'],
        )
