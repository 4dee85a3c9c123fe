"""
Slate — Pending observations, one row per target

The working set between seals. Observing a target again replaces its row
(last write wins on artifact and timestamp). Nothing here writes history
or deletes artifacts; a cleared observation's artifact may still be
referenced by past bearings.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any, List, Optional

from .schema import translate_errors, utc_now
from .target import Target, parse_target


logger = logging.getLogger(__name__)


@dataclass
class SlateEntry:
    target: Target
    artifact_hash: str
    observed_at: str

    @property
    def key(self) -> str:
        return self.target.key


def _key(target: Any) -> str:
    return parse_target(target).key


class Slate:
    """Slate table access for one voyage connection."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def upsert(self, target: Any, artifact_hash: str, observed_at: Optional[str] = None):
        """
        Insert or replace the row for a target.

        The artifact must exist; a dangling hash is an IntegrityViolation.
        """
        key = _key(target)
        with translate_errors():
            self.conn.execute(
                """INSERT INTO slate (target, artifact_hash, observed_at) VALUES (?, ?, ?)
                   ON CONFLICT(target) DO UPDATE SET
                       artifact_hash = excluded.artifact_hash,
                       observed_at = excluded.observed_at""",
                (key, artifact_hash, observed_at or utc_now())
            )
        logger.debug("Slate upsert %s -> %s", key, artifact_hash[:12])

    def list(self) -> List[SlateEntry]:
        """All pending observations, oldest first."""
        with translate_errors():
            rows = self.conn.execute(
                "SELECT target, artifact_hash, observed_at FROM slate ORDER BY observed_at, target"
            ).fetchall()
        return [self._to_entry(row) for row in rows]

    def get(self, target: Any) -> Optional[SlateEntry]:
        with translate_errors():
            row = self.conn.execute(
                "SELECT target, artifact_hash, observed_at FROM slate WHERE target = ?",
                (_key(target),)
            ).fetchone()
        return self._to_entry(row) if row else None

    def erase(self, target: Any) -> bool:
        """Remove one target's row. Absent targets are a no-op; returns whether a row went."""
        with translate_errors():
            cursor = self.conn.execute("DELETE FROM slate WHERE target = ?", (_key(target),))
        return cursor.rowcount > 0

    def clear(self) -> int:
        """Remove every row. Returns how many were removed."""
        with translate_errors():
            cursor = self.conn.execute("DELETE FROM slate")
        return cursor.rowcount

    def count(self) -> int:
        with translate_errors():
            return self.conn.execute("SELECT COUNT(*) FROM slate").fetchone()[0]

    @staticmethod
    def _to_entry(row: sqlite3.Row) -> SlateEntry:
        return SlateEntry(
            target=Target.from_key(row['target']),
            artifact_hash=row['artifact_hash'],
            observed_at=row['observed_at'],
        )
