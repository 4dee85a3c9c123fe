"""
Voyage — Storage root and the per-voyage store facade

Physical layout: one SQLite file per voyage, `<root>/<uuid>.sqlite`.

Storage owns the root directory:
- create(intent): new file, full schema + version marker + active voyage row
- open(voyage_id): attach, verifying the schema version (no migration)
- list_voyages(): every readable voyage, oldest first
- end(voyage_id, status): active -> ended, exactly once

VoyageStore wraps one open connection and exposes the artifact store,
slate, logbook and seal for that voyage. It takes identity strings as
plain arguments and never reads environment state.
"""

import logging
import sqlite3
import uuid
from enum import Enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional

from .artifacts import ArtifactStatus, ArtifactStore
from .errors import HelmError, VoyageAlreadyEnded, VoyageAlreadyExists, VoyageNotFound
from .logbook import Logbook
from .schema import (
    DEFAULT_BUSY_TIMEOUT_MS, check_version, connect, create_schema,
    transaction, translate_errors, utc_now,
)
from .seal import SealResult, seal
from .slate import Slate, SlateEntry
from .target import parse_target


logger = logging.getLogger(__name__)

VOYAGE_SUFFIX = ".sqlite"


class VoyageStatus(Enum):
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Voyage:
    id: str
    intent: str
    created_at: str
    status: VoyageStatus
    ended_at: Optional[str] = None
    ended_status: Optional[str] = None

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @property
    def is_active(self) -> bool:
        return self.status == VoyageStatus.ACTIVE


def _canonical_id(voyage_id: Any) -> Optional[str]:
    """Lower-case hyphenated UUID string, or None if not a UUID."""
    try:
        return str(uuid.UUID(str(voyage_id)))
    except ValueError:
        return None


class VoyageStore:
    """
    One open voyage.

    Usable as a context manager; the connection closes on exit.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path, voyage_id: str):
        self.conn = conn
        self.path = path
        self.voyage_id = voyage_id
        self.artifacts = ArtifactStore(conn)
        self.slate = Slate(conn)
        self.logbook = Logbook(conn)

    def __enter__(self) -> 'VoyageStore':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.conn.close()

    # -------------------------------------------------------------------------
    # Voyage lifecycle
    # -------------------------------------------------------------------------

    def voyage(self) -> Voyage:
        with translate_errors():
            row = self.conn.execute("SELECT * FROM voyage WHERE id = ?", (self.voyage_id,)).fetchone()
        if row is None:
            raise VoyageNotFound(self.voyage_id)
        return Voyage(
            id=row['id'],
            intent=row['intent'],
            created_at=row['created_at'],
            status=VoyageStatus(row['status']),
            ended_at=row['ended_at'],
            ended_status=row['ended_status'],
        )

    def end(self, status_text: Optional[str] = None) -> Voyage:
        """Mark the voyage ended. Raises VoyageAlreadyEnded on a second call."""
        with transaction(self.conn):
            if not self.voyage().is_active:
                raise VoyageAlreadyEnded(self.voyage_id)
            self.conn.execute(
                """UPDATE voyage SET status = 'ended', ended_at = ?, ended_status = ?
                   WHERE id = ?""",
                (utc_now(), status_text or None, self.voyage_id)
            )
        logger.info("Ended voyage %s", self.voyage_id)
        return self.voyage()

    # -------------------------------------------------------------------------
    # Observation and sealing
    # -------------------------------------------------------------------------

    def observe(self, target: Any, payload: Any, observed_at: Optional[str] = None) -> SlateEntry:
        """Store a payload and point the target's slate row at it, atomically."""
        target = parse_target(target)
        observed_at = observed_at or utc_now()
        with transaction(self.conn):
            artifact_hash = self.artifacts.put(payload)
            status = self.artifacts.status(artifact_hash)
            self.slate.upsert(target, artifact_hash, observed_at)
        if status != ArtifactStatus.STOWED:
            # no reverse transition; the slate now points at a payload-less artifact
            logger.warning("Observed %s matches %s artifact %s; payload is not stored",
                           target.describe(), status.value, artifact_hash[:12])
        return SlateEntry(target=target, artifact_hash=artifact_hash, observed_at=observed_at)

    def seal(self, identity: str, action: Any, summary: str, role: Any, method: Any) -> SealResult:
        return seal(self.conn, identity, action, summary, role, method)


class Storage:
    """Voyage store root directory."""

    def __init__(self, root: Path, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS):
        self.root = Path(root).expanduser()
        self.busy_timeout_ms = busy_timeout_ms

    def path_for(self, voyage_id: str) -> Path:
        return self.root / f"{voyage_id}{VOYAGE_SUFFIX}"

    def exists(self, voyage_id: str) -> bool:
        canonical = _canonical_id(voyage_id)
        return canonical is not None and self.path_for(canonical).is_file()

    def create(self, intent: str, voyage_id: Optional[str] = None) -> VoyageStore:
        """
        Create a new voyage store and return it open.

        Raises VoyageAlreadyExists if the file is already there. A failure
        part way through removes the file again.
        """
        if not isinstance(intent, str) or not intent.strip():
            raise ValueError("intent must be a non-empty string")
        if voyage_id is None:
            voyage_id = str(uuid.uuid4())
        else:
            canonical = _canonical_id(voyage_id)
            if canonical is None:
                raise ValueError(f"voyage id must be a UUID, got {voyage_id!r}")
            voyage_id = canonical

        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(voyage_id)
        try:
            path.touch(exist_ok=False)
        except FileExistsError:
            raise VoyageAlreadyExists(voyage_id) from None

        conn = None
        try:
            conn = connect(path, self.busy_timeout_ms)
            with transaction(conn):
                create_schema(conn)
                conn.execute(
                    "INSERT INTO voyage (id, intent, created_at, status) VALUES (?, ?, ?, 'active')",
                    (voyage_id, intent, utc_now())
                )
        except BaseException:
            if conn is not None:
                conn.close()
            self._remove(path)
            raise

        logger.info("Created voyage %s at %s", voyage_id, path)
        return VoyageStore(conn, path, voyage_id)

    def open(self, voyage_id: str) -> VoyageStore:
        """Open an existing voyage. Raises VoyageNotFound or SchemaVersionMismatch."""
        canonical = _canonical_id(voyage_id)
        if canonical is None or not self.path_for(canonical).is_file():
            raise VoyageNotFound(str(voyage_id))
        path = self.path_for(canonical)

        conn = connect(path, self.busy_timeout_ms)
        try:
            check_version(conn, path)
        except BaseException:
            conn.close()
            raise
        return VoyageStore(conn, path, canonical)

    def end(self, voyage_id: str, status_text: Optional[str] = None) -> Voyage:
        with self.open(voyage_id) as store:
            return store.end(status_text)

    def voyage_ids(self) -> List[str]:
        """IDs of every voyage file under the root (unvalidated contents)."""
        if not self.root.is_dir():
            return []
        ids = []
        for path in self.root.glob(f"*{VOYAGE_SUFFIX}"):
            canonical = _canonical_id(path.stem)
            if canonical is not None and canonical == path.stem:
                ids.append(canonical)
        return sorted(ids)

    def list_voyages(self) -> List[Voyage]:
        """
        All readable voyages, oldest first.

        Files that are not voyage stores (wrong name, corrupt, other schema
        version) are skipped with a warning.
        """
        voyages = []
        for voyage_id in self.voyage_ids():
            try:
                with self.open(voyage_id) as store:
                    voyages.append(store.voyage())
            except (HelmError, sqlite3.DatabaseError) as e:
                logger.warning("Skipping unreadable voyage %s: %s", voyage_id, e)
        voyages.sort(key=lambda v: v.created_at)
        return voyages

    @staticmethod
    def _remove(path: Path):
        for candidate in (path, path.with_name(path.name + "-wal"), path.with_name(path.name + "-shm")):
            candidate.unlink(missing_ok=True)
