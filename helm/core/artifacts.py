"""
Artifacts — Content-addressed payload storage with a compaction lifecycle

Each payload is stored once per voyage, keyed by the SHA-256 of its
canonical uncompressed bytes and compressed with zlib:
- stowed:     full payload present; the hash proves the content
- reduced:    payload dropped, a derivation edge points at a summary artifact
- jettisoned: payload dropped, nothing retained but the row

Status only moves forward. Rows are never deleted, so every hash ever handed
out stays a valid foreign key. Hash-as-identity holds for the whole
lifecycle; hash-as-content-proof only while stowed.
"""

import hashlib
import logging
import sqlite3
import zlib
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import orjson

from .errors import (
    ArtifactCorrupted, ArtifactNotFound, ArtifactStateError, ArtifactUnavailable,
    IntegrityViolation, SerializationError,
)
from .schema import text_value, transaction, translate_errors, utc_now


logger = logging.getLogger(__name__)

COMPRESSION_LEVEL = 9


class ArtifactStatus(Enum):
    STOWED = "stowed"
    REDUCED = "reduced"
    JETTISONED = "jettisoned"


@dataclass
class Artifact:
    """Artifact metadata (never the payload)."""
    hash: str
    status: ArtifactStatus
    size: int
    created_at: str

    @property
    def has_payload(self) -> bool:
        return self.status == ArtifactStatus.STOWED


@dataclass
class Derivation:
    source_hash: str
    derived_hash: str
    method: str
    created_at: str


def canonical_bytes(payload: Any) -> bytes:
    """
    Canonical byte form of a payload.

    Bytes are taken verbatim. Anything else is encoded as JSON with sorted
    keys, so logically equal structures produce identical bytes.
    """
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload)
    try:
        return orjson.dumps(payload, option=orjson.OPT_SORT_KEYS)
    except TypeError as e:
        raise SerializationError(f"payload is not JSON-serializable: {e}") from e


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class ArtifactStore:
    """
    Artifact table access for one voyage connection.

    Methods that touch more than one row run inside their own transaction.
    `put` is a single statement, so it is safe both standalone and inside a
    caller's transaction (VoyageStore.observe relies on this).
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def put(self, payload: Any) -> str:
        """Store a payload if new; return its hash either way."""
        data = canonical_bytes(payload)
        artifact_hash = content_hash(data)
        compressed = zlib.compress(data, COMPRESSION_LEVEL)

        with translate_errors():
            cursor = self.conn.execute(
                """INSERT OR IGNORE INTO artifacts (hash, data, size, status, created_at)
                   VALUES (?, ?, ?, 'stowed', ?)""",
                (artifact_hash, compressed, len(data), utc_now())
            )
        if cursor.rowcount:
            logger.debug("Stowed artifact %s (%d bytes, %d compressed)",
                         artifact_hash[:12], len(data), len(compressed))
        return artifact_hash

    def reduce(self, artifact_hash: str, summary: Any, method: Union[str, Enum]) -> str:
        """
        Replace a stowed payload with a summary artifact.

        Stores the summary, records the derivation edge, drops the source
        bytes and marks the source reduced, all in one transaction.
        Returns the summary's hash.
        """
        method = text_value(method, "derivation method")

        with transaction(self.conn):
            source = self._require(artifact_hash)
            if source.status != ArtifactStatus.STOWED:
                raise ArtifactStateError(artifact_hash, source.status.value, "reduce")

            summary_hash = content_hash(canonical_bytes(summary))
            if summary_hash == artifact_hash:
                raise IntegrityViolation(f"artifact {artifact_hash} cannot be reduced to itself")

            existing = self.info(summary_hash)
            if existing is not None and existing.status != ArtifactStatus.STOWED:
                raise ArtifactStateError(summary_hash, existing.status.value, "reduce into")

            self.put(summary)
            self.conn.execute(
                """INSERT INTO artifact_derivations (source_hash, derived_hash, method, created_at)
                   VALUES (?, ?, ?, ?)""",
                (artifact_hash, summary_hash, method, utc_now())
            )
            self.conn.execute(
                "UPDATE artifacts SET data = NULL, status = 'reduced' WHERE hash = ?",
                (artifact_hash,)
            )

        logger.debug("Reduced artifact %s -> %s (%s)", artifact_hash[:12], summary_hash[:12], method)
        return summary_hash

    def jettison(self, artifact_hash: str):
        """
        Drop an artifact's payload without keeping a summary.

        Refused while the slate, a bearing, or a derivation still needs the
        content and no derivation of this artifact preserves it. Already
        jettisoned artifacts are left as they are.
        """
        with transaction(self.conn):
            artifact = self._require(artifact_hash)
            if artifact.status == ArtifactStatus.JETTISONED:
                return

            if self._is_referenced(artifact_hash) and not self.derivations(artifact_hash):
                raise IntegrityViolation(
                    f"artifact {artifact_hash} is still referenced and has no derivation"
                )

            self.conn.execute(
                "UPDATE artifacts SET data = NULL, status = 'jettisoned' WHERE hash = ?",
                (artifact_hash,)
            )

        logger.debug("Jettisoned artifact %s", artifact_hash[:12])

    def _is_referenced(self, artifact_hash: str) -> bool:
        row = self.conn.execute(
            """SELECT EXISTS (SELECT 1 FROM slate WHERE artifact_hash = :h)
                   OR EXISTS (SELECT 1 FROM bearing_observations WHERE artifact_hash = :h)
                   OR EXISTS (SELECT 1 FROM artifact_derivations WHERE derived_hash = :h)""",
            {'h': artifact_hash}
        ).fetchone()
        return bool(row[0])

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def get(self, artifact_hash: str) -> bytes:
        """
        Return the original payload bytes.

        Raises ArtifactNotFound if absent, ArtifactUnavailable if the payload
        was discarded, ArtifactCorrupted if the stored bytes no longer
        decompress to content matching the hash.
        """
        with translate_errors():
            row = self.conn.execute(
                "SELECT data, status, size FROM artifacts WHERE hash = ?",
                (artifact_hash,)
            ).fetchone()
        if row is None:
            raise ArtifactNotFound(artifact_hash)
        if row['status'] != ArtifactStatus.STOWED.value:
            raise ArtifactUnavailable(artifact_hash, row['status'])

        try:
            data = zlib.decompress(row['data'])
        except zlib.error as e:
            raise ArtifactCorrupted(artifact_hash, f"decompression failed: {e}") from e

        if len(data) != row['size'] or content_hash(data) != artifact_hash:
            raise ArtifactCorrupted(artifact_hash, "content does not match hash")
        return data

    def get_json(self, artifact_hash: str) -> Any:
        data = self.get(artifact_hash)
        try:
            return orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise SerializationError(f"artifact {artifact_hash} is not JSON: {e}") from e

    def info(self, artifact_hash: str) -> Optional[Artifact]:
        with translate_errors():
            row = self.conn.execute(
                "SELECT hash, status, size, created_at FROM artifacts WHERE hash = ?",
                (artifact_hash,)
            ).fetchone()
        if row is None:
            return None
        return Artifact(
            hash=row['hash'],
            status=ArtifactStatus(row['status']),
            size=row['size'],
            created_at=row['created_at'],
        )

    def _require(self, artifact_hash: str) -> Artifact:
        artifact = self.info(artifact_hash)
        if artifact is None:
            raise ArtifactNotFound(artifact_hash)
        return artifact

    def status(self, artifact_hash: str) -> ArtifactStatus:
        return self._require(artifact_hash).status

    def exists(self, artifact_hash: str) -> bool:
        return self.info(artifact_hash) is not None

    def derivations(self, artifact_hash: str) -> List[Derivation]:
        """Derivation edges leaving this artifact."""
        with translate_errors():
            rows = self.conn.execute(
                """SELECT source_hash, derived_hash, method, created_at
                   FROM artifact_derivations WHERE source_hash = ?
                   ORDER BY created_at, derived_hash""",
                (artifact_hash,)
            ).fetchall()
        return [Derivation(**dict(row)) for row in rows]

    def resolve(self, artifact_hash: str) -> str:
        """
        Hash of the best content still available for an artifact.

        Stowed artifacts resolve to themselves; reduced ones follow their
        derivation edge (transitively). Jettisoned artifacts raise
        ArtifactUnavailable.
        """
        seen = set()
        current = artifact_hash
        while True:
            artifact = self._require(current)
            if artifact.status == ArtifactStatus.STOWED:
                return current
            if artifact.status == ArtifactStatus.JETTISONED or current in seen:
                raise ArtifactUnavailable(artifact_hash, artifact.status.value)
            seen.add(current)
            edges = self.derivations(current)
            if not edges:
                raise ArtifactUnavailable(artifact_hash, artifact.status.value)
            current = edges[-1].derived_hash

    def stats(self) -> Dict[str, int]:
        """Counts per status plus raw and stored byte totals."""
        with translate_errors():
            rows = self.conn.execute(
                "SELECT status, COUNT(*) AS n FROM artifacts GROUP BY status"
            ).fetchall()
            totals = self.conn.execute(
                """SELECT COALESCE(SUM(size), 0) AS raw_bytes,
                          COALESCE(SUM(length(data)), 0) AS stored_bytes
                   FROM artifacts"""
            ).fetchone()

        counts = {status.value: 0 for status in ArtifactStatus}
        for row in rows:
            counts[row['status']] = row['n']
        return {
            'total': sum(counts.values()),
            **counts,
            'raw_bytes': totals['raw_bytes'],
            'stored_bytes': totals['stored_bytes'],
        }
