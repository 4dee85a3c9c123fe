"""
Schema — Voyage database layout, connection setup, and transactions

One SQLite file per voyage. Every connection:
- enforces foreign keys (SQLite ships with them off; we refuse to run without)
- uses WAL so readers never observe a half-committed seal
- waits up to busy_timeout for the write lock, then surfaces Contention

Connections run in autocommit mode (isolation_level=None). Multi-statement
mutations go through `transaction()`, which takes the write lock up front
with BEGIN IMMEDIATE and rolls back on any error.

The schema version lives in PRAGMA user_version. Opening a store with a
different version fails; there is no implicit migration.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional

from .errors import Contention, HelmError, IntegrityViolation, SchemaVersionMismatch


logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

DEFAULT_BUSY_TIMEOUT_MS = 5000

SCHEMA_DDL = """
CREATE TABLE voyage (
    id            TEXT PRIMARY KEY,
    intent        TEXT NOT NULL,
    created_at    TEXT NOT NULL,
    status        TEXT NOT NULL CHECK (status IN ('active', 'ended')),
    ended_at      TEXT,
    ended_status  TEXT,
    CHECK ((status = 'ended') = (ended_at IS NOT NULL)),
    CHECK (status = 'ended' OR ended_status IS NULL)
);

-- data is NULL once the payload is discarded; the row (and its hash) stays
CREATE TABLE artifacts (
    hash        TEXT PRIMARY KEY CHECK (length(hash) = 64),
    data        BLOB,
    size        INTEGER NOT NULL CHECK (size >= 0),
    status      TEXT NOT NULL DEFAULT 'stowed'
                CHECK (status IN ('stowed', 'reduced', 'jettisoned')),
    created_at  TEXT NOT NULL,
    CHECK ((status = 'stowed') = (data IS NOT NULL))
);

CREATE TABLE artifact_derivations (
    source_hash   TEXT NOT NULL REFERENCES artifacts(hash),
    derived_hash  TEXT NOT NULL REFERENCES artifacts(hash),
    method        TEXT NOT NULL CHECK (method <> ''),
    created_at    TEXT NOT NULL,
    PRIMARY KEY (source_hash, derived_hash),
    CHECK (source_hash <> derived_hash)
);

CREATE TABLE slate (
    target         TEXT PRIMARY KEY,
    artifact_hash  TEXT NOT NULL REFERENCES artifacts(hash),
    observed_at    TEXT NOT NULL
);

CREATE TABLE logbook (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    recorded_at  TEXT NOT NULL,
    identity     TEXT NOT NULL CHECK (identity <> ''),
    action       TEXT NOT NULL CHECK (action <> ''),
    summary      TEXT NOT NULL CHECK (summary <> ''),
    role         TEXT NOT NULL CHECK (role <> ''),
    method       TEXT NOT NULL CHECK (method <> '')
);

CREATE TABLE bearing_observations (
    logbook_id     INTEGER NOT NULL REFERENCES logbook(id),
    target         TEXT NOT NULL,
    artifact_hash  TEXT NOT NULL REFERENCES artifacts(hash),
    observed_at    TEXT NOT NULL,
    PRIMARY KEY (logbook_id, target)
);

-- The jettison guard looks artifacts up from both referencing tables
CREATE INDEX idx_slate_artifact ON slate(artifact_hash);
CREATE INDEX idx_bearing_artifact ON bearing_observations(artifact_hash);
CREATE INDEX idx_derivations_derived ON artifact_derivations(derived_hash);

-- History is append-only
CREATE TRIGGER trg_logbook_no_update BEFORE UPDATE ON logbook
BEGIN
    SELECT RAISE(ABORT, 'logbook is append-only');
END;

CREATE TRIGGER trg_logbook_no_delete BEFORE DELETE ON logbook
BEGIN
    SELECT RAISE(ABORT, 'logbook is append-only');
END;

CREATE TRIGGER trg_bearing_no_update BEFORE UPDATE ON bearing_observations
BEGIN
    SELECT RAISE(ABORT, 'bearings are append-only');
END;

CREATE TRIGGER trg_bearing_no_delete BEFORE DELETE ON bearing_observations
BEGIN
    SELECT RAISE(ABORT, 'bearings are append-only');
END;

-- Artifacts are never deleted; payload bytes can only be dropped
CREATE TRIGGER trg_artifacts_no_delete BEFORE DELETE ON artifacts
BEGIN
    SELECT RAISE(ABORT, 'artifacts are never deleted');
END;

CREATE TRIGGER trg_artifacts_bytes_immutable BEFORE UPDATE OF data, hash, size ON artifacts
WHEN NEW.hash <> OLD.hash OR NEW.size <> OLD.size OR NEW.data IS NOT OLD.data AND NEW.data IS NOT NULL
BEGIN
    SELECT RAISE(ABORT, 'artifact payloads are immutable');
END;

-- Lifecycle only moves forward: stowed -> reduced -> jettisoned
CREATE TRIGGER trg_artifacts_forward_only BEFORE UPDATE OF status ON artifacts
WHEN OLD.status = 'jettisoned' AND NEW.status <> 'jettisoned'
  OR OLD.status = 'reduced' AND NEW.status = 'stowed'
BEGIN
    SELECT RAISE(ABORT, 'artifact lifecycle cannot move backwards');
END;
"""


def utc_now() -> str:
    """Current time as an ISO-8601 UTC string (the store's timestamp format)."""
    return datetime.now(timezone.utc).isoformat()


def text_value(value: Any, what: str) -> str:
    """Accept an Enum member or a non-empty string for a required text column."""
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{what} must be a non-empty string")
    return value


def _is_contention(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return "locked" in message or "busy" in message


@contextmanager
def translate_errors() -> Iterator[None]:
    """
    Map sqlite3 exceptions onto the store's error taxonomy.

    IntegrityError -> IntegrityViolation; lock timeouts -> Contention.
    Anything else propagates unchanged.
    """
    try:
        yield
    except sqlite3.IntegrityError as e:
        raise IntegrityViolation(str(e)) from e
    except sqlite3.OperationalError as e:
        if _is_contention(e):
            raise Contention(f"voyage store is busy: {e}") from e
        raise


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """
    Run a block as one atomic write transaction.

    BEGIN IMMEDIATE takes the write lock before any read, so reads inside the
    block see exactly the state that gets written over. On any exception the
    transaction is rolled back and the error re-raised (translated).
    """
    with translate_errors():
        conn.execute("BEGIN IMMEDIATE")
    try:
        with translate_errors():
            yield conn
            conn.execute("COMMIT")
    except BaseException:
        if conn.in_transaction:
            conn.execute("ROLLBACK")
        raise


def connect(path: Path, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> sqlite3.Connection:
    """Open a voyage database with the store's required pragmas applied."""
    with translate_errors():
        conn = sqlite3.connect(
            str(path),
            timeout=busy_timeout_ms / 1000,
            isolation_level=None,
            cached_statements=256,
        )
    conn.row_factory = sqlite3.Row
    try:
        with translate_errors():
            conn.executescript(f"""
                PRAGMA foreign_keys = ON;
                PRAGMA busy_timeout = {int(busy_timeout_ms)};
                PRAGMA journal_mode = WAL;
                PRAGMA synchronous = FULL;
            """)
    except BaseException:
        conn.close()
        raise

    enabled = conn.execute("PRAGMA foreign_keys").fetchone()[0]
    if enabled != 1:
        conn.close()
        raise HelmError("SQLite build does not enforce foreign keys; refusing to open store")
    return conn


def create_schema(conn: sqlite3.Connection):
    """
    Apply the full schema and version marker to an empty database.

    Runs inside the caller's transaction, so a voyage file either has the
    whole schema, marker and voyage row, or none of them.
    """
    # executescript would COMMIT the open transaction; run statements one by one
    for statement in _split_statements(SCHEMA_DDL):
        conn.execute(statement)
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    logger.debug("Applied schema version %d", SCHEMA_VERSION)


def schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def check_version(conn: sqlite3.Connection, path: Optional[Path] = None):
    """Raise SchemaVersionMismatch unless the marker equals SCHEMA_VERSION."""
    found = schema_version(conn)
    if found != SCHEMA_VERSION:
        raise SchemaVersionMismatch(SCHEMA_VERSION, found, str(path) if path else None)


def _split_statements(script: str):
    """Split DDL into complete statements (trigger bodies contain semicolons)."""
    buffer = ""
    for line in script.splitlines(keepends=True):
        if line.strip().startswith("--"):
            continue
        buffer += line
        if sqlite3.complete_statement(buffer):
            statement = buffer.strip()
            if statement:
                yield statement
            buffer = ""
    if buffer.strip():
        yield buffer.strip()
