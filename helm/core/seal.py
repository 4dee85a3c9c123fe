"""
Seal — Commit the slate into the logbook as one bearing

The only operation that mutates slate, logbook and bearing_observations
together. Inside one BEGIN IMMEDIATE transaction:

1. read every slate row
2. insert the logbook entry
3. copy the slate rows into bearing_observations under the new entry id
4. empty the slate

Either all four happen or none do. Reading under the write lock means an
observation upserted by another process cannot slip in between the read
and the delete and be lost. An empty slate seals fine (zero bearing rows).
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import Any

from .logbook import Logbook
from .schema import transaction
from .slate import Slate


logger = logging.getLogger(__name__)


@dataclass
class SealResult:
    entry_id: int
    sealed: int  # observations moved from slate to bearing


def seal(conn: sqlite3.Connection, identity: str, action: Any, summary: str,
         role: Any, method: Any) -> SealResult:
    slate = Slate(conn)
    logbook = Logbook(conn)

    with transaction(conn):
        pending = slate.list()
        entry_id = logbook.record(identity, action, summary, role, method, pending)
        slate.clear()

    logger.debug("Sealed %d observations into entry %d", len(pending), entry_id)
    return SealResult(entry_id=entry_id, sealed=len(pending))
