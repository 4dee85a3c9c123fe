"""
Errors — Store error taxonomy

Every failure a voyage store can surface is a distinct, inspectable type:
- IntegrityViolation: a referential constraint would break (fatal)
- NotFound: lookup by key that does not exist (recoverable)
- Contention: write lock not acquired within the busy timeout (retryable)
- SchemaVersionMismatch: store written by a different schema (fatal)
- SerializationError: value has no canonical form
- StateError: lifecycle transition not allowed from the current state

Nothing here is logged-and-swallowed. The CLI decides how to present them.
"""

from typing import Optional


class HelmError(Exception):
    """Base class for all Helm errors."""

    kind = "error"


class IntegrityViolation(HelmError):
    """A referential or content integrity constraint would be broken."""

    kind = "integrity violation"


class ArtifactCorrupted(IntegrityViolation):
    """Stored artifact bytes no longer match their hash or cannot be decoded."""

    def __init__(self, artifact_hash: str, reason: str):
        self.artifact_hash = artifact_hash
        self.reason = reason
        super().__init__(f"artifact {artifact_hash} is corrupted: {reason}")


class NotFound(HelmError):
    """Lookup by a key that does not exist."""

    kind = "not found"


class VoyageNotFound(NotFound):
    def __init__(self, voyage_id: str):
        self.voyage_id = voyage_id
        super().__init__(f"voyage not found: {voyage_id}")


class ArtifactNotFound(NotFound):
    def __init__(self, artifact_hash: str):
        self.artifact_hash = artifact_hash
        super().__init__(f"artifact not found: {artifact_hash}")


class LogbookEntryNotFound(NotFound):
    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"logbook entry not found: {entry_id}")


class Contention(HelmError):
    """The store's write lock could not be acquired. Safe to retry."""

    kind = "contention"


class SchemaVersionMismatch(HelmError):
    """The store's schema-version marker differs from what this code expects."""

    kind = "schema version mismatch"

    def __init__(self, expected: int, found: int, path: Optional[str] = None):
        self.expected = expected
        self.found = found
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"schema version {found}{where}, expected {expected}")


class SerializationError(HelmError):
    """A target or action could not be encoded to (or decoded from) its canonical form."""

    kind = "serialization error"


class StateError(HelmError):
    """A lifecycle transition is not allowed from the current state."""

    kind = "invalid state"


class VoyageAlreadyExists(StateError):
    def __init__(self, voyage_id: str):
        self.voyage_id = voyage_id
        super().__init__(f"voyage already exists: {voyage_id}")


class VoyageAlreadyEnded(StateError):
    def __init__(self, voyage_id: str):
        self.voyage_id = voyage_id
        super().__init__(f"voyage already ended: {voyage_id}")


class ArtifactStateError(StateError):
    def __init__(self, artifact_hash: str, status: str, operation: str):
        self.artifact_hash = artifact_hash
        self.status = status
        self.operation = operation
        super().__init__(f"cannot {operation} artifact {artifact_hash}: status is {status}")


class ArtifactUnavailable(StateError):
    """The artifact exists but its payload bytes were discarded."""

    def __init__(self, artifact_hash: str, status: str):
        self.artifact_hash = artifact_hash
        self.status = status
        super().__init__(f"artifact {artifact_hash} is {status}; payload no longer stored")


class IdentityRequired(HelmError):
    """No identity could be resolved for an operation that records one."""

    kind = "identity required"
