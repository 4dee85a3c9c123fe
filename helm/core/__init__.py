"""
Core — Per-voyage persistent store

Contains the foundational data structures:
- Target: Closed tagged variants naming what was observed
- Action: What a logbook entry records as done
- Artifacts: Content-addressed payloads with a compaction lifecycle
- Slate: Pending observations, one per target
- Logbook: Append-only history with bearings
- Seal: Atomic slate -> logbook commit
- Voyage: Storage root and per-voyage facade
- Resolver: Fuzzy voyage ID resolution
"""

from .errors import (
    HelmError, IntegrityViolation, ArtifactCorrupted,
    NotFound, VoyageNotFound, ArtifactNotFound, LogbookEntryNotFound,
    Contention, SchemaVersionMismatch, SerializationError,
    StateError, VoyageAlreadyExists, VoyageAlreadyEnded,
    ArtifactStateError, ArtifactUnavailable, IdentityRequired,
)
from .target import (
    Target, FileContents, DirectoryTree, RustProject,
    GitHubIssue, GitHubPullRequest, GitHubRepository, parse_target,
)
from .action import (
    Action, Role, Method, Log, Commit, Push, PullRequestAct, PullRequestActKind,
    IssueAct, IssueActKind, Comment, CommentTarget, parse_action,
)
from .schema import SCHEMA_VERSION, connect, transaction, translate_errors
from .artifacts import ArtifactStore, Artifact, ArtifactStatus, Derivation, canonical_bytes, content_hash
from .slate import Slate, SlateEntry
from .logbook import Logbook, LogbookEntry, BearingObservation
from .seal import seal, SealResult
from .voyage import Storage, VoyageStore, Voyage, VoyageStatus
from .resolver import VoyageResolver, ResolveStatus, ResolveResult, format_resolve_prompt

__all__ = [
    # Errors
    "HelmError", "IntegrityViolation", "ArtifactCorrupted",
    "NotFound", "VoyageNotFound", "ArtifactNotFound", "LogbookEntryNotFound",
    "Contention", "SchemaVersionMismatch", "SerializationError",
    "StateError", "VoyageAlreadyExists", "VoyageAlreadyEnded",
    "ArtifactStateError", "ArtifactUnavailable", "IdentityRequired",
    # Target
    "Target", "FileContents", "DirectoryTree", "RustProject",
    "GitHubIssue", "GitHubPullRequest", "GitHubRepository", "parse_target",
    # Action
    "Action", "Role", "Method", "Log", "Commit", "Push", "PullRequestAct", "PullRequestActKind",
    "IssueAct", "IssueActKind", "Comment", "CommentTarget", "parse_action",
    # Schema
    "SCHEMA_VERSION", "connect", "transaction", "translate_errors",
    # Artifacts
    "ArtifactStore", "Artifact", "ArtifactStatus", "Derivation", "canonical_bytes", "content_hash",
    # Slate
    "Slate", "SlateEntry",
    # Logbook
    "Logbook", "LogbookEntry", "BearingObservation",
    # Seal
    "seal", "SealResult",
    # Voyage
    "Storage", "VoyageStore", "Voyage", "VoyageStatus",
    # Resolver
    "VoyageResolver", "ResolveStatus", "ResolveResult", "format_resolve_prompt",
]
