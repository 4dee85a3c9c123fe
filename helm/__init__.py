"""
Helm — Per-voyage persistent store for an agent's working memory

A voyage is one unit of work with a stated intent. Everything the agent
looks at during the voyage is stored once by content hash; what it has seen
since its last recorded action sits on the slate; each recorded action
seals the slate into an append-only logbook entry.

Usage:
    helm voyage new "Fix the flaky login test"
    helm observe 3f2a files src/login.rs
    helm observe 3f2a pr 12
    helm steer 3f2a comment 12 --on pr --body "Pushed a fix" --summary "Told reviewer"
    helm log 3f2a "investigating" --summary "Read the failing test"
    helm logbook 3f2a
    helm voyage end 3f2a --status "merged"
"""

__version__ = "0.1.0"

# Core layer (data)
from .core.errors import (
    HelmError, IntegrityViolation, ArtifactCorrupted, NotFound,
    VoyageNotFound, ArtifactNotFound, LogbookEntryNotFound,
    Contention, SchemaVersionMismatch, SerializationError,
    StateError, VoyageAlreadyExists, VoyageAlreadyEnded,
    ArtifactStateError, ArtifactUnavailable, IdentityRequired,
)
from .core.target import (
    Target, FileContents, DirectoryTree, RustProject,
    GitHubIssue, GitHubPullRequest, GitHubRepository, parse_target,
)
from .core.action import (
    Action, Role, Method, Log, Commit, Push, PullRequestAct, IssueAct,
    Comment, CommentTarget, parse_action,
)
from .core.artifacts import ArtifactStore, Artifact, ArtifactStatus
from .core.slate import Slate, SlateEntry
from .core.logbook import Logbook, LogbookEntry, BearingObservation
from .core.seal import seal, SealResult
from .core.voyage import Storage, VoyageStore, Voyage, VoyageStatus
from .core.resolver import VoyageResolver, ResolveStatus, ResolveResult

# Services layer
from .services.observe import Observer
from .services.github import GitHubClient, GitHubError

# Presentation layer
from .presentation.symbols import get_symbols, SymbolSet, UNICODE, ASCII

# Config (stays at root)
from .config import Config, ConfigManager, get_config, resolve_identity

__all__ = [
    '__version__',
    # Errors
    'HelmError', 'IntegrityViolation', 'ArtifactCorrupted', 'NotFound',
    'VoyageNotFound', 'ArtifactNotFound', 'LogbookEntryNotFound',
    'Contention', 'SchemaVersionMismatch', 'SerializationError',
    'StateError', 'VoyageAlreadyExists', 'VoyageAlreadyEnded',
    'ArtifactStateError', 'ArtifactUnavailable', 'IdentityRequired',
    # Core
    'Target', 'FileContents', 'DirectoryTree', 'RustProject',
    'GitHubIssue', 'GitHubPullRequest', 'GitHubRepository', 'parse_target',
    'Action', 'Role', 'Method', 'Log', 'Commit', 'Push', 'PullRequestAct', 'IssueAct',
    'Comment', 'CommentTarget', 'parse_action',
    'ArtifactStore', 'Artifact', 'ArtifactStatus',
    'Slate', 'SlateEntry',
    'Logbook', 'LogbookEntry', 'BearingObservation',
    'seal', 'SealResult',
    'Storage', 'VoyageStore', 'Voyage', 'VoyageStatus',
    'VoyageResolver', 'ResolveStatus', 'ResolveResult',
    # Services
    'Observer', 'GitHubClient', 'GitHubError',
    # Presentation
    'get_symbols', 'SymbolSet', 'UNICODE', 'ASCII',
    # Config
    'Config', 'ConfigManager', 'get_config', 'resolve_identity',
]
