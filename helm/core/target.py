"""
Target — What was observed (identity, never strategy)

A target is a closed, tagged variant over observation domains:
- fileContents: specific files, by path
- directoryTree: recursive walk with skip list and depth limit
- rustProject: orientation over a Rust project root
- gitHubIssue / gitHubPullRequest: a remote resource by number
- gitHubRepository: the repository itself

Two targets denoting the same resource serialize byte-identically, so the
slate and erase can match on the key alone. Unordered inputs (paths, skip
names) are sorted and de-duplicated at construction. Paths are normalized
lexically only: no filesystem access, no resolution against the cwd, so
`src` and `./src` are the same target but `src` and `/repo/src` are not.

Variants carry no fetch strategy. "How much to fetch" would split one
resource across several keys.
"""

import collections.abc
import os
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Type

from .errors import SerializationError
from .variant import TaggedVariant


def _normalize_path(path: Any) -> str:
    try:
        text = os.fspath(path)
    except TypeError as e:
        raise SerializationError(f"not a path: {path!r}") from e
    if isinstance(text, bytes):
        raise SerializationError(f"paths must be text, got bytes: {path!r}")
    if not text:
        raise SerializationError("empty path")
    return os.path.normpath(text).replace(os.sep, '/')


def _sorted_unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(values)))


def _require_collection(value: Any, what: str):
    if not isinstance(value, collections.abc.Iterable):
        raise SerializationError(f"{what} must be a collection, got {value!r}")
    if isinstance(value, (str, bytes, os.PathLike)):
        raise SerializationError(f"{what} must be a collection, not a single value")


def _require_number(value: Any, what: str) -> int:
    # bool is an int subclass; True is never a valid issue number
    if isinstance(value, bool) or not isinstance(value, int):
        raise SerializationError(f"{what} must be an integer, got {value!r}")
    if value < 1:
        raise SerializationError(f"{what} must be positive, got {value}")
    return value


class Target(TaggedVariant):
    """Base for all target variants."""

    family: ClassVar[str] = "target"
    registry: ClassVar[Dict[str, Type['Target']]] = {}

    def describe(self) -> str:
        """Short human-readable label."""
        return self.kind


@Target.register
@dataclass(frozen=True, eq=False)
class FileContents(Target):
    """Read specific files."""
    kind: ClassVar[str] = "fileContents"

    paths: Tuple[str, ...]

    def __post_init__(self):
        _require_collection(self.paths, "paths")
        normalized = _sorted_unique(_normalize_path(p) for p in self.paths)
        if not normalized:
            raise SerializationError("fileContents needs at least one path")
        object.__setattr__(self, 'paths', normalized)

    def describe(self) -> str:
        if len(self.paths) == 1:
            return f"file {self.paths[0]}"
        return f"{len(self.paths)} files"


@Target.register
@dataclass(frozen=True, eq=False)
class DirectoryTree(Target):
    """
    Recursive directory walk.

    `skip` names directories to skip at any depth; `max_depth` limits
    recursion (None = unlimited).
    """
    kind: ClassVar[str] = "directoryTree"

    root: str
    skip: Tuple[str, ...] = ()
    max_depth: Optional[int] = field(default=None, metadata={'wire': 'maxDepth'})

    def __post_init__(self):
        object.__setattr__(self, 'root', _normalize_path(self.root))
        _require_collection(self.skip, "skip")
        object.__setattr__(self, 'skip', _sorted_unique(str(s) for s in self.skip))
        if self.max_depth is not None:
            if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
                raise SerializationError(f"max_depth must be an integer, got {self.max_depth!r}")
            if self.max_depth < 0:
                raise SerializationError(f"max_depth must be >= 0, got {self.max_depth}")

    def describe(self) -> str:
        depth = f" (depth {self.max_depth})" if self.max_depth is not None else ""
        return f"tree {self.root}{depth}"


@Target.register
@dataclass(frozen=True, eq=False)
class RustProject(Target):
    """A Rust project: full tree listing plus documentation files."""
    kind: ClassVar[str] = "rustProject"

    root: str

    def __post_init__(self):
        object.__setattr__(self, 'root', _normalize_path(self.root))

    def describe(self) -> str:
        return f"rust project {self.root}"


@Target.register
@dataclass(frozen=True, eq=False)
class GitHubIssue(Target):
    kind: ClassVar[str] = "gitHubIssue"

    number: int

    def __post_init__(self):
        _require_number(self.number, "issue number")

    def describe(self) -> str:
        return f"issue #{self.number}"


@Target.register
@dataclass(frozen=True, eq=False)
class GitHubPullRequest(Target):
    kind: ClassVar[str] = "gitHubPullRequest"

    number: int

    def __post_init__(self):
        _require_number(self.number, "pull request number")

    def describe(self) -> str:
        return f"PR #{self.number}"


@Target.register
@dataclass(frozen=True, eq=False)
class GitHubRepository(Target):
    """Open issues and pull requests of the current repository."""
    kind: ClassVar[str] = "gitHubRepository"

    def describe(self) -> str:
        return "repository"


def parse_target(value: Any) -> Target:
    """Accept a Target, a canonical key, or a canonical dict."""
    if isinstance(value, Target):
        return value
    if isinstance(value, str):
        return Target.from_key(value)
    if isinstance(value, dict):
        return Target.from_dict(value)
    raise SerializationError(f"cannot interpret {type(value).__name__} as a target")
