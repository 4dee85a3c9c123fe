"""
Observe — Read the world, produce (target, payload) pairs

One observer per target kind; dispatch goes through a table checked
against the Target registry at import time, so a new target kind without
an observer fails loudly instead of falling through.

Payloads are JSON-ready dicts tagged with the target's kind:
- fileContents:  {"contents": [{path, content}]}
- directoryTree: {"listings": [{path, entries: [{name, isDir, sizeBytes}]}]}
- rustProject:   {"listings": [...], "contents": [...]} (docs and manifests)
- gitHub*:       see services.github

File content is {"kind": "text", "text": ...}, {"kind": "binary",
"sizeBytes": n} or {"kind": "error", "message": ...}; an unreadable file
is part of what was seen, not a failure of the observation.

Directory walks respect .gitignore when the root is inside a git work tree
(via `git ls-files`), always skip `.git`, and list paths relative to the
walked root so the same tree hashes the same from any cwd.

Observers only read. They never touch the store.
"""

import os
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

from ..core.target import (
    DirectoryTree, FileContents, GitHubIssue, GitHubPullRequest, GitHubRepository,
    RustProject, Target, parse_target,
)
from .github import GitHubClient


logger = logging.getLogger(__name__)

ALWAYS_SKIP = ".git"
RUST_SKIP = ("target",)
RUST_DOC_FILES = ("Cargo.toml",)
RUST_DOC_SUFFIXES = (".md",)


# =============================================================================
# Files
# =============================================================================

def read_file(path: Path) -> Dict[str, Any]:
    """Content of one file: text, binary (size only), or the read error."""
    try:
        data = path.read_bytes()
    except OSError as e:
        return {"kind": "error", "message": e.strerror or str(e)}
    try:
        return {"kind": "text", "text": data.decode("utf-8")}
    except UnicodeDecodeError:
        return {"kind": "binary", "sizeBytes": len(data)}


def _git_visible(root: Path) -> Optional[Set[str]]:
    """
    Files under `root` that git does not ignore, relative to `root`.

    Uses git ls-files (tracked + untracked-but-not-ignored).
    Returns None when root is not in a git work tree or git is unavailable.
    """
    try:
        result = subprocess.run(
            ["git", "ls-files", "-z", "--cached", "--others", "--exclude-standard"],
            cwd=root,
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("git ls-files unavailable for %s: %s", root, e)
        return None
    if result.returncode != 0:
        return None
    return {line for line in result.stdout.split("\0") if line}


def _visible_dirs(files: Set[str]) -> Set[str]:
    dirs = set()
    for path in files:
        parts = path.split("/")[:-1]
        for i in range(1, len(parts) + 1):
            dirs.add("/".join(parts[:i]))
    return dirs


def walk_tree(root: Path, skip=(), max_depth: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    One listing per directory, entries sorted by name.

    `skip` names directories to skip at any depth. `max_depth` counts
    levels of entries below the root: 1 lists the root only, 0 lists
    nothing, None is unlimited.
    """
    skip = set(skip) | {ALWAYS_SKIP}
    visible = _git_visible(root)
    visible_dirs = _visible_dirs(visible) if visible is not None else None

    listings = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root).as_posix()
        depth = 0 if rel_dir == "." else rel_dir.count("/") + 1

        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []
            continue

        def rel(name: str) -> str:
            return name if rel_dir == "." else f"{rel_dir}/{name}"

        dirnames[:] = sorted(
            d for d in dirnames
            if d not in skip and (visible_dirs is None or rel(d) in visible_dirs)
        )
        files = sorted(
            f for f in filenames
            if visible is None or rel(f) in visible
        )

        entries = [{"name": d, "isDir": True, "sizeBytes": None} for d in dirnames]
        for name in files:
            try:
                size = (current / name).stat().st_size
            except OSError:
                size = None
            entries.append({"name": name, "isDir": False, "sizeBytes": size})
        entries.sort(key=lambda e: e["name"])

        if entries:
            listings.append({"path": rel_dir, "entries": entries})

    listings.sort(key=lambda listing: listing["path"])
    return listings


# =============================================================================
# Dispatch
# =============================================================================

class Observer:
    """
    Produces the payload for any target.

    Relative paths in targets resolve against `base_dir` (cwd by default).
    GitHub targets need a client; one is only built when first needed.
    """

    def __init__(self, base_dir: Optional[Path] = None,
                 github: Optional[GitHubClient] = None,
                 github_factory: Optional[Callable[[], GitHubClient]] = None):
        self.base_dir = Path(base_dir) if base_dir else Path.cwd()
        self._github = github
        self._github_factory = github_factory

    @property
    def github(self) -> GitHubClient:
        if self._github is None:
            if self._github_factory is None:
                raise RuntimeError("GitHub targets need a GitHub client")
            self._github = self._github_factory()
        return self._github

    def observe(self, target: Any) -> Dict[str, Any]:
        target = parse_target(target)
        handler = getattr(self, DISPATCH[target.kind])
        payload = handler(target)
        logger.debug("Observed %s", target.describe())
        return {"kind": target.kind, **payload}

    def _resolve(self, path: str) -> Path:
        return self.base_dir / path

    def file_contents(self, target: FileContents) -> Dict[str, Any]:
        return {
            "contents": [
                {"path": path, "content": read_file(self._resolve(path))}
                for path in target.paths
            ]
        }

    def directory_tree(self, target: DirectoryTree) -> Dict[str, Any]:
        return {"listings": walk_tree(self._resolve(target.root), target.skip, target.max_depth)}

    def rust_project(self, target: RustProject) -> Dict[str, Any]:
        root = self._resolve(target.root)
        listings = walk_tree(root, RUST_SKIP)

        contents = []
        for listing in listings:
            for entry in listing["entries"]:
                name = entry["name"]
                if entry["isDir"] or not (name in RUST_DOC_FILES or name.endswith(RUST_DOC_SUFFIXES)):
                    continue
                rel = name if listing["path"] == "." else f"{listing['path']}/{name}"
                contents.append({"path": rel, "content": read_file(root / rel)})

        return {"listings": listings, "contents": contents}

    def github_issue(self, target: GitHubIssue) -> Dict[str, Any]:
        return self.github.issue(target.number)

    def github_pull_request(self, target: GitHubPullRequest) -> Dict[str, Any]:
        return self.github.pull_request(target.number)

    def github_repository(self, target: GitHubRepository) -> Dict[str, Any]:
        return self.github.repository()


DISPATCH: Dict[str, str] = {
    FileContents.kind: "file_contents",
    DirectoryTree.kind: "directory_tree",
    RustProject.kind: "rust_project",
    GitHubIssue.kind: "github_issue",
    GitHubPullRequest.kind: "github_pull_request",
    GitHubRepository.kind: "github_repository",
}

_unhandled = set(Target.registry) - set(DISPATCH)
if _unhandled:
    raise RuntimeError(f"no observer for target kinds: {', '.join(sorted(_unhandled))}")
