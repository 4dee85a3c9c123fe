"""
Services — External integration layer for Helm CLI

Contains integrations with the world outside the store:
- Observe: filesystem observers and per-kind dispatch
- GitHub: issue/PR/repository observation and comments via `gh`
"""

from .github import GitHubClient, GitHubError, gh_config_dir
from .observe import Observer, read_file, walk_tree

__all__ = [
    # GitHub
    "GitHubClient", "GitHubError", "gh_config_dir",
    # Observe
    "Observer", "read_file", "walk_tree",
]
