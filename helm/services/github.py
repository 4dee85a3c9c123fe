"""
GitHub Integration — Observe and steer through the `gh` CLI

Every call runs `gh` with GH_CONFIG_DIR pointing at the acting identity's
own config directory (`<gh_config_root>/<identity>`), so one machine can
act as several GitHub accounts without switching global state.

Observation payloads are plain dicts with actor and label objects
flattened to names:
- issue: summary fields + comments
- pull request: summary + changed files + checks + diff + comments +
  inline review comments
- repository: open issues and pull requests (first 100 of each)

Steering covers comments: on an issue, on a PR, or a reply to an inline
review comment.
"""

import os
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

import orjson

from ..core.action import CommentTarget
from ..core.errors import HelmError


logger = logging.getLogger(__name__)

LIST_LIMIT = "100"

ISSUE_FIELDS = "title,number,state,author,labels,assignees,body"
PR_FIELDS = "title,number,state,author,labels,assignees,headRefName,baseRefName,body"


class GitHubError(HelmError):
    """A `gh` invocation failed or returned something unreadable."""

    kind = "github error"


def gh_config_dir(identity: str, root: str) -> Path:
    """
    GH_CONFIG_DIR for an identity. The directory must already exist.

    Set one up with: GH_CONFIG_DIR=<root>/<identity> gh auth login
    """
    path = Path(root).expanduser() / identity
    if not path.is_dir():
        raise GitHubError(
            f"no GitHub config for identity '{identity}': expected directory at {path}\n"
            f"Set up with: GH_CONFIG_DIR={path} gh auth login"
        )
    return path


def _login(actor: Optional[Dict[str, Any]]) -> Optional[str]:
    return actor.get("login") if actor else None


def _names(items: Optional[List[Dict[str, Any]]], key: str) -> List[str]:
    return [item[key] for item in items or []]


def _summary(data: Dict[str, Any]) -> Dict[str, Any]:
    summary = {
        "number": data["number"],
        "title": data["title"],
        "state": data["state"],
        "author": _login(data.get("author")),
        "labels": _names(data.get("labels"), "name"),
        "assignees": _names(data.get("assignees"), "login"),
        "body": data.get("body") or None,
    }
    if "headRefName" in data:
        summary["headBranch"] = data["headRefName"]
        summary["baseBranch"] = data.get("baseRefName")
    return summary


def _comments(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"author": _login(c.get("author")), "body": c.get("body", ""), "createdAt": c.get("createdAt")}
        for c in items
    ]


class GitHubClient:
    """Thin wrapper around `gh` for one identity."""

    def __init__(self, config_dir: Optional[Path] = None, repo_path: Optional[Path] = None):
        self.config_dir = config_dir
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()

    def _run_gh(self, args: List[str], check: bool = True) -> str:
        """Run a gh command and return stdout."""
        env = dict(os.environ)
        if self.config_dir is not None:
            env["GH_CONFIG_DIR"] = str(self.config_dir)

        logger.debug("gh %s", " ".join(args))
        try:
            result = subprocess.run(
                ["gh"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                check=check,
                env=env,
            )
        except FileNotFoundError as e:
            raise GitHubError("gh CLI not found; install it from https://cli.github.com") from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            raise GitHubError(f"gh {' '.join(args)} failed: {stderr}") from e
        return result.stdout

    def _run_json(self, args: List[str]) -> Any:
        output = self._run_gh(args)
        try:
            return orjson.loads(output)
        except orjson.JSONDecodeError as e:
            raise GitHubError(f"gh {' '.join(args)} returned invalid JSON: {e}") from e

    def _run_json_lines(self, args: List[str]) -> List[Any]:
        output = self._run_gh(args)
        try:
            return [orjson.loads(line) for line in output.splitlines() if line.strip()]
        except orjson.JSONDecodeError as e:
            raise GitHubError(f"gh {' '.join(args)} returned invalid JSON: {e}") from e

    # =========================================================================
    # Observe
    # =========================================================================

    def issue(self, number: int) -> Dict[str, Any]:
        num = str(number)
        data = self._run_json(["issue", "view", num, "--json", ISSUE_FIELDS])
        comments = self._run_json(["issue", "view", num, "--json", "comments"])
        return {
            "summary": _summary(data),
            "comments": _comments(comments.get("comments", [])),
        }

    def pull_request(self, number: int) -> Dict[str, Any]:
        num = str(number)
        data = self._run_json(["pr", "view", num, "--json", PR_FIELDS])
        files = self._run_json(["pr", "view", num, "--json", "files"])
        comments = self._run_json(["pr", "view", num, "--json", "comments"])
        # Inline review comments are only exposed by the REST API; one object
        # per line keeps paginated output parseable
        reviews = self._run_json_lines([
            "api", f"repos/{{owner}}/{{repo}}/pulls/{num}/comments", "--paginate", "--jq", ".[]"
        ])
        return {
            "summary": _summary(data),
            "files": [
                {"path": f["path"], "additions": f.get("additions"), "deletions": f.get("deletions")}
                for f in files.get("files", [])
            ],
            "checks": self._checks(num),
            "diff": self._run_gh(["pr", "diff", num]),
            "comments": _comments(comments.get("comments", [])),
            "reviewComments": [
                {
                    "id": c["id"],
                    "path": c.get("path"),
                    "line": c.get("line"),
                    "author": _login(c.get("user")),
                    "body": c.get("body", ""),
                    "createdAt": c.get("created_at"),
                    "inReplyToId": c.get("in_reply_to_id"),
                }
                for c in reviews
            ],
        }

    def _checks(self, num: str) -> List[Dict[str, str]]:
        # `gh pr checks` exits non-zero when checks are pending or absent;
        # whatever it printed is still the current picture
        output = self._run_gh(["pr", "checks", num, "--json", "name,state"], check=False)
        if not output.strip():
            return []
        try:
            return [{"name": c["name"], "state": c["state"]} for c in orjson.loads(output)]
        except (orjson.JSONDecodeError, KeyError, TypeError) as e:
            raise GitHubError(f"gh pr checks {num} returned unexpected output: {e}") from e

    def repository(self) -> Dict[str, Any]:
        issues = self._run_json([
            "issue", "list", "--json", "title,number,state,author,labels", "--limit", LIST_LIMIT
        ])
        pull_requests = self._run_json([
            "pr", "list", "--json", "title,number,state,author,labels,headRefName", "--limit", LIST_LIMIT
        ])
        return {
            "issues": [
                {
                    "number": i["number"],
                    "title": i["title"],
                    "state": i["state"],
                    "author": _login(i.get("author")),
                    "labels": _names(i.get("labels"), "name"),
                }
                for i in issues
            ],
            "pullRequests": [
                {
                    "number": p["number"],
                    "title": p["title"],
                    "state": p["state"],
                    "author": _login(p.get("author")),
                    "labels": _names(p.get("labels"), "name"),
                    "headBranch": p.get("headRefName"),
                }
                for p in pull_requests
            ],
        }

    # =========================================================================
    # Steer
    # =========================================================================

    def comment(self, number: int, body: str, target: CommentTarget,
                comment_id: Optional[int] = None):
        """Post a comment. Raises GitHubError if gh reports failure."""
        if not body.strip():
            raise ValueError("comment body cannot be empty")

        num = str(number)
        if target == CommentTarget.ISSUE:
            self._run_gh(["issue", "comment", num, "--body", body])
        elif target == CommentTarget.PULL_REQUEST:
            self._run_gh(["pr", "comment", num, "--body", body])
        elif target == CommentTarget.REVIEW_FEEDBACK:
            if comment_id is None:
                raise ValueError("replying to review feedback needs a comment id")
            self._run_gh([
                "api", f"repos/{{owner}}/{{repo}}/pulls/comments/{comment_id}/replies",
                "--method", "POST", "-f", f"body={body}",
            ])
        else:
            raise ValueError(f"unsupported comment target: {target}")
        logger.info("Posted %s comment on #%d", target.value, number)
