"""
Tests for GitHubClient — `gh` invocations per identity

All tests mock subprocess.run. No network, no gh install required.
"""

import subprocess
from unittest.mock import patch

import orjson
import pytest

from helm.core.action import CommentTarget
from helm.services.github import GitHubClient, GitHubError, gh_config_dir


def _completed(stdout="", returncode=0):
    return subprocess.CompletedProcess(args=["gh"], returncode=returncode, stdout=stdout, stderr="")


@pytest.fixture
def client(tmp_path):
    config_dir = tmp_path / "gh" / "alice"
    config_dir.mkdir(parents=True)
    return GitHubClient(config_dir=config_dir, repo_path=tmp_path)


class TestConfigDir:
    def test_existing_dir(self, tmp_path):
        (tmp_path / "alice").mkdir()
        assert gh_config_dir("alice", str(tmp_path)) == tmp_path / "alice"

    def test_missing_dir_explains_setup(self, tmp_path):
        with pytest.raises(GitHubError) as exc:
            gh_config_dir("bob", str(tmp_path))
        assert "gh auth login" in str(exc.value)


class TestRunGh:
    def test_sets_config_dir(self, client):
        with patch("helm.services.github.subprocess.run", return_value=_completed("[]")) as run:
            client._run_gh(["issue", "list"])

        kwargs = run.call_args.kwargs
        assert run.call_args.args[0] == ["gh", "issue", "list"]
        assert kwargs["env"]["GH_CONFIG_DIR"] == str(client.config_dir)
        assert kwargs["cwd"] == client.repo_path

    def test_missing_gh(self, client):
        with patch("helm.services.github.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(GitHubError) as exc:
                client._run_gh(["repo", "view"])
        assert "not found" in str(exc.value)

    def test_failure_carries_stderr(self, client):
        error = subprocess.CalledProcessError(1, ["gh"], stderr="HTTP 404: Not Found\n")
        with patch("helm.services.github.subprocess.run", side_effect=error):
            with pytest.raises(GitHubError) as exc:
                client._run_gh(["issue", "view", "1"])
        assert "HTTP 404" in str(exc.value)

    def test_invalid_json(self, client):
        with patch("helm.services.github.subprocess.run", return_value=_completed("not json")):
            with pytest.raises(GitHubError):
                client._run_json(["issue", "view", "1"])


ISSUE = {
    "title": "Login fails", "number": 7, "state": "OPEN",
    "author": {"login": "alice"}, "labels": [{"name": "bug"}],
    "assignees": [{"login": "bob"}], "body": "",
}


class TestObserve:
    def test_issue(self, client):
        comments = {"comments": [{"author": {"login": "bob"}, "body": "+1", "createdAt": "2026-01-01"}]}
        outputs = [_completed(orjson.dumps(ISSUE).decode()), _completed(orjson.dumps(comments).decode())]
        with patch("helm.services.github.subprocess.run", side_effect=outputs):
            payload = client.issue(7)

        assert payload["summary"] == {
            "number": 7, "title": "Login fails", "state": "OPEN", "author": "alice",
            "labels": ["bug"], "assignees": ["bob"], "body": None,
        }
        assert payload["comments"] == [{"author": "bob", "body": "+1", "createdAt": "2026-01-01"}]

    def test_pull_request(self, client):
        pr = dict(ISSUE, headRefName="fix-login", baseRefName="main")
        review = {"id": 55, "path": "src/a.rs", "line": 3, "user": {"login": "carol"},
                  "body": "nit", "created_at": "2026-01-02", "in_reply_to_id": None}
        outputs = [
            _completed(orjson.dumps(pr).decode()),
            _completed(orjson.dumps({"files": [{"path": "src/a.rs", "additions": 2, "deletions": 1}]}).decode()),
            _completed(orjson.dumps({"comments": []}).decode()),
            _completed(orjson.dumps(review).decode() + "\n"),
            _completed(orjson.dumps([{"name": "ci", "state": "SUCCESS"}]).decode()),
            _completed("diff --git a/src/a.rs b/src/a.rs\n"),
        ]
        with patch("helm.services.github.subprocess.run", side_effect=outputs):
            payload = client.pull_request(7)

        assert payload["summary"]["headBranch"] == "fix-login"
        assert payload["files"] == [{"path": "src/a.rs", "additions": 2, "deletions": 1}]
        assert payload["checks"] == [{"name": "ci", "state": "SUCCESS"}]
        assert payload["diff"].startswith("diff --git")
        assert payload["reviewComments"][0]["id"] == 55
        assert payload["reviewComments"][0]["author"] == "carol"

    def test_pending_checks_tolerated(self, client):
        with patch("helm.services.github.subprocess.run", return_value=_completed("", returncode=8)):
            assert client._checks("7") == []

    def test_repository(self, client):
        issues = [{"title": "a", "number": 1, "state": "OPEN", "author": None, "labels": []}]
        prs = [{"title": "b", "number": 2, "state": "OPEN", "author": {"login": "x"},
                "labels": [], "headRefName": "feature"}]
        outputs = [_completed(orjson.dumps(issues).decode()), _completed(orjson.dumps(prs).decode())]
        with patch("helm.services.github.subprocess.run", side_effect=outputs):
            payload = client.repository()

        assert payload["issues"][0]["author"] is None
        assert payload["pullRequests"][0]["headBranch"] == "feature"


class TestComment:
    @pytest.mark.parametrize("target,expected", [
        (CommentTarget.ISSUE, ["gh", "issue", "comment", "3", "--body", "hello"]),
        (CommentTarget.PULL_REQUEST, ["gh", "pr", "comment", "3", "--body", "hello"]),
    ])
    def test_issue_and_pr(self, client, target, expected):
        with patch("helm.services.github.subprocess.run", return_value=_completed()) as run:
            client.comment(3, "hello", target)
        assert run.call_args.args[0] == expected

    def test_review_reply(self, client):
        with patch("helm.services.github.subprocess.run", return_value=_completed()) as run:
            client.comment(3, "done", CommentTarget.REVIEW_FEEDBACK, comment_id=55)

        args = run.call_args.args[0]
        assert "repos/{owner}/{repo}/pulls/comments/55/replies" in args
        assert "body=done" in args

    def test_review_reply_needs_id(self, client):
        with pytest.raises(ValueError):
            client.comment(3, "done", CommentTarget.REVIEW_FEEDBACK)

    def test_empty_body(self, client):
        with pytest.raises(ValueError):
            client.comment(3, "  ", CommentTarget.ISSUE)
