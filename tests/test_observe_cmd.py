"""
Tests for ObserveCommand — Observations onto the slate

Tests:
- A file observation lands on the slate with its artifact
- Re-observing unchanged content reports it and stores nothing new
- Changed content replaces the pending observation
- Content matching a reduced artifact is flagged
- GitHub targets go through the CLI's client factory
- Argument parsing builds the right target
"""

import argparse

import orjson
import pytest

from helm.commands.observe_cmd import ObserveCommand, register_parser, target_from_args
from helm.core.target import (
    DirectoryTree, FileContents, GitHubIssue, GitHubPullRequest, GitHubRepository, RustProject,
)


@pytest.fixture
def observe_command(helm_factory):
    return helm_factory.create_command(ObserveCommand)


def _parse(*argv):
    parser = argparse.ArgumentParser()
    register_parser(parser.add_subparsers(dest='command'))
    return parser.parse_args(['observe', 'abcd'] + list(argv))


class TestObserve:
    def test_file_lands_on_slate(self, observe_command, helm_factory, store, capsys):
        helm_factory.write_file("src/main.rs", "fn main() {}")
        target = FileContents(paths=["src/main.rs"])

        observe_command.observe(store.voyage_id, target)

        entry = store.slate.get(target)
        assert entry is not None
        payload = store.artifacts.get_json(entry.artifact_hash)
        assert payload["contents"][0]["content"]["text"] == "fn main() {}"
        assert "file src/main.rs pending" in capsys.readouterr().out

    def test_unchanged_content(self, observe_command, helm_factory, store, capsys):
        helm_factory.write_file("a.txt", "same")
        target = FileContents(paths=["a.txt"])
        observe_command.observe(store.voyage_id, target)
        capsys.readouterr()

        observe_command.observe(store.voyage_id, target)

        output = capsys.readouterr().out
        assert "already stored" in output
        assert "Unchanged since last observation" in output
        assert store.artifacts.stats()["total"] == 1

    def test_changed_content_replaces(self, observe_command, helm_factory, store, capsys):
        target = FileContents(paths=["a.txt"])
        helm_factory.write_file("a.txt", "first")
        observe_command.observe(store.voyage_id, target)
        helm_factory.write_file("a.txt", "second")
        capsys.readouterr()

        observe_command.observe(store.voyage_id, target)

        assert "Replaced pending observation" in capsys.readouterr().out
        assert store.slate.count() == 1
        assert store.artifacts.stats()["total"] == 2

    def test_reduced_content_reported(self, observe_command, helm_factory, store, capsys):
        target = FileContents(paths=["a.txt"])
        helm_factory.write_file("a.txt", "large")
        observe_command.observe(store.voyage_id, target)
        store.artifacts.reduce(store.slate.get(target).artifact_hash, {"summary": "s"}, "model")
        capsys.readouterr()

        observe_command.observe(store.voyage_id, target)

        assert "Artifact was reduced; its payload is not stored" in capsys.readouterr().out

    def test_json_output(self, observe_command, helm_factory, store, capsys):
        helm_factory.write_file("a.txt", "hello")
        observe_command.observe(store.voyage_id, FileContents(paths=["a.txt"]), show_payload=True)

        payload = orjson.loads(capsys.readouterr().out)
        assert payload["kind"] == "fileContents"

    def test_github_issue(self, helm_factory, store, capsys):
        cli = helm_factory.create_cli_mock()
        cli.github.issue.return_value = {"summary": {"number": 5, "title": "Bug"}, "comments": []}
        command = helm_factory.create_command(ObserveCommand, cli)

        command.observe(store.voyage_id, GitHubIssue(number=5))

        cli.github.issue.assert_called_once_with(5)
        entry = store.slate.get(GitHubIssue(number=5))
        assert store.artifacts.get_json(entry.artifact_hash)["summary"]["title"] == "Bug"

    def test_unknown_voyage(self, observe_command, capsys):
        assert observe_command.observe("missing", FileContents(paths=["a"])) == 1


class TestTargetFromArgs:
    def test_files(self):
        assert target_from_args(_parse('files', 'b.rs', 'a.rs')) == FileContents(paths=["a.rs", "b.rs"])

    def test_tree(self):
        args = _parse('tree', 'src', '--skip', 'target', '--skip', 'node_modules', '--max-depth', '2')
        assert target_from_args(args) == DirectoryTree(root="src", skip=["node_modules", "target"], max_depth=2)

    def test_rust(self):
        assert target_from_args(_parse('rust', '.')) == RustProject(root=".")

    def test_github(self):
        assert target_from_args(_parse('issue', '3')) == GitHubIssue(number=3)
        assert target_from_args(_parse('pr', '4')) == GitHubPullRequest(number=4)
        assert target_from_args(_parse('repo')) == GitHubRepository()

    def test_json_flag(self):
        assert _parse('--json', 'repo').show_payload is True
