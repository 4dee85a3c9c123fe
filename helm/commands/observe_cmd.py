"""
ObserveCommand — Look at the world and put what was seen on the slate

Each observation fetches a payload for one target, stores it by content
hash, and upserts the target's slate row in a single transaction. Observing
the same target again replaces its pending observation; observing
unchanged content stores nothing new.

Sources:
- files PATH...           file contents
- tree ROOT               directory listing (respects .gitignore)
- rust ROOT               Rust project orientation (tree + manifests + docs)
- issue N / pr N / repo   GitHub, through the acting identity's gh config
"""

import orjson

from ..commands.base import BaseCommand
from ..core.artifacts import ArtifactStatus, canonical_bytes, content_hash
from ..core.target import (
    DirectoryTree, FileContents, GitHubIssue, GitHubPullRequest, GitHubRepository,
    RustProject, Target,
)
from ..presentation.formatters import format_size, format_slate_entry, short_hash
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


class ObserveCommand(BaseCommand):
    """Command for observing targets into a voyage's slate."""

    def observe(self, query: str, target: Target, show_payload: bool = False):
        """
        Observe a target and record it on the voyage's slate.

        Args:
            query: Voyage ID, prefix, or intent keyword
            target: What to observe
            show_payload: Also print the payload as JSON
        """
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            payload = self._cli.observer.observe(target)
            previous = store.slate.get(target)
            known = store.artifacts.exists(content_hash(canonical_bytes(payload)))
            entry = store.observe(target, payload)
            artifact = store.artifacts.info(entry.artifact_hash)

        if show_payload:
            print(orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS).decode())
            return None

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM OBSERVE", target.describe())
        template.section("SLATE", format_slate_entry(symbols, entry))

        details = [f"Artifact: {short_hash(entry.artifact_hash)} ({format_size(artifact.size)})"]
        if known:
            details.append(f"{symbols.check_pass} Content already stored; nothing new written")
        if artifact.status != ArtifactStatus.STOWED:
            details.append(
                f"{symbols.check_warn} Artifact was {artifact.status.value}; its payload is not stored"
            )
        if previous is not None:
            if previous.artifact_hash == entry.artifact_hash:
                details.append("Unchanged since last observation")
            else:
                details.append(f"Replaced pending observation {short_hash(previous.artifact_hash)}")
        template.section("STATUS", "\n".join(details))

        template.footer(
            f"{symbols.pending} {target.describe()} pending",
            f"Seal with: helm log {query} \"<status>\" --summary \"<what you learned>\""
        )
        safe_print(template.render())
        return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'observe'


def register_parser(subparsers):
    """Register observe command parser with one subcommand per target kind."""
    p = subparsers.add_parser('observe', help='Observe a target onto the voyage slate')
    p.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')
    p.add_argument('--json', dest='show_payload', action='store_true',
                   help='Print the observed payload as JSON')

    source = p.add_subparsers(dest='source', metavar='{files,tree,rust,issue,pr,repo}')
    source.required = True

    p_files = source.add_parser('files', help='Read file contents')
    p_files.add_argument('paths', nargs='+', help='Files to read')

    p_tree = source.add_parser('tree', help='Walk a directory tree')
    p_tree.add_argument('root', help='Directory to walk')
    p_tree.add_argument('--skip', action='append', default=[], metavar='NAME',
                        help='Directory name to skip at any depth (repeatable)')
    p_tree.add_argument('--max-depth', type=int, metavar='N',
                        help='Levels to list below the root (default: unlimited)')

    p_rust = source.add_parser('rust', help='Observe a Rust project: tree, Cargo.toml, docs')
    p_rust.add_argument('root', help='Project root')

    p_issue = source.add_parser('issue', help='Observe a GitHub issue')
    p_issue.add_argument('number', type=int, help='Issue number')

    p_pr = source.add_parser('pr', help='Observe a GitHub pull request')
    p_pr.add_argument('number', type=int, help='Pull request number')

    source.add_parser('repo', help='Observe open issues and pull requests of the repository')

    return p


def target_from_args(args) -> Target:
    """Build the target named by the observe subcommand."""
    if args.source == 'files':
        return FileContents(paths=args.paths)
    elif args.source == 'tree':
        return DirectoryTree(root=args.root, skip=args.skip, max_depth=args.max_depth)
    elif args.source == 'rust':
        return RustProject(root=args.root)
    elif args.source == 'issue':
        return GitHubIssue(number=args.number)
    elif args.source == 'pr':
        return GitHubPullRequest(number=args.number)
    elif args.source == 'repo':
        return GitHubRepository()
    raise ValueError(f"unknown observe source: {args.source}")


def handle(cli, args):
    """Handle observe command dispatch."""
    return cli._observe_cmd.observe(args.voyage, target_from_args(args), show_payload=args.show_payload)
