"""
LogbookCommand — The voyage's recorded history

Shows entries newest first with their bearings (the observations sealed
with each entry). A single entry can be shown with the lifecycle status of
every artifact it points at, and a stored payload can be printed by hash
(following a reduction to its summary when the original was compacted).
"""

from typing import Optional

import orjson

from ..commands.base import BaseCommand
from ..core.errors import ArtifactNotFound
from ..presentation.formatters import format_logbook_entry, short_hash
from ..presentation.symbols import safe_print, symbol_for_status
from ..presentation.template import OutputTemplate


class LogbookCommand(BaseCommand):
    """Command for reading a voyage's logbook."""

    def show(self, query: str, limit: Optional[int] = None, full: bool = False):
        """
        List entries, newest first.

        Args:
            query: Voyage ID, prefix, or intent keyword
            limit: Show at most this many entries
            full: Don't truncate summaries
        """
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            voyage = store.voyage()
            total = store.logbook.count()
            entries = store.logbook.entries(limit=limit, with_bearing=True)
            pending = store.slate.count()

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols, full=full)
        template.header("HELM LOGBOOK", f"[{voyage.short_id}] {voyage.intent}")
        if limit is not None and total > len(entries):
            template.scope(f"Showing {len(entries)} of {total} entries")

        if not entries:
            template.section("", "No entries yet.")
        else:
            blocks = ["\n".join(format_logbook_entry(symbols, entry, full)) for entry in reversed(entries)]
            template.section("ENTRIES", "\n\n".join(blocks))

        observations = sum(len(e.bearing) for e in entries)
        summary = f"{total} entries | {observations} observations sealed"
        if pending:
            summary += f" | {pending} pending"
        template.footer(summary)
        safe_print(template.render())
        return None

    def entry(self, query: str, entry_id: int):
        """Show one entry with the lifecycle status of each bearing artifact."""
        store = self.open_voyage(query)
        if store is None:
            return 1

        symbols = self.symbols
        with store:
            entry = store.logbook.entry(entry_id)
            statuses = {
                obs.artifact_hash: store.artifacts.status(obs.artifact_hash)
                for obs in entry.bearing
            }

        template = OutputTemplate(symbols=symbols, full=True)
        template.header("HELM LOGBOOK", f"Entry #{entry.id}")
        template.section("ENTRY", "\n".join(format_logbook_entry(symbols, entry, full=True)))

        if entry.bearing:
            lines = []
            for obs in entry.bearing:
                status = statuses[obs.artifact_hash]
                marker = symbol_for_status(symbols, status.value)
                lines.append(f"{marker} {short_hash(obs.artifact_hash)} {status.value:<10} "
                             f"{obs.target.describe()}")
            template.section("ARTIFACTS", "\n".join(lines))

        template.footer(f"Recorded {entry.recorded_at}", "Print a payload with: helm logbook "
                        f"{query} --artifact <hash>")
        safe_print(template.render())
        return None

    def artifact(self, query: str, prefix: str):
        """
        Print a stored payload.

        Accepts a hash prefix from the logbook or slate. A reduced artifact
        prints its summary instead.
        """
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            artifact_hash = self._match_hash(store, prefix)
            readable = store.artifacts.resolve(artifact_hash)
            data = store.artifacts.get(readable)

        if readable != artifact_hash:
            safe_print(f"# {short_hash(artifact_hash)} was reduced; showing summary {short_hash(readable)}")
        try:
            text = orjson.dumps(orjson.loads(data), option=orjson.OPT_INDENT_2).decode()
        except orjson.JSONDecodeError:
            text = data.decode('utf-8', errors='replace')
        safe_print(text)
        return None

    @staticmethod
    def _match_hash(store, prefix: str) -> str:
        """Full hash for a prefix among hashes the voyage references."""
        prefix = prefix.lower()
        if store.artifacts.exists(prefix):
            return prefix

        known = {entry.artifact_hash for entry in store.slate.list()}
        for entry in store.logbook.entries(with_bearing=True):
            known.update(obs.artifact_hash for obs in entry.bearing)

        matches = sorted(h for h in known if h.startswith(prefix))
        if len(matches) != 1:
            raise ArtifactNotFound(prefix)
        return matches[0]


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'logbook'


def register_parser(subparsers):
    """Register logbook command parser."""
    p = subparsers.add_parser('logbook', help='Show the voyage logbook with bearings')
    p.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')
    p.add_argument('--limit', '-n', type=int, metavar='N',
                   help='Show the latest N entries')
    p.add_argument('--full', action='store_true',
                   help='Show full summaries without truncation')
    target = p.add_mutually_exclusive_group()
    target.add_argument('--entry', '-e', type=int, metavar='ID',
                        help='Show one entry with artifact statuses')
    target.add_argument('--artifact', '-a', metavar='HASH',
                        help='Print a stored payload (hash or prefix)')
    return p


def handle(cli, args):
    """Handle logbook command dispatch."""
    cmd = cli._logbook_cmd
    if args.entry is not None:
        return cmd.entry(args.voyage, args.entry)
    elif args.artifact:
        return cmd.artifact(args.voyage, args.artifact)
    return cmd.show(args.voyage, limit=args.limit, full=args.full)
