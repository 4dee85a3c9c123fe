"""
VoyageCommand — Voyage lifecycle

Handles:
- Creating a voyage from an intent
- Listing voyages under the storage root
- Showing one voyage with its store statistics
- Ending a voyage with an optional closing status
"""

from typing import Optional

from ..commands.base import BaseCommand
from ..presentation.formatters import format_size, format_timestamp, format_voyage
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


class VoyageCommand(BaseCommand):
    """Command for creating, listing, showing and ending voyages."""

    def new(self, intent: str, voyage_id: Optional[str] = None, quiet: bool = False):
        """
        Create a voyage and print its ID.

        Args:
            intent: What the voyage is for
            voyage_id: Explicit UUID (default: generated)
            quiet: Print the bare ID only (for scripts and agents)
        """
        with self.storage.create(intent, voyage_id) as store:
            voyage = store.voyage()

        if quiet:
            print(voyage.id)
            return

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM VOYAGE", "Voyage Created")
        template.section("VOYAGE", f"{voyage.id}\n  \"{voyage.intent}\"")
        template.section("STORE", str(store.path))
        template.footer(
            f"{symbols.check_pass} Voyage [{voyage.short_id}] is active",
            f"Observe with: helm observe {voyage.short_id} files <path>"
        )
        safe_print(template.render())

    def list(self, show_all: bool = False, full: bool = False):
        """
        List voyages, most recent first.

        Args:
            show_all: Include ended voyages
            full: Don't truncate intents
        """
        symbols = self.symbols
        voyages = self.storage.list_voyages()
        active = [v for v in voyages if v.is_active]
        shown = voyages if show_all else active
        shown = list(reversed(shown))

        template = OutputTemplate(symbols=symbols, full=full)
        template.header("HELM VOYAGES", str(self.storage.root))

        if not shown:
            template.section("", "No voyages." if show_all else "No active voyages.")
            template.footer(hint='Start one with: helm voyage new "<intent>"')
        else:
            template.section("VOYAGES", "\n".join(format_voyage(symbols, v, full) for v in shown))
            ended = len(voyages) - len(active)
            summary = f"{len(active)} active"
            if ended:
                summary += f" | {ended} ended"
            hint = None if show_all or not ended else "Include ended voyages with: helm voyage list --all"
            template.footer(summary, hint)

        safe_print(template.render())

    def show(self, query: str):
        """Show one voyage: status, slate, logbook and artifact statistics."""
        store = self.open_voyage(query)
        if store is None:
            return 1

        symbols = self.symbols
        with store:
            voyage = store.voyage()
            stats = store.artifacts.stats()
            pending = store.slate.count()
            entries = store.logbook.count()
            latest = store.logbook.latest()

        template = OutputTemplate(symbols=symbols)
        template.header("HELM VOYAGE", f"[{voyage.short_id}]")
        template.section("VOYAGE", format_voyage(symbols, voyage, full=True))

        status_lines = [
            f"ID: {voyage.id}",
            f"Created: {voyage.created_at} ({format_timestamp(voyage.created_at)})",
            f"Status: {voyage.status.value}",
        ]
        if voyage.ended_at:
            status_lines.append(f"Ended: {voyage.ended_at}")
        if voyage.ended_status:
            status_lines.append(f"Closing status: {voyage.ended_status}")
        template.section("STATUS", "\n".join(status_lines))

        template.section("ARTIFACTS", "\n".join([
            f"{symbols.stowed} stowed: {stats['stowed']}",
            f"{symbols.reduced} reduced: {stats['reduced']}",
            f"{symbols.jettisoned} jettisoned: {stats['jettisoned']}",
            f"Payload bytes: {format_size(stats['raw_bytes'])} raw, "
            f"{format_size(stats['stored_bytes'])} stored",
        ]))

        activity = [
            f"{symbols.pending} pending observations: {pending}",
            f"Logbook entries: {entries}",
        ]
        if latest is not None:
            activity.append(f"Latest: #{latest.id} {latest.action.describe()} "
                            f"({format_timestamp(latest.recorded_at)})")
        template.section("ACTIVITY", "\n".join(activity))

        template.footer(f"{stats['total']} artifacts | {entries} entries")
        safe_print(template.render())
        return None

    def end(self, query: str, status_text: Optional[str] = None):
        """Mark a voyage ended. Ending twice is an error."""
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            voyage = store.end(status_text)

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM VOYAGE", "Voyage Ended")
        template.section("VOYAGE", format_voyage(symbols, voyage, full=True))
        template.footer(f"{symbols.check_pass} Voyage [{voyage.short_id}] ended")
        safe_print(template.render())
        return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'voyage'


def register_parser(subparsers):
    """Register voyage command parser with new/list/show/end subcommands."""
    p = subparsers.add_parser('voyage', help='Create, list, show and end voyages')
    voyage_sub = p.add_subparsers(dest='voyage_command', metavar='{new,list,show,end}')
    voyage_sub.required = True

    p_new = voyage_sub.add_parser('new', help='Create a voyage and print its ID')
    p_new.add_argument('intent', help='What this voyage is for')
    p_new.add_argument('--id', dest='voyage_id', metavar='UUID',
                       help='Use this voyage ID instead of a generated one')
    p_new.add_argument('--quiet', '-q', action='store_true',
                       help='Print the bare voyage ID only')

    p_list = voyage_sub.add_parser('list', help='List voyages')
    p_list.add_argument('--all', '-a', dest='show_all', action='store_true',
                        help='Include ended voyages')
    p_list.add_argument('--full', action='store_true',
                        help='Show full intents without truncation')

    p_show = voyage_sub.add_parser('show', help='Show voyage status and store statistics')
    p_show.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')

    p_end = voyage_sub.add_parser('end', help='End a voyage')
    p_end.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')
    p_end.add_argument('--status', dest='status_text', metavar='TEXT',
                       help='Closing status (e.g., "merged", "abandoned")')

    return p


def handle(cli, args):
    """Handle voyage command dispatch."""
    cmd = cli._voyage_cmd
    if args.voyage_command == 'new':
        return cmd.new(args.intent, voyage_id=args.voyage_id, quiet=args.quiet)
    elif args.voyage_command == 'list':
        return cmd.list(show_all=args.show_all, full=args.full)
    elif args.voyage_command == 'show':
        return cmd.show(args.voyage)
    elif args.voyage_command == 'end':
        return cmd.end(args.voyage, status_text=args.status_text)
    return None
