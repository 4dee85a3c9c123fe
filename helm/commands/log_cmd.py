"""
LogCommand — Record a state without acting

Seals the slate under a log entry: the status says where things stand,
the summary says what was learned from the pending observations. Nothing
outside the voyage changes.
"""

from ..commands.base import BaseCommand
from ..core.action import Log
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


class LogCommand(BaseCommand):
    """Command for sealing the slate with a record-only action."""

    def log(self, query: str, status: str, summary: str):
        # Identity before opening: a missing identity should fail before any I/O
        identity = self.identity
        action = Log(status=status)

        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            voyage = store.voyage()
            result = store.seal(identity, action, summary, self.role, self.method)

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM LOG", f"[{voyage.short_id}] {voyage.intent}")
        template.section("ENTRY", f"{symbols.record} #{result.entry_id} {action.describe()}\n    {summary}")
        template.footer(
            f"{symbols.check_pass} Sealed {result.sealed} observation(s) as {identity}",
            f"Review with: helm logbook {query}"
        )
        safe_print(template.render())
        return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'log'


def register_parser(subparsers):
    """Register log command parser."""
    p = subparsers.add_parser('log', help='Seal the slate with a status, no external action')
    p.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')
    p.add_argument('status', help='Where things stand (e.g., "investigating")')
    p.add_argument('--summary', '-s', required=True,
                   help='What was learned from the pending observations')
    return p


def handle(cli, args):
    """Handle log command dispatch."""
    return cli._log_cmd.log(args.voyage, args.status, args.summary)
