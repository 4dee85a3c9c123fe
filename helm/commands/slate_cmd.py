"""
SlateCommand — Pending observations

Lists what has been observed since the last seal. Entries can be erased
one at a time (by listing position or target key) or cleared together;
erased observations keep their artifacts, they just won't be sealed.
"""

from typing import Optional

from ..commands.base import BaseCommand
from ..core.errors import SerializationError
from ..core.target import parse_target
from ..presentation.formatters import format_slate_entry
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


class SlateCommand(BaseCommand):
    """Command for listing and pruning a voyage's slate."""

    def list(self, query: str, keys: bool = False):
        """
        Show pending observations, numbered for --erase.

        Args:
            query: Voyage ID, prefix, or intent keyword
            keys: Also print each entry's canonical target key
        """
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            voyage = store.voyage()
            entries = store.slate.list()

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM SLATE", f"[{voyage.short_id}] {voyage.intent}")

        if not entries:
            template.section("", "Slate is empty.")
            template.footer(hint=f"Observe with: helm observe {query} files <path>")
        else:
            lines = []
            for i, entry in enumerate(entries, 1):
                lines.append(f"{i:>3}. {format_slate_entry(symbols, entry)}")
                if keys:
                    lines.append(f"     {entry.key}")
            template.section("PENDING", "\n".join(lines))
            template.footer(
                f"{len(entries)} pending observation(s)",
                f"Seal with: helm log {query} \"<status>\" --summary \"<what you learned>\""
            )

        safe_print(template.render())
        return None

    def erase(self, query: str, selector: str):
        """
        Drop one pending observation.

        Args:
            selector: 1-based position from `helm slate` or a canonical target key
        """
        store = self.open_voyage(query)
        if store is None:
            return 1

        symbols = self.symbols
        with store:
            target = self._select(store.slate.list(), selector)
            removed = target is not None and store.slate.erase(target)

        template = OutputTemplate(symbols=symbols)
        template.header("HELM SLATE", "Erase")
        if removed:
            template.section("ERASED", target.describe())
            template.footer(f"{symbols.check_pass} Observation removed from slate")
        else:
            template.section("STATUS", f"No pending observation matches: {selector}")
            template.footer(hint=f"List with: helm slate {query} --keys")
        safe_print(template.render())
        return None if removed else 1

    def clear(self, query: str):
        """Drop every pending observation."""
        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            removed = store.slate.clear()

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM SLATE", "Clear")
        template.footer(f"{symbols.check_pass} Removed {removed} pending observation(s)")
        safe_print(template.render())
        return None

    @staticmethod
    def _select(entries, selector: str) -> Optional[object]:
        """Target for a listing position or target key, or None."""
        if selector.isdigit():
            index = int(selector)
            if 1 <= index <= len(entries):
                return entries[index - 1].target
            return None
        try:
            return parse_target(selector)
        except SerializationError:
            return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'slate'


def register_parser(subparsers):
    """Register slate command parser."""
    p = subparsers.add_parser('slate', help='List, erase or clear pending observations')
    p.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')
    mode = p.add_mutually_exclusive_group()
    mode.add_argument('--erase', metavar='KEY',
                      help='Erase one observation (listing number or target key)')
    mode.add_argument('--clear', action='store_true',
                      help='Erase every pending observation')
    p.add_argument('--keys', action='store_true',
                   help='Show canonical target keys')
    return p


def handle(cli, args):
    """Handle slate command dispatch."""
    cmd = cli._slate_cmd
    if args.erase:
        return cmd.erase(args.voyage, args.erase)
    elif args.clear:
        return cmd.clear(args.voyage)
    return cmd.list(args.voyage, keys=args.keys)
