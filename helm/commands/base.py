"""
BaseCommand — Shared foundation for all CLI commands

Provides access to CLI resources via composition.
Commands receive the CLI instance and access its resources through properties.
"""

from typing import Optional, TYPE_CHECKING

from ..core.resolver import ResolveStatus, format_resolve_prompt
from ..presentation.symbols import safe_print

if TYPE_CHECKING:
    from ..cli import HelmCLI
    from ..core.voyage import VoyageStore


class BaseCommand:
    """
    Base class for CLI commands with access to shared resources.

    Commands don't open their own storage or reload config; they go
    through the CLI instance.
    """

    def __init__(self, cli: 'HelmCLI'):
        self._cli = cli

    # -------------------------------------------------------------------------
    # Core resources (convenience properties)
    # -------------------------------------------------------------------------

    @property
    def project_dir(self):
        """Directory relative target paths resolve against."""
        return self._cli.project_dir

    @property
    def storage(self):
        """Voyage storage root."""
        return self._cli.storage

    @property
    def config(self):
        """Application configuration."""
        return self._cli.config

    @property
    def symbols(self):
        """Symbol set for display (Unicode/ASCII)."""
        return self._cli.symbols

    @property
    def resolver(self):
        """Voyage resolver for ID prefixes and intent keywords."""
        return self._cli.resolver

    # -------------------------------------------------------------------------
    # Provenance (resolved lazily; only recording commands need it)
    # -------------------------------------------------------------------------

    @property
    def identity(self) -> str:
        """Acting identity. Raises IdentityRequired when none is configured."""
        return self._cli.identity

    @property
    def role(self) -> str:
        return self._cli.role

    @property
    def method(self) -> str:
        return self._cli.method

    # -------------------------------------------------------------------------
    # Voyage lookup
    # -------------------------------------------------------------------------

    def open_voyage(self, query: str) -> Optional['VoyageStore']:
        """
        Resolve user input to a voyage and open it.

        Prints candidates and returns None when the query is ambiguous or
        matches nothing.
        """
        result = self.resolver.resolve(query)
        if result.status != ResolveStatus.FOUND:
            safe_print(format_resolve_prompt(result))
            return None
        return self.storage.open(result.voyage.id)
