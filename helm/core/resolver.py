"""
Voyage Resolver — Find a voyage from whatever the user typed

Users can reference a voyage by:
- Full ID (exact match)
- ID prefix (any length, must be unambiguous)
- Keyword in the intent (case-insensitive)

Ambiguous and missing matches come back with candidates so the CLI can
show what the user might have meant.
"""

from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from .voyage import Storage, Voyage


class ResolveStatus(Enum):
    """Resolution outcome."""
    FOUND = "found"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass
class ResolveResult:
    """Result of voyage resolution."""
    status: ResolveStatus
    voyage: Optional['Voyage'] = None
    candidates: List['Voyage'] = field(default_factory=list)
    query: str = ""


class VoyageResolver:
    """
    Voyage resolution for CLI arguments.

    Resolution strategies (in order):
    1. Exact match (full ID)
    2. Prefix match (any non-empty prefix)
    3. Keyword match (search intents)
    """

    def __init__(self, storage: 'Storage'):
        self.storage = storage

    def resolve(self, query: str) -> ResolveResult:
        query = query.strip()
        voyages = self.storage.list_voyages()
        query_lower = query.lower()

        # Strategy 1: Exact match
        for voyage in voyages:
            if voyage.id == query_lower:
                return ResolveResult(status=ResolveStatus.FOUND, voyage=voyage, query=query)

        # Strategy 2: Prefix match
        if query:
            prefix_matches = [v for v in voyages if v.id.startswith(query_lower)]
            if len(prefix_matches) == 1:
                return ResolveResult(status=ResolveStatus.FOUND, voyage=prefix_matches[0], query=query)
            elif len(prefix_matches) > 1:
                return ResolveResult(status=ResolveStatus.AMBIGUOUS, candidates=prefix_matches, query=query)

        # Strategy 3: Keyword match in intents
        keyword_matches = [v for v in voyages if query_lower and query_lower in v.intent.lower()]
        if len(keyword_matches) == 1:
            return ResolveResult(status=ResolveStatus.FOUND, voyage=keyword_matches[0], query=query)
        elif len(keyword_matches) > 1:
            return ResolveResult(
                status=ResolveStatus.AMBIGUOUS,
                candidates=keyword_matches[:10],
                query=query
            )

        # Not found - most recent voyages as suggestions
        return ResolveResult(
            status=ResolveStatus.NOT_FOUND,
            candidates=voyages[-5:][::-1],
            query=query
        )


def format_resolve_prompt(result: ResolveResult) -> str:
    """Format a resolution result for CLI output."""
    if result.status == ResolveStatus.FOUND:
        voyage = result.voyage
        return f"Found: voyage [{voyage.short_id}]\n  \"{voyage.intent}\""

    elif result.status == ResolveStatus.AMBIGUOUS:
        lines = [f"Multiple voyages match \"{result.query}\":\n"]
        for i, voyage in enumerate(result.candidates, 1):
            lines.append(f"  {i}. [{voyage.short_id}] {voyage.intent[:50]}")
        lines.append("\nUse a longer ID prefix.")
        return "\n".join(lines)

    else:  # NOT_FOUND
        lines = [f"No voyage matches \"{result.query}\".\n"]
        if result.candidates:
            lines.append("Recent voyages:")
            for voyage in result.candidates:
                lines.append(f"  [{voyage.short_id}] {voyage.intent[:50]}")
        lines.append("\nTry: helm voyage list")
        return "\n".join(lines)
