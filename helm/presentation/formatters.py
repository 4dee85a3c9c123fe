"""
Formatters — Data-to-string transformations for consistent output

Centralized formatting for all CLI output:
- Text truncation with ellipsis
- Relative timestamps
- Byte sizes and hash prefixes
- One-line renderings of voyages, slate entries and logbook entries

Dependency direction: commands → presentation → core
"""

from typing import List, TYPE_CHECKING
from datetime import datetime, timezone

if TYPE_CHECKING:
    from ..core.logbook import LogbookEntry
    from ..core.slate import SlateEntry
    from ..core.voyage import Voyage

from .symbols import SymbolSet, sanitize_control_chars, symbol_for_status


# =============================================================================
# Display Truncation Constants
# =============================================================================

SUMMARY_LENGTH = 120      # Default for summaries
ID_DISPLAY_LENGTH = 8     # Voyage ID prefixes (e.g., "abc12345")
HASH_DISPLAY_LENGTH = 12  # Artifact hash prefixes


# =============================================================================
# Text Utilities
# =============================================================================

def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Truncate text with ellipsis, respecting full mode.

    Examples:
        truncate("Short", 50)                -> "Short" (no change)
        truncate("Any length", 50, full=True) -> "Any length" (no truncation)
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


def short_hash(artifact_hash: str) -> str:
    return artifact_hash[:HASH_DISPLAY_LENGTH]


def format_size(size: int) -> str:
    """Human-readable byte count: 512 B, 1.5 KB, 3.2 MB."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024 or unit == "GB":
            return f"{value:.1f} {unit}"
    return f"{size} B"


def format_timestamp(iso_str: str) -> str:
    """
    Format ISO timestamp for display.

    Returns:
        - < 1 hour:  "23m ago"
        - < 24 hours: "5h ago"
        - < 7 days:  "3d ago"
        - >= 7 days: "Jan 15" (month + day)
        - Invalid:   "unknown"
    """
    if not iso_str:
        return "unknown"

    try:
        if iso_str.endswith('Z'):
            iso_str = iso_str[:-1] + '+00:00'
        ts = datetime.fromisoformat(iso_str)
        if ts.tzinfo is None:
            # Assume UTC for naive timestamps
            ts = ts.replace(tzinfo=timezone.utc)

        total_seconds = (datetime.now(timezone.utc) - ts).total_seconds()
        if total_seconds < 0:
            # Future timestamp (clock skew)
            return "just now"

        minutes = int(total_seconds // 60)
        hours = int(total_seconds // 3600)
        days = int(total_seconds // 86400)

        if days >= 7:
            return ts.strftime("%b %d")
        elif days >= 1:
            return f"{days}d ago"
        elif hours >= 1:
            return f"{hours}h ago"
        elif minutes >= 1:
            return f"{minutes}m ago"
        return "just now"

    except (ValueError, TypeError, AttributeError):
        return "unknown"


# =============================================================================
# Domain Formatting
# =============================================================================

def format_voyage(symbols: SymbolSet, voyage: 'Voyage', full: bool = False) -> str:
    """
    One line per voyage.

    Example:
        ● [3f2a9c1e] Fix the flaky login test (2h ago)
    """
    marker = symbol_for_status(symbols, voyage.status.value)
    intent = truncate(sanitize_control_chars(voyage.intent), SUMMARY_LENGTH, full)
    line = f"{marker} [{voyage.short_id}] {intent} ({format_timestamp(voyage.created_at)})"
    if not voyage.is_active and voyage.ended_status:
        line += f" {symbols.arrow} {truncate(voyage.ended_status, 60, full)}"
    return line


def format_slate_entry(symbols: SymbolSet, entry: 'SlateEntry') -> str:
    """
    Example:
        ◌ file src/main.rs  a1b2c3d4e5f6  (5m ago)
    """
    return (
        f"{symbols.pending} {entry.target.describe()}  "
        f"{short_hash(entry.artifact_hash)}  ({format_timestamp(entry.observed_at)})"
    )


def format_logbook_entry(symbols: SymbolSet, entry: 'LogbookEntry', full: bool = False) -> List[str]:
    """
    An entry header line, its summary, and one line per bearing observation.

    Example:
        ◆ #3 alice (human/manual) commented on PR #12 (1h ago)
            Asked for a smaller diff
            ├─ ⌖ file src/lib.rs  a1b2c3d4e5f6
            └─ ⌖ PR #12  f6e5d4c3b2a1
    """
    marker = symbols.mutation if entry.action.is_mutation else symbols.record
    lines = [
        f"{marker} #{entry.id} {entry.identity} ({entry.role}/{entry.method}) "
        f"{entry.action.describe()} ({format_timestamp(entry.recorded_at)})",
        f"    {truncate(sanitize_control_chars(entry.summary), SUMMARY_LENGTH, full)}",
    ]
    for i, observation in enumerate(entry.bearing):
        branch = symbols.tree_end if i == len(entry.bearing) - 1 else symbols.tree_branch
        lines.append(
            f"    {branch} {symbols.bearing} {observation.target.describe()}  "
            f"{short_hash(observation.artifact_hash)}"
        )
    return lines
