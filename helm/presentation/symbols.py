"""
Symbols — Visual vocabulary for voyages, slates and logbooks

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for untrusted content
- sanitize_control_chars(): Strips terminal control sequences from
  observed content (issue bodies, file contents) before display
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Safe Output Utilities (Two-Layer Defense)
# =============================================================================
# Layer 1 (Security): sanitize_control_chars() - strips dangerous control chars
# Layer 2 (Encoding): safe_print() - handles display encoding gracefully

# Common Unicode to ASCII replacements for display
UNICODE_TO_ASCII = {
    '→': '->',
    '←': '<-',
    '…': '...',
    '–': '-',
    '—': '--',
    '“': '"',
    '”': '"',
    '‘': "'",
    '’': "'",
    '•': '*',
    '·': '.',
    '✓': '[+]',
    '✗': '[X]',
    '⚠': '[!]',
    '├': '|',
    '└': '`',
    '─': '-',
}


def sanitize_control_chars(text: str) -> str:
    """
    Layer 1 (Security): Remove dangerous control characters.

    Observed content comes from files and GitHub, so it may carry ANSI
    escapes or null bytes. Preserves: newlines, tabs, carriage returns.
    """
    if not text:
        return text

    # Remove control chars except \t (0x09), \n (0x0A), \r (0x0D)
    return ''.join(
        char for char in text
        if ord(char) >= 32 or ord(char) in (9, 10, 13)
    )


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Layer 2 (Encoding): Print with graceful encoding fallback.

    Handles UnicodeEncodeError by replacing unencodable characters
    with ASCII equivalents or '?' as last resort.
    """
    if file is None:
        file = sys.stdout

    try:
        print(text, end=end, file=file)
    except UnicodeEncodeError:
        # Replace known Unicode chars with ASCII equivalents
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            print(safe_text, end=end, file=file)
        except UnicodeEncodeError:
            # Last resort: replace all unencodable chars with ?
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            print(encoded.decode(encoding), end=end, file=file)


@dataclass(frozen=True)
class SymbolSet:
    """Complete set of symbols for voyage, slate and logbook display."""
    # Voyage states
    active: str
    ended: str

    # Logbook entries
    mutation: str    # action changed collaborative state
    record: str      # log-only entry
    bearing: str     # observation sealed with an entry

    # Slate
    pending: str

    # Artifact lifecycle
    stowed: str
    reduced: str
    jettisoned: str

    # Status markers
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str

    # Tree/structure markers
    tree_branch: str
    tree_end: str
    bullet: str

    # Text truncation
    ellipsis: str


UNICODE = SymbolSet(
    active='●',
    ended='○',
    mutation='◆',
    record='◇',
    bearing='⌖',
    pending='◌',
    stowed='■',
    reduced='▣',
    jettisoned='□',
    check_pass='✓',
    check_warn='⚠',
    check_fail='✗',
    arrow='→',
    tree_branch='├─',
    tree_end='└─',
    bullet='•',
    ellipsis='…',
)

ASCII = SymbolSet(
    active='*',
    ended='o',
    mutation='[M]',
    record='[L]',
    bearing='@',
    pending='~',
    stowed='[S]',
    reduced='[R]',
    jettisoned='[J]',
    check_pass='[+]',
    check_warn='[!]',
    check_fail='[X]',
    arrow='->',
    tree_branch='|-',
    tree_end='`-',
    bullet='*',
    ellipsis='...',
)

STATUS_TO_SYMBOL = {
    'active': 'active',
    'ended': 'ended',
    'stowed': 'stowed',
    'reduced': 'reduced',
    'jettisoned': 'jettisoned',
}


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    """
    # Explicit environment override
    if os.environ.get('HELM_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('HELM_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        # Windows code pages that don't support our Unicode symbols
        if encoding_lower.startswith('cp') or encoding_lower in ('ascii', 'latin1', 'iso88591'):
            return False

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    if 'utf-8' in lang or 'utf8' in lang or 'utf-8' in lc_all or 'utf8' in lc_all:
        return True

    if stdout_encoding and 'utf' in stdout_encoding.lower():
        return True

    # Default: ASCII for safety
    return False


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII


def symbol_for_status(symbols: SymbolSet, status: str) -> str:
    """Symbol for a voyage or artifact status."""
    attr = STATUS_TO_SYMBOL.get(status)
    return getattr(symbols, attr) if attr else symbols.bullet
