"""
Presentation — Display layer for Helm CLI

Contains display and formatting:
- Symbols: Visual vocabulary (unicode/ascii)
- Formatters: Truncation, timestamps, voyage/slate/logbook lines
- Template: Structured output with header/section/footer
"""

from .symbols import (
    SymbolSet, get_symbols, UNICODE, ASCII,
    safe_print, sanitize_control_chars,
)
from .formatters import (
    truncate, short_hash, format_size, format_timestamp,
    format_voyage, format_slate_entry, format_logbook_entry,
    SUMMARY_LENGTH,
)
from .template import OutputTemplate, TemplateSection

__all__ = [
    # Symbols
    "SymbolSet", "get_symbols", "UNICODE", "ASCII",
    "safe_print", "sanitize_control_chars",
    # Formatters
    "truncate", "short_hash", "format_size", "format_timestamp",
    "format_voyage", "format_slate_entry", "format_logbook_entry",
    "SUMMARY_LENGTH",
    # Template
    "OutputTemplate", "TemplateSection",
]
