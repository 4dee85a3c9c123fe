"""
OutputTemplate — Consistent CLI output structure

Builder for structured command output with header, sections, and footer.

Usage:
    from helm.presentation.template import OutputTemplate

    template = OutputTemplate()
    template.header("HELM LOGBOOK", voyage.intent)
    template.section("ENTRIES", entries_content)
    template.footer("3 entries | 5 observations sealed")
    print(template.render())
"""

import shutil
from dataclasses import dataclass
from typing import List, Optional

from .symbols import SymbolSet, get_symbols


HEADER_CHAR = "="
SECTION_CHAR = "-"
DEFAULT_WIDTH = 80


@dataclass
class TemplateSection:
    """A titled section of output."""
    title: str
    content: str


class OutputTemplate:
    """
    Builder for structured CLI output.

    - HEADER: Command identity and scope line
    - SECTIONS: Titled content blocks
    - FOOTER: Summary metrics and an optional next-step hint
    """

    def __init__(
        self,
        symbols: Optional[SymbolSet] = None,
        width: Optional[int] = None,
        full: bool = False
    ):
        self.symbols = symbols or get_symbols()
        self.width = width or shutil.get_terminal_size().columns or DEFAULT_WIDTH
        self.full = full

        self._title: Optional[str] = None
        self._subtitle: Optional[str] = None
        self._scope: Optional[str] = None
        self._sections: List[TemplateSection] = []
        self._summary: Optional[str] = None
        self._hint: Optional[str] = None

    # =========================================================================
    # Builder Methods
    # =========================================================================

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = title
        self._subtitle = subtitle
        return self

    def scope(self, text: str) -> "OutputTemplate":
        """Set scope line (count/context info in header)."""
        self._scope = text
        return self

    def section(self, title: str, content: str) -> "OutputTemplate":
        self._sections.append(TemplateSection(title=title, content=content))
        return self

    def footer(self, summary: Optional[str] = None, hint: Optional[str] = None) -> "OutputTemplate":
        self._summary = summary
        self._hint = hint
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> str:
        lines: List[str] = []

        if self._title:
            lines.extend(self._render_header())

        for section in self._sections:
            lines.extend(self._render_section(section))

        lines.extend(self._render_footer())
        return "\n".join(lines)

    def _render_header(self) -> List[str]:
        border = HEADER_CHAR * self.width
        title_line = f"{self._title} - {self._subtitle}" if self._subtitle else self._title
        lines = [border, title_line, border]
        if self._scope:
            lines.append(self._scope)
        lines.append("")
        return lines

    def _render_section(self, section: TemplateSection) -> List[str]:
        lines: List[str] = []
        if section.title:
            lines.append(section.title)
            lines.append(SECTION_CHAR * len(section.title))
        if section.content:
            lines.append(section.content)
        lines.append("")
        return lines

    def _render_footer(self) -> List[str]:
        lines = [SECTION_CHAR * self.width]
        if self._summary:
            lines.append(f"Summary: {self._summary}")
        if self._hint:
            lines.append(f"{self.symbols.arrow} {self._hint}")
        lines.append(HEADER_CHAR * self.width)
        return lines

