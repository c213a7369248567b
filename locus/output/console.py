"""
Locus Console Output
=====================

Rich terminal display for section tables, symbol lists and lookup results.
Uses the :class:`~shared.console.LocusConsole` abstraction for consistent
styling.
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich.markup import escape

from shared.console import LocusConsole

from locus.core.models import Section, Symbol, SymbolScope

_SCOPE_STYLES: dict[str, str] = {
    SymbolScope.LOCAL.value: "bright_cyan",
    SymbolScope.GLOBAL.value: "bright_green",
    SymbolScope.BOTH.value: "yellow",
    SymbolScope.NEITHER.value: "dim",
}


def _hex(value: int) -> str:
    return f"0x{value:08x}"


class LocusConsoleOutput:
    """Render Locus models as console tables.

    Usage::

        output = LocusConsoleOutput()
        output.display_sections(table.sections)
    """

    def __init__(self, console: LocusConsole | None = None) -> None:
        self._console: LocusConsole = console or LocusConsole()

    def display_sections(self, sections: Sequence[Section]) -> None:
        self._console.section("Sections")
        rows = [
            (
                i,
                sec.name,
                f"{sec.size:#x}",
                _hex(sec.vma),
                _hex(sec.lma),
                _hex(sec.address),
                sec.align,
                ", ".join(sec.flags),
            )
            for i, sec in enumerate(sections)
        ]
        self._console.table(
            "",
            ["Idx", "Name", "Size", "VMA", "LMA", "Runtime", "Align", "Flags"],
            rows,
            styles=["dim", "bold"],
            justify=["right", "left", "right", "right", "right", "right", "right"],
        )
        loadable = sum(1 for sec in sections if sec.is_loadable)
        self._console.info(f"{len(sections)} sections, {loadable} loadable")
        self._console.blank()

    def display_symbols(
        self,
        symbols: Sequence[Symbol],
        title: str = "Symbols",
        relocated: bool = False,
        max_display: Optional[int] = None,
    ) -> None:
        """Display a symbol table.

        Args:
            symbols: Symbols to show, in table order.
            title: Section header text.
            relocated: Show runtime addresses instead of static ones.
            max_display: Row limit; ``None`` shows everything.
        """
        self._console.section(title)
        if not symbols:
            self._console.info("No matching symbols.")
            self._console.blank()
            return

        shown = symbols if max_display is None else symbols[:max_display]
        rows = [
            (
                _hex(sym.effective_address(relocated)),
                f"{sym.size:#x}",
                sym.type.value,
                sym.scope.value,
                sym.section or "*ABS*",
                sym.name + (" (hidden)" if sym.hidden else ""),
                sym.file or "",
            )
            for sym in shown
        ]
        self._console.table(
            "",
            ["Address", "Size", "Type", "Scope", "Section", "Name", "File"],
            rows,
            justify=["right", "right"],
        )
        if len(shown) < len(symbols):
            self._console.info(f"Showing {len(shown)} of {len(symbols)} symbols.")
        self._console.blank()

    def display_match(
        self,
        query: str,
        symbol: Optional[Symbol],
        relocated: bool = False,
    ) -> None:
        """Display the result of a single-symbol lookup."""
        if symbol is None:
            self._console.warning(f"No function found for {query}")
            return

        start = symbol.effective_address(relocated)
        scope_style = _SCOPE_STYLES.get(symbol.scope.value, "")
        self._console.print(
            f"[bold]{escape(query)}[/bold] -> [locus.highlight]{escape(symbol.name)}[/locus.highlight] "
            f"[{scope_style}]({symbol.scope.value})[/{scope_style}] "
            f"{_hex(start)}..{_hex(start + symbol.size)}"
            + (f" in {escape(symbol.file)}" if symbol.file else ""),
            markup=True,
        )
