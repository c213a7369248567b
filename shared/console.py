"""
Locus Console Interface
========================

Rich-powered console abstraction used by the Locus command-line front-end.

The class wraps :class:`rich.console.Console` and adds helpers for section
headers, status-coloured messages and tables with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_LOCUS_THEME = Theme(
    {
        "locus.section": "bold bright_magenta",
        "locus.warning": "bold yellow",
        "locus.error": "bold red",
        "locus.info": "bold bright_blue",
        "locus.dim": "dim white",
        "locus.highlight": "bold bright_white",
    }
)


class LocusConsole:
    """Unified console interface for Locus output.

    Usage::

        con = LocusConsole()
        con.section("Sections")
        con.info("Relocated 4 sections")
    """

    def __init__(self) -> None:
        self._console = Console(theme=_LOCUS_THEME, highlight=False)

    # ------------------------------------------------------------------ #
    #  Section header
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(
            f"  {escape(title)}  ",
            style="locus.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers
    # ------------------------------------------------------------------ #

    def warning(self, message: str) -> None:
        self._console.print(
            f"[locus.warning][⚠] WARNING:[/locus.warning] {escape(message)}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[locus.error][✘] ERROR:[/locus.error] {escape(message)}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[locus.info][ℹ] INFO:[/locus.info] {escape(message)}"
        )

    # ------------------------------------------------------------------ #
    #  Table display
    # ------------------------------------------------------------------ #

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Iterable of row tuples; each element is stringified
                      and escaped so symbol names never act as markup.
            caption:  Optional footer caption.
            styles:   Optional per-column Rich style strings.
            justify:  Optional per-column justification (``"right"``, ...).
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            style = styles[idx] if styles and idx < len(styles) else ""
            just = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, style=style, justify=just)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(escape(str(cell)) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()
