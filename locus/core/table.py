"""
Symbol Table
=============

:class:`SymbolTable` is what a debug session holds for one executable: the
parsed sections, the decoded symbols, and the lookup queries over them.

Construction runs the two parser passes (sections first, then symbols).
Relocation derives a new state with :mod:`locus.core.relocation` and
replaces the old one with a single assignment.

Usage::

    table = SymbolTable.from_executable("firmware.elf")
    table.relocate_with_offset(0x8000)
    func = table.function_at(pc, relocated=True)
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, NamedTuple, Optional, Sequence

from shared.logger import LocusLogger

from locus.collectors.objdump import ObjdumpCollector
from locus.core import relocation
from locus.core.lookup import LookupIndex
from locus.core.models import Section, Symbol, ToolReport
from locus.core.relocation import Placement
from locus.parsers.sections import parse_sections
from locus.parsers.symbols import decode_symbols

logger = LocusLogger("locus.table")


class _TableState(NamedTuple):
    sections: tuple[Section, ...]
    symbols: tuple[Symbol, ...]
    index: LookupIndex


def _state(sections: Iterable[Section], symbols: Iterable[Symbol]) -> _TableState:
    symbols = tuple(symbols)
    return _TableState(tuple(sections), symbols, LookupIndex(symbols))


class SymbolTable:
    """Sections and symbols of one executable, with relocation and lookup."""

    def __init__(self, sections: Sequence[Section], symbols: Sequence[Symbol]) -> None:
        self._state: _TableState = _state(sections, symbols)

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def from_reports(cls, section_report: ToolReport, symbol_report: ToolReport) -> SymbolTable:
        """Build a table from captured objdump reports.

        Raises:
            ToolInvocationError: If either report records a failed run.
            PrerequisiteViolationError: If the section report has no sections.
            UnresolvedSectionError: If a symbol names an unknown section.
        """
        sections = parse_sections(section_report)
        symbols = decode_symbols(symbol_report, sections)
        return cls(sections, symbols)

    @classmethod
    def from_executable(
        cls,
        executable: str | Path,
        collector: Optional[ObjdumpCollector] = None,
    ) -> SymbolTable:
        """Run objdump on *executable* and build its table."""
        collector = collector or ObjdumpCollector()
        with logger.timed(f"symbol table for {executable}"):
            sections = parse_sections(collector.section_headers(executable))
            symbols = decode_symbols(collector.symbols(executable), sections)
        return cls(sections, symbols)

    # ------------------------------------------------------------------ #
    #  State
    # ------------------------------------------------------------------ #

    @property
    def sections(self) -> tuple[Section, ...]:
        return self._state.sections

    @property
    def symbols(self) -> tuple[Symbol, ...]:
        return self._state.symbols

    @property
    def index(self) -> LookupIndex:
        return self._state.index

    def section(self, name: str) -> Optional[Section]:
        for section in self._state.sections:
            if section.name == name:
                return section
        return None

    # ------------------------------------------------------------------ #
    #  Relocation
    # ------------------------------------------------------------------ #

    def relocate(self, placements: Iterable[Placement]) -> None:
        """Move the named sections to explicit runtime addresses."""
        current = self._state
        sections, symbols = relocation.relocate(
            current.sections, current.symbols, placements
        )
        self._state = _state(sections, symbols)

    def relocate_with_offset(self, offset: int) -> None:
        """Move every loadable section to ``vma + offset``."""
        current = self._state
        sections, symbols = relocation.relocate_with_offset(
            current.sections, current.symbols, offset
        )
        self._state = _state(sections, symbols)

    def relocated_sections(self, runtime_addresses: Sequence[int]) -> list[Section]:
        """Section snapshot placed at one address per loadable section.

        The table itself is left unchanged.
        """
        return relocation.relocated_snapshot(self._state.sections, runtime_addresses)

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    def function_at(self, address: int, relocated: bool) -> Optional[Symbol]:
        return self._state.index.function_at(address, relocated)

    def functions(self) -> list[Symbol]:
        return self._state.index.functions()

    def global_variables(self) -> list[Symbol]:
        return self._state.index.global_variables()

    def symbol_variables(self) -> list[Symbol]:
        return self._state.index.symbol_variables()

    def const_variables(self) -> list[Symbol]:
        return self._state.index.const_variables()

    def static_variables(self, file: str) -> list[Symbol]:
        return self._state.index.static_variables(file)

    def function_by_name(self, name: str, file: Optional[str] = None) -> Optional[Symbol]:
        return self._state.index.function_by_name(name, file)
