"""
Symbol Table Report Decoder
=============================

Turns the output of ``objdump --syms --demangle`` into
:class:`~locus.core.models.Symbol` records.

A symbol record is laid out in fixed columns::

    00001050 g     F .text	00000020 foo
    |        |||||||  |      |        |
    address  ||||||type      size     name (to end of line)
             |||||debug/dynamic
             ||||indirect
             |||warning
             ||constructor
             |weak
             scope
                  section

Records are decoded in order as a left fold whose accumulator is the
current compile unit.  A ``df`` record (debug + file) is a compile-unit
marker: it opens a new unit, and every ``LOCAL`` symbol after it belongs
to that unit until the next marker.

Link-time optimisation merges compile units into a synthetic
``<artificial>`` unit.  Local symbols there (or before any marker) cannot
be attributed to a file, so they are promoted to ``GLOBAL`` and resolved
through global lookup.
"""

from __future__ import annotations

from typing import Iterable, Mapping, NamedTuple, Optional, Sequence

from shared.logger import LocusLogger

from locus.core.errors import PrerequisiteViolationError, UnresolvedSectionError
from locus.core.models import Section, Symbol, SymbolScope, SymbolType, ToolReport

logger = LocusLogger("locus.parsers.symbols")

# Section token objdump prints for symbols without an owning section.
ABS_SECTION: str = "*ABS*"
# Compile unit name given by LTO to merged code.
ARTIFICIAL_UNIT: str = "<artificial>"
HIDDEN_PREFIX: str = ".hidden"

_HEX_DIGITS = frozenset("0123456789abcdef")
_ADDR_WIDTH: int = 8

_SCOPE_FLAGS: dict[str, SymbolScope] = {
    "l": SymbolScope.LOCAL,
    "g": SymbolScope.GLOBAL,
    " ": SymbolScope.NEITHER,
    "!": SymbolScope.BOTH,
}

_TYPE_FLAGS: dict[str, SymbolType] = {
    "F": SymbolType.FUNCTION,
    "f": SymbolType.FILE,
    "O": SymbolType.OBJECT,
    " ": SymbolType.NORMAL,
}

# Allowed characters of the single-character flag columns 10..14.
_FLAG_COLUMNS: tuple[str, ...] = ("w ", "C ", "W ", "I ", "dD ")


class SymbolRecord(NamedTuple):
    """Raw columns of one symbol record line."""
    address: int
    scope_flag: str
    weak: bool
    constructor: bool
    warning: bool
    indirect: bool
    debug_flag: str
    type_flag: str
    section: str
    size: int
    name: str

    @property
    def is_unit_marker(self) -> bool:
        return self.debug_flag == "d" and self.type_flag == "f"


def _is_hex(token: str) -> bool:
    return bool(token) and all(c in _HEX_DIGITS for c in token)


def tokenize_symbol_line(line: str) -> Optional[SymbolRecord]:
    """Split a report line into :class:`SymbolRecord` columns.

    Returns ``None`` for lines that are not symbol records (the file banner,
    ``SYMBOL TABLE:``, blank lines, 64-bit addresses).
    """
    line = line.rstrip("\r")
    if len(line) < 18:
        return None

    address = line[:_ADDR_WIDTH]
    if not _is_hex(address) or not line[8].isspace():
        return None

    scope_flag = line[9]
    if scope_flag not in _SCOPE_FLAGS:
        return None
    flags = line[10:15]
    for flag, allowed in zip(flags, _FLAG_COLUMNS):
        if flag not in allowed:
            return None
    type_flag = line[15]
    if type_flag not in _TYPE_FLAGS or not line[16].isspace():
        return None

    # Section token runs up to the next whitespace character.
    pos = 17
    end = pos
    while end < len(line) and not line[end].isspace():
        end += 1
    section = line[pos:end]
    if not section or end >= len(line):
        return None

    # Exactly one separator, then the hex size, then exactly one separator.
    pos = end + 1
    end = pos
    while end < len(line) and line[end] in _HEX_DIGITS:
        end += 1
    size = line[pos:end]
    if not size or end >= len(line) or not line[end].isspace():
        return None

    return SymbolRecord(
        address=int(address, 16),
        scope_flag=scope_flag,
        weak=flags[0] == "w",
        constructor=flags[1] == "C",
        warning=flags[2] == "W",
        indirect=flags[3] == "I",
        debug_flag=flags[4],
        type_flag=type_flag,
        section=section,
        size=int(size, 16),
        name=line[end + 1:],
    )


def decode_record(
    record: SymbolRecord,
    current_file: Optional[str],
    sections: Mapping[str, Section],
) -> tuple[Symbol, Optional[str]]:
    """Decode one record under the compile unit *current_file*.

    Returns the symbol together with the compile unit that applies to the
    following records.

    Raises:
        UnresolvedSectionError: If the record names an unknown section.
    """
    name = record.name.strip()
    if record.is_unit_marker:
        current_file = name

    hidden = False
    if name.startswith(HIDDEN_PREFIX):
        name = name[len(HIDDEN_PREFIX):].strip()
        hidden = True

    scope = _SCOPE_FLAGS[record.scope_flag]
    if scope is SymbolScope.LOCAL and (
        not current_file or current_file == ARTIFICIAL_UNIT
    ):
        scope = SymbolScope.GLOBAL

    owner: Optional[Section] = None
    if record.section != ABS_SECTION:
        owner = sections.get(record.section)
        if owner is None:
            raise UnresolvedSectionError(name, record.section)

    symbol = Symbol(
        name=name,
        type=_TYPE_FLAGS[record.type_flag],
        scope=scope,
        section=owner.name if owner is not None else None,
        address=record.address - (owner.lma if owner is not None else 0),
        base=0,
        size=record.size,
        file=current_file if scope is SymbolScope.LOCAL else None,
        hidden=hidden,
    )
    return symbol, current_file


def decode_symbol_lines(
    lines: Iterable[str],
    sections: Sequence[Section],
) -> list[Symbol]:
    """Decode every symbol record in *lines* against *sections*.

    Raises:
        PrerequisiteViolationError: If *sections* is empty.
        UnresolvedSectionError: If a record names an unknown section.
    """
    if not sections:
        raise PrerequisiteViolationError(
            "parse the section headers before decoding symbols"
        )

    by_name: dict[str, Section] = {}
    for section in sections:
        by_name.setdefault(section.name, section)

    symbols: list[Symbol] = []
    current_file: Optional[str] = None
    skipped = 0
    for line in lines:
        record = tokenize_symbol_line(line)
        if record is None:
            skipped += 1
            continue
        symbol, current_file = decode_record(record, current_file, by_name)
        symbols.append(symbol)

    logger.debug("Skipped %d non-symbol lines", skipped)
    logger.info("Decoded %d symbols", len(symbols))
    return symbols


def decode_symbols(report: ToolReport, sections: Sequence[Section]) -> list[Symbol]:
    """Decode a captured ``objdump --syms --demangle`` run.

    Raises:
        ToolInvocationError: If the tool failed or exited non-zero.
    """
    report.raise_for_status()
    return decode_symbol_lines(
        report.stdout.replace("\r", "").split("\n"), sections
    )
