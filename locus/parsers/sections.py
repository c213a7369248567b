"""
Section Header Report Parser
==============================

Turns the output of ``objdump --section-headers`` into an ordered list of
:class:`~locus.core.models.Section` records.

The report repeats two-line groups::

    Idx Name          Size      VMA       LMA       File off  Algn
      0 .text         00000100  00001000  00001000  00000034  2**2
                      CONTENTS, ALLOC, LOAD, READONLY, CODE

The first line is split into whitespace-separated columns and validated
field by field; the second lists the section attribute flags.  Every other
line (file banner, column titles, blank lines) is skipped.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

from shared.logger import LocusLogger

from locus.core.models import Section, ToolReport

logger = LocusLogger("locus.parsers.sections")

_ADDR_WIDTH: int = 8
_ALIGN_PREFIX: str = "2**"
_FLAG_SEPARATOR: str = ", "


class _HeaderColumns(NamedTuple):
    name: str
    size: int
    vma: int
    lma: int
    file_offset: int
    align: int


def _is_hex_field(token: str) -> bool:
    return len(token) == _ADDR_WIDTH and all(c in "0123456789abcdef" for c in token)


def _is_word(token: str) -> bool:
    return bool(token) and all(c.isalnum() or c == "_" for c in token)


def parse_header_line(line: str) -> Optional[_HeaderColumns]:
    """Decode a section header line, or return ``None`` if *line* is not one."""
    line = line.rstrip("\r")
    if not line[:1].isspace():
        return None

    tokens = line.split()
    if len(tokens) != 7:
        return None

    idx, name, size, vma, lma, file_offset, align = tokens
    if not idx.isdigit():
        return None
    if not all(_is_hex_field(t) for t in (size, vma, lma, file_offset)):
        return None
    if not align.startswith(_ALIGN_PREFIX):
        return None
    exponent = align[len(_ALIGN_PREFIX):]
    if not exponent.isdigit():
        return None

    return _HeaderColumns(
        name=name,
        size=int(size, 16),
        vma=int(vma, 16),
        lma=int(lma, 16),
        file_offset=int(file_offset, 16),
        align=2 ** int(exponent),
    )


def parse_flags_line(line: str) -> Optional[tuple[str, ...]]:
    """Decode the attribute line following a header, or ``None``.

    Only the leading flag has to be a plain word.  Later entries are kept
    verbatim, so a link-once suffix such as ``LINK_ONCE_DISCARD (COMDAT
    foo 3)`` does not hide the flags before it.
    """
    line = line.rstrip("\r")
    if not line[:1].isspace() or parse_header_line(line) is not None:
        return None

    flags = tuple(line.strip().split(_FLAG_SEPARATOR))
    if not _is_word(flags[0]):
        return None
    return flags


def parse_section_lines(lines: Iterable[str]) -> list[Section]:
    """Build the section list from the lines of a section-header report.

    A header whose next line is not a flag list gets no flags, and that
    next line is examined again as a possible header.  A repeated section
    name keeps the first occurrence.
    """
    pending = list(lines)
    sections: list[Section] = []
    seen: set[str] = set()
    skipped = 0

    i = 0
    while i < len(pending):
        header = parse_header_line(pending[i])
        i += 1
        if header is None:
            skipped += 1
            continue

        flags: tuple[str, ...] = ()
        if i < len(pending):
            parsed_flags = parse_flags_line(pending[i])
            if parsed_flags is not None:
                flags = parsed_flags
                i += 1

        if header.name in seen:
            logger.warning("Duplicate section %s ignored", header.name)
            continue
        seen.add(header.name)

        sections.append(
            Section(
                name=header.name,
                size=header.size,
                vma=header.vma,
                lma=header.lma,
                file_offset=header.file_offset,
                align=header.align,
                flags=flags,
            )
        )

    logger.debug("Skipped %d non-section lines", skipped)
    logger.info("Parsed %d sections", len(sections))
    return sections


def parse_sections(report: ToolReport) -> list[Section]:
    """Parse a captured ``objdump --section-headers`` run.

    Raises:
        ToolInvocationError: If the tool failed or exited non-zero.
    """
    report.raise_for_status()
    return parse_section_lines(report.stdout.replace("\r", "").split("\n"))
