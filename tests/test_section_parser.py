"""Section header report parsing."""

from __future__ import annotations

import pytest

from locus.core.errors import ToolInvocationError
from locus.parsers.sections import (
    parse_flags_line,
    parse_header_line,
    parse_section_lines,
    parse_sections,
)


def test_sections_are_parsed_in_table_order(sections) -> None:
    assert [s.name for s in sections] == [".text", ".data", ".bss", ".comment", ".heap"]


def test_header_fields_are_decoded(sections) -> None:
    data = sections[1]
    assert data.size == 0x10
    assert data.vma == 0x20000000
    assert data.lma == 0x1100
    assert data.file_offset == 0x2000
    assert data.align == 4
    assert data.flags == ("CONTENTS", "ALLOC", "LOAD", "DATA")
    assert data.address == 0


def test_alignment_is_a_power_of_two(sections) -> None:
    assert [s.align for s in sections] == [4, 4, 8, 1, 1]


def test_loadable_sections_need_alloc_and_size(sections) -> None:
    assert [s.name for s in sections if s.is_loadable] == [".text", ".data", ".bss"]


def test_non_record_lines_are_not_headers() -> None:
    assert parse_header_line("Idx Name          Size      VMA       LMA       File off  Algn") is None
    assert parse_header_line("firmware.elf:     file format elf32-littlearm") is None
    assert parse_header_line("") is None
    # 64-bit columns do not fit the 8-digit layout
    assert parse_header_line(
        "  0 .text 0000000000000100 0000000000001000 0000000000001000 00001000 2**2"
    ) is None


def test_header_line_tolerates_carriage_return() -> None:
    header = parse_header_line("  7 .rodata       00000040  00002000  00002000  00003000  2**4\r")
    assert header is not None
    assert header.name == ".rodata"
    assert header.align == 16


def test_flags_line() -> None:
    assert parse_flags_line("                  CONTENTS, ALLOC\r") == ("CONTENTS", "ALLOC")
    assert parse_flags_line("CONTENTS, ALLOC") is None
    assert parse_flags_line("   !not, a flag line") is None
    assert parse_flags_line("   ") is None
    assert parse_flags_line("  1 .data  00000010  20000000  00001100  00002000  2**2") is None


def test_header_without_flags_line_keeps_following_header() -> None:
    sections = parse_section_lines(
        [
            "  0 .text         00000100  00001000  00001000  00001000  2**2",
            "  1 .data         00000010  20000000  00001100  00002000  2**2",
            "                  CONTENTS, ALLOC, LOAD, DATA",
        ]
    )
    assert [s.name for s in sections] == [".text", ".data"]
    assert sections[0].flags == ()
    assert sections[1].flags == ("CONTENTS", "ALLOC", "LOAD", "DATA")


def test_duplicate_section_names_keep_the_first() -> None:
    sections = parse_section_lines(
        [
            "  0 .text         00000100  00001000  00001000  00001000  2**2",
            "                  ALLOC",
            "  1 .text         00000200  00005000  00005000  00002000  2**2",
            "                  ALLOC",
        ]
    )
    assert len(sections) == 1
    assert sections[0].vma == 0x1000


def test_failed_tool_run_raises(report_factory) -> None:
    with pytest.raises(ToolInvocationError) as excinfo:
        parse_sections(report_factory("", returncode=1, stderr="objdump: 'x': No such file"))
    assert excinfo.value.returncode == 1
    assert "No such file" in str(excinfo.value)


def test_launch_error_is_carried_as_cause(report_factory) -> None:
    cause = FileNotFoundError(2, "No such file or directory", "objdump")
    with pytest.raises(ToolInvocationError) as excinfo:
        parse_sections(report_factory("", returncode=None, error=cause))
    assert excinfo.value.cause is cause
    assert excinfo.value.__cause__ is cause


def test_comdat_suffix_keeps_alloc() -> None:
    sections = parse_section_lines(
        [
            "  0 .text$foo     00000100  00001000  00001000  00001000  2**2",
            "                  CONTENTS, ALLOC, LOAD, READONLY, CODE, LINK_ONCE_DISCARD (COMDAT foo 3)",
        ]
    )
    (text,) = sections
    assert text.flags[-1] == "LINK_ONCE_DISCARD (COMDAT foo 3)"
    assert "ALLOC" in text.flags
    assert text.is_loadable
