"""Shared fixtures: captured objdump reports of a small ARM firmware image."""

from __future__ import annotations

import pytest

from locus.core.models import ToolReport
from locus.core.table import SymbolTable
from locus.parsers.sections import parse_sections

SECTION_HEADERS = "\r\n".join(
    [
        "",
        "firmware.elf:     file format elf32-littlearm",
        "",
        "Sections:",
        "Idx Name          Size      VMA       LMA       File off  Algn",
        "  0 .text         00000100  00001000  00001000  00001000  2**2",
        "                  CONTENTS, ALLOC, LOAD, READONLY, CODE",
        "  1 .data         00000010  20000000  00001100  00002000  2**2",
        "                  CONTENTS, ALLOC, LOAD, DATA",
        "  2 .bss          00000020  20000010  20000010  00002010  2**3",
        "                  ALLOC",
        "  3 .comment      00000012  00000000  00000000  00002010  2**0",
        "                  CONTENTS, READONLY",
        "  4 .heap         00000000  20000030  20000030  00002022  2**0",
        "                  ALLOC",
        "",
    ]
)

SYMBOLS = "\n".join(
    [
        "",
        "firmware.elf:     file format elf32-littlearm",
        "",
        "SYMBOL TABLE:",
        "00001000 l    d  .text\t00000000 .text",
        "20000000 l    d  .data\t00000000 .data",
        "00000000 l    df *ABS*\t00000000 a.c",
        "00001010 l     F .text\t00000010 helper",
        "20000000 l     O .data\t00000004 counter",
        "00000010 l       *ABS*\t00000000 BUFFER_LEN",
        "00000000 l    df *ABS*\t00000000 <artificial>",
        "00001040 l     F .text\t00000008 merged_static",
        "00001050 g     F .text\t00000020 foo",
        "00001070 g     F .text\t00000010 helper",
        "20000004 g     O .data\t00000004 global_counter",
        "20000010 g       .bss\t00000000 .hidden __bss_start",
        "00001080 g     F .text\t00000010 operator new(unsigned int)",
        "",
    ]
)


def make_report(stdout: str, returncode: int = 0, **kwargs) -> ToolReport:
    return ToolReport(command=("objdump",), stdout=stdout, returncode=returncode, **kwargs)


@pytest.fixture
def section_report() -> ToolReport:
    return make_report(SECTION_HEADERS)


@pytest.fixture
def symbol_report() -> ToolReport:
    return make_report(SYMBOLS)


@pytest.fixture
def sections(section_report):
    return parse_sections(section_report)


@pytest.fixture
def table(section_report, symbol_report) -> SymbolTable:
    return SymbolTable.from_reports(section_report, symbol_report)


@pytest.fixture
def report_factory():
    return make_report
