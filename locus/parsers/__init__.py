"""Parsers for objdump text reports."""

from locus.parsers.sections import parse_sections
from locus.parsers.symbols import decode_symbols

__all__ = ["parse_sections", "decode_symbols"]
