"""
Locus -- Symbol Table & Relocation Model
==========================================

Builds a queryable model of an executable's sections and symbols from
``objdump`` reports, tracks where each section was loaded at runtime, and
maps program-counter values back to functions.

Capabilities:
    - Section-header report parsing
    - Symbol-table report decoding with compile-unit tracking and the
      LTO scope correction
    - Relocation by explicit section placements or a uniform load offset
    - Relocated section snapshots for remote debug stubs
    - Address-range and name lookups
"""

__version__ = "1.0.0"
__all__ = [
    "SymbolTable",
    "Section",
    "Symbol",
    "SymbolScope",
    "SymbolType",
    "LocusError",
]

from locus.core.errors import LocusError
from locus.core.models import Section, Symbol, SymbolScope, SymbolType
from locus.core.table import SymbolTable
