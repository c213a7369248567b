"""
Symbol Lookup Queries
======================

Read-only queries over a decoded symbol list, used by stack unwinding,
profiling and breakpoint resolution.

Queries scan the symbols in table order.  The table is not sorted by
address, so when function ranges overlap the first one encountered wins,
not the smallest enclosing range.
"""

from __future__ import annotations

from typing import Optional, Sequence

from shared.logger import LocusLogger

from locus.core.models import Symbol, SymbolScope, SymbolType

logger = LocusLogger("locus.lookup")

# Names starting with this prefix are assembler/linker internals.
_RESERVED_PREFIX: str = "."
_MISS_SAMPLES: int = 3


class LookupIndex:
    """Queries over one snapshot of a symbol list.

    Usage::

        index = LookupIndex(table.symbols)
        func = index.function_at(pc, relocated=True)
    """

    def __init__(self, symbols: Sequence[Symbol]) -> None:
        self._symbols: tuple[Symbol, ...] = tuple(symbols)

    @property
    def symbols(self) -> tuple[Symbol, ...]:
        return self._symbols

    # ------------------------------------------------------------------ #
    #  Address queries
    # ------------------------------------------------------------------ #

    def function_at(self, address: int, relocated: bool) -> Optional[Symbol]:
        """Return the function whose range contains *address*.

        Args:
            address: Program-counter value to resolve.
            relocated: Compare against runtime addresses (``address + base``)
                instead of static ones.

        Returns:
            The first matching function in table order, or ``None``.
        """
        for symbol in self._symbols:
            if symbol.type is SymbolType.FUNCTION and symbol.contains(address, relocated):
                return symbol

        logger.debug("No function at 0x%x (relocated=%s)", address, relocated)
        for func in self.functions()[:_MISS_SAMPLES]:
            base = func.base if relocated else 0
            logger.debug(
                "  %s: addr=0x%x base=0x%x -> 0x%x size=%d",
                func.name,
                func.address,
                base,
                func.address + base,
                func.size,
            )
        return None

    # ------------------------------------------------------------------ #
    #  Filtered views
    # ------------------------------------------------------------------ #

    def functions(self) -> list[Symbol]:
        return [s for s in self._symbols if s.type is SymbolType.FUNCTION]

    def global_variables(self) -> list[Symbol]:
        return [
            s for s in self._symbols
            if s.type is SymbolType.OBJECT and s.scope is SymbolScope.GLOBAL
        ]

    def symbol_variables(self) -> list[Symbol]:
        """Sizeless labels whose runtime base is known.

        These are usually loader- or linker-script-defined symbols such as
        ``__bss_start`` that only become meaningful once relocated.
        """
        return [
            s for s in self._symbols
            if s.type is SymbolType.NORMAL
            and s.size == 0
            and s.name
            and s.base > 0
        ]

    def const_variables(self) -> list[Symbol]:
        """Sizeless local labels still at their static base.

        Heuristic for compile-time constants that were folded away and
        have no runtime location.
        """
        return [
            s for s in self._symbols
            if s.type is SymbolType.NORMAL
            and s.size == 0
            and s.scope is SymbolScope.LOCAL
            and s.name
            and not s.name.startswith(_RESERVED_PREFIX)
            and s.base == 0
        ]

    def static_variables(self, file: str) -> list[Symbol]:
        """File-local data objects declared in compile unit *file*."""
        return [
            s for s in self._symbols
            if s.type is SymbolType.OBJECT
            and s.scope is SymbolScope.LOCAL
            and s.file == file
        ]

    # ------------------------------------------------------------------ #
    #  Name queries
    # ------------------------------------------------------------------ #

    def function_by_name(self, name: str, file: Optional[str] = None) -> Optional[Symbol]:
        """Find a function by name.

        A static function declared in *file* takes precedence; otherwise the
        first non-local function with that name is returned.
        """
        for symbol in self._symbols:
            if (
                symbol.type is SymbolType.FUNCTION
                and symbol.scope is SymbolScope.LOCAL
                and symbol.name == name
                and symbol.file == file
            ):
                return symbol

        for symbol in self._symbols:
            if (
                symbol.type is SymbolType.FUNCTION
                and symbol.scope is not SymbolScope.LOCAL
                and symbol.name == name
            ):
                return symbol
        return None
