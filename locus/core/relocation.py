"""
Relocation Model
=================

Assigns runtime load addresses to sections and propagates them to symbol
bases.

Every function here is pure: it takes the current section and symbol
lists and returns new ones, leaving the inputs untouched.  The caller
swaps the returned pair in as a whole, so a reader never sees sections
that have moved while their symbols have not.

Two directives are supported:

* explicit placements -- ``(section name, runtime address)`` pairs, as
  reported by a remote stub that knows where each section was loaded;
* a uniform load offset -- added to the ``vma`` of every loadable section.

Both are idempotent: applying the same directive twice gives the same
state as applying it once.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence, Tuple, Union

from shared.logger import LocusLogger

from locus.core.errors import RelocationCountError
from locus.core.models import Section, Symbol, SymbolType

logger = LocusLogger("locus.relocation")

Placement = Union[Tuple[str, int], Section]

_SAMPLE_FUNCTIONS: int = 5


def _placement_pairs(placements: Iterable[Placement]) -> list[tuple[str, int]]:
    pairs: list[tuple[str, int]] = []
    for placement in placements:
        if isinstance(placement, Section):
            pairs.append((placement.name, placement.address))
        else:
            name, address = placement
            pairs.append((name, address))
    return pairs


def rebase_symbols(
    sections: Sequence[Section],
    symbols: Sequence[Symbol],
) -> list[Symbol]:
    """Copy each section's runtime address into the base of its symbols.

    Absolute symbols have no owning section and keep their base.
    """
    addresses = {section.name: section.address for section in sections}
    rebased: list[Symbol] = []
    updated = 0
    for symbol in symbols:
        if symbol.section is not None and symbol.section in addresses:
            base = addresses[symbol.section]
            if symbol.base != base:
                symbol = symbol.with_base(base)
            updated += 1
        rebased.append(symbol)

    logger.info("Updated %d symbol bases", updated)
    if logger.is_enabled_for(logging.DEBUG):
        functions = [s for s in rebased if s.type is SymbolType.FUNCTION]
        for func in functions[:_SAMPLE_FUNCTIONS]:
            logger.debug(
                "Sample func: %s addr=0x%x base=0x%x -> relocated=0x%x",
                func.name,
                func.address,
                func.base,
                func.effective_address(relocated=True),
            )
    return rebased


def relocate(
    sections: Sequence[Section],
    symbols: Sequence[Symbol],
    placements: Iterable[Placement],
) -> tuple[list[Section], list[Symbol]]:
    """Place the named sections at explicit runtime addresses.

    Sections not mentioned keep their current address.  Names that are not
    in the table are logged and ignored.

    Args:
        sections: Current section list.
        symbols: Current symbol list.
        placements: ``(name, address)`` pairs or :class:`Section` objects
            whose ``address`` carries the runtime location.

    Returns:
        The new ``(sections, symbols)`` pair.
    """
    pairs = _placement_pairs(placements)
    with logger.operation("relocate"):
        logger.info("Received %d relocated sections", len(pairs))

        targets: dict[str, int] = {}
        known = {section.name for section in sections}
        for name, address in pairs:
            if name not in known:
                logger.warning("No matching section found for %s", name)
                continue
            targets[name] = address

        relocated: list[Section] = []
        for section in sections:
            if section.name in targets:
                address = targets[section.name]
                logger.debug(
                    "Section %s: 0x%x -> 0x%x",
                    section.name,
                    section.address,
                    address,
                )
                section = section.with_address(address)
            relocated.append(section)

        return relocated, rebase_symbols(relocated, symbols)


def relocate_with_offset(
    sections: Sequence[Section],
    symbols: Sequence[Symbol],
    offset: int,
) -> tuple[list[Section], list[Symbol]]:
    """Place every loadable section at ``vma + offset``.

    Sections without the ``ALLOC`` flag or with zero size are untouched.

    Returns:
        The new ``(sections, symbols)`` pair.
    """
    with logger.operation("relocate_with_offset"):
        logger.info("Applying offset 0x%x", offset)

        relocated: list[Section] = []
        count = 0
        for section in sections:
            if section.is_loadable:
                address = section.vma + offset
                logger.debug(
                    "Section %s: 0x%x -> 0x%x",
                    section.name,
                    section.address,
                    address,
                )
                section = section.with_address(address)
                count += 1
            relocated.append(section)

        logger.info("Relocated %d sections", count)
        return relocated, rebase_symbols(relocated, symbols)


def relocated_snapshot(
    sections: Sequence[Section],
    runtime_addresses: Sequence[int],
) -> list[Section]:
    """Build a section list placed at addresses reported by a remote stub.

    *runtime_addresses* holds one entry per loadable section, in table
    order.  Loadable sections take their entry; every other section falls
    back to its static ``vma``.

    Raises:
        RelocationCountError: If the number of addresses differs from the
            number of loadable sections.
    """
    expected = sum(1 for section in sections if section.is_loadable)
    if expected != len(runtime_addresses):
        raise RelocationCountError(expected=expected, supplied=len(runtime_addresses))

    addresses = iter(runtime_addresses)
    return [
        section.with_address(next(addresses))
        if section.is_loadable
        else section.with_address(section.vma)
        for section in sections
    ]
