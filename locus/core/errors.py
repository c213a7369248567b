"""
Locus Exceptions
=================

Every failure the symbol-table core can report derives from
:class:`LocusError`.  None of them is recoverable at this layer: the debug
session that owns the table decides whether to abort or to show a
diagnostic.
"""

from __future__ import annotations

from typing import Optional, Sequence


class LocusError(Exception):
    """Base class for symbol-table construction and relocation failures."""


class ToolInvocationError(LocusError):
    """The object-file inspection tool could not run or exited with failure.

    The underlying exception, if any, is chained as ``__cause__`` and
    kept in :attr:`cause`.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int] = None,
        detail: str = "",
        cause: Optional[BaseException] = None,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.detail = detail
        self.cause = cause

        message = f"{' '.join(self.command) or '<tool>'} failed"
        if returncode is not None:
            message += f" with exit status {returncode}"
        if cause is not None:
            message += f": {cause}"
        elif detail:
            message += f": {detail}"
        super().__init__(message)


class UnresolvedSectionError(LocusError):
    """A decoded symbol names a section that is not in the section table."""

    def __init__(self, symbol: str, section: str) -> None:
        self.symbol = symbol
        self.section = section
        super().__init__(f"Section {section} not found. Symbol: {symbol}")


class PrerequisiteViolationError(LocusError):
    """Symbols were decoded before any section was parsed."""

    def __init__(self, message: str = "sections must be parsed before symbols") -> None:
        super().__init__(message)


class RelocationCountError(LocusError):
    """The number of runtime addresses does not match the loadable sections."""

    def __init__(self, expected: int, supplied: int) -> None:
        self.expected = expected
        self.supplied = supplied
        super().__init__(
            f"number of sections mismatch ({supplied} != {expected})"
        )
