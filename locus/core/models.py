"""
Locus Data Models
==================

Pydantic models for the sections and symbols of a linked executable as
reported by ``objdump``.

Both models are frozen.  A relocation never edits a record in place; it
derives new records (see :mod:`locus.core.relocation`) and the owning
:class:`~locus.core.table.SymbolTable` swaps the whole set in at once.

References:
    - GNU Binutils documentation, ``objdump --section-headers`` and
      ``objdump --syms``.
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from locus.core.errors import ToolInvocationError

# Flag token marking a section that occupies memory at runtime.
ALLOC_FLAG: str = "ALLOC"


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class SymbolType(str, enum.Enum):
    """Symbol kind, from the type column of the symbol report."""
    FUNCTION = "function"
    FILE = "file"
    OBJECT = "object"
    NORMAL = "normal"


class SymbolScope(str, enum.Enum):
    """Symbol visibility, from the scope column of the symbol report.

    ``BOTH`` is objdump's ``!`` flag: a symbol marked both local and
    global (weak / overridable).
    """
    LOCAL = "local"
    GLOBAL = "global"
    NEITHER = "neither"
    BOTH = "both"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

class Section(BaseModel):
    """A named region of the executable.

    Attributes:
        name: Section name, unique within a table (e.g. ``.text``).
        size: Length in bytes.
        vma: Virtual memory address at static link time.
        lma: Load memory address at static link time.
        file_offset: Offset of the section contents in the file.
        align: Alignment in bytes (``2**exponent`` from the report).
        flags: Attribute tokens (``CONTENTS``, ``ALLOC``, ``LOAD``, ...).
        address: Current runtime base.  0 until a relocation assigns one.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    size: int = 0
    vma: int = 0
    lma: int = 0
    file_offset: int = 0
    align: int = 1
    flags: tuple[str, ...] = ()
    address: int = 0

    @property
    def is_loadable(self) -> bool:
        """``True`` for sections that take part in runtime relocation.

        The rule (``ALLOC`` flag and a non-zero size) matches the one the
        GDB remote stub uses when it reports section offsets, so arrays of
        runtime addresses from the stub line up with this table.
        """
        return ALLOC_FLAG in self.flags and self.size > 0

    def with_address(self, address: int) -> Section:
        """Return a copy of this section placed at *address*."""
        return self.model_copy(update={"address": address})


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------

class Symbol(BaseModel):
    """A symbol table entry.

    Attributes:
        name: Demangled symbol name, without the ``.hidden`` marker.
        type: :class:`SymbolType`.
        scope: :class:`SymbolScope`, after the LTO correction.
        section: Owning section name, ``None`` for absolute symbols.
        address: Static address relative to the owning section's ``lma``;
            the raw address for absolute symbols.
        base: Runtime base of the owning section, refreshed by relocation.
        size: Length in bytes (0 for labels and most markers).
        file: Compile unit the symbol was declared in; only set for
            ``LOCAL`` symbols.
        hidden: The symbol had hidden visibility.
        lines: Reserved for source-line association, never filled here.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    type: SymbolType = SymbolType.NORMAL
    scope: SymbolScope = SymbolScope.NEITHER
    section: Optional[str] = None
    address: int = 0
    base: int = 0
    size: int = 0
    file: Optional[str] = None
    hidden: bool = False
    lines: Optional[list[Any]] = Field(default=None)

    @property
    def is_absolute(self) -> bool:
        return self.section is None

    def effective_address(self, relocated: bool = True) -> int:
        """Start address, optionally including the runtime base."""
        return self.address + self.base if relocated else self.address

    def contains(self, address: int, relocated: bool = True) -> bool:
        """``True`` if *address* falls in ``[start, start + size)``."""
        start = self.effective_address(relocated)
        return start <= address < start + self.size

    def with_base(self, base: int) -> Symbol:
        """Return a copy of this symbol with its runtime base set to *base*."""
        return self.model_copy(update={"base": base})


# ---------------------------------------------------------------------------
# Tool output
# ---------------------------------------------------------------------------

class ToolReport(BaseModel):
    """Captured result of one objdump invocation.

    Attributes:
        command: Argument vector that was run.
        stdout: Decoded standard output.
        stderr: Decoded standard error.
        returncode: Exit status, ``None`` if the process never ran.
        error: Exception raised while launching or waiting for the tool.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    command: tuple[str, ...] = ()
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    def raise_for_status(self) -> None:
        """Raise :class:`ToolInvocationError` unless the run succeeded."""
        if self.ok:
            return
        raise ToolInvocationError(
            self.command,
            returncode=self.returncode,
            detail=self.stderr.strip(),
            cause=self.error,
        ) from self.error
