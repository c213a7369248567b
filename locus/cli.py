"""
Locus CLI -- Symbol Table Inspection
======================================

Click-based front-end for inspecting the symbol table Locus builds for an
executable, and for trying out relocations and address lookups the way a
debug session would.

Usage::

    # Section headers with loadable flags
    locus sections firmware.elf

    # Functions only, as JSON
    locus --json symbols firmware.elf --kind functions

    # Which function holds a PC value once loaded at offset 0x8000?
    locus lookup firmware.elf 0x9050 --offset 0x8000

    # Static helper from a given compile unit, else the global one
    locus find firmware.elf helper --file src/a.c

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn, Optional, Sequence

import click

from shared.config import LocusConfig
from shared.console import LocusConsole
from shared.logger import configure_logging

from locus.collectors.objdump import ObjdumpCollector
from locus.core.errors import LocusError
from locus.core.models import Section, Symbol
from locus.core.table import SymbolTable
from locus.output.console import LocusConsoleOutput


class _IntLiteral(click.ParamType):
    """Integer in any Python literal base (``4096``, ``0x1000``, ``0o10``)."""

    name = "integer"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> int:
        if isinstance(value, int):
            return value
        try:
            return int(value, 0)
        except ValueError:
            self.fail(f"{value!r} is not a valid integer", param, ctx)


class _Placement(click.ParamType):
    """``NAME=ADDRESS`` section placement."""

    name = "placement"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Optional[click.Context]) -> tuple[str, int]:
        if isinstance(value, tuple):
            return value
        name, sep, address = str(value).rpartition("=")
        if not sep or not name:
            self.fail(f"{value!r} is not of the form NAME=ADDRESS", param, ctx)
        try:
            return name, int(address, 0)
        except ValueError:
            self.fail(f"{address!r} is not a valid address", param, ctx)


INT_LITERAL = _IntLiteral()
PLACEMENT = _Placement()


class _Session:
    """Objects shared by all subcommands."""

    def __init__(self, config: LocusConfig, json_output: bool) -> None:
        self.config = config
        self.json_output = json_output
        self.console = LocusConsole()
        self.output = LocusConsoleOutput(console=self.console)

    def load(self, executable: str) -> SymbolTable:
        try:
            return SymbolTable.from_executable(
                executable, collector=ObjdumpCollector(self.config.objdump)
            )
        except LocusError as exc:
            self.fail(exc)

    def fail(self, exc: Exception) -> NoReturn:
        self.console.error(str(exc))
        sys.exit(1)

    def echo_json(self, payload: Any) -> None:
        click.echo(json.dumps(payload, indent=2, default=str))


def _dump(models: Sequence[Section | Symbol]) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json") for m in models]


# ---------------------------------------------------------------------------
# CLI group / commands
# ---------------------------------------------------------------------------

@click.group("locus")
@click.option(
    "--objdump",
    "objdump_path",
    default=None,
    help="objdump executable to run (e.g. arm-none-eabi-objdump).",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Output results as JSON to stdout.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
@click.pass_context
def locus_cli(
    ctx: click.Context,
    objdump_path: str | None,
    config_path: str | None,
    json_output: bool,
    verbose: bool,
) -> None:
    """Locus -- symbol table and relocation inspector.

    Builds the section and symbol tables of an executable from objdump
    output and answers the lookups a debugger makes.
    """
    config = LocusConfig.load(config_path)
    if objdump_path:
        config.objdump.path = objdump_path

    settings = config.global_settings
    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
    )
    ctx.obj = _Session(config, json_output)


@locus_cli.command("sections")
@click.argument("executable", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def sections_cmd(session: _Session, executable: str) -> None:
    """Show the section table of EXECUTABLE."""
    table = session.load(executable)
    if session.json_output:
        session.echo_json(_dump(table.sections))
        return
    session.output.display_sections(table.sections)


@locus_cli.command("symbols")
@click.argument("executable", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--kind", "-k",
    type=click.Choice(
        ["all", "functions", "globals", "statics", "labels", "consts"],
        case_sensitive=False,
    ),
    default="all",
    help="Symbol subset to show.",
)
@click.option(
    "--file", "-f",
    "unit",
    default=None,
    help="Compile unit for --kind statics.",
)
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Show at most this many rows.",
)
@click.pass_obj
def symbols_cmd(
    session: _Session,
    executable: str,
    kind: str,
    unit: str | None,
    limit: int | None,
) -> None:
    """List the symbols of EXECUTABLE."""
    if kind == "statics" and unit is None:
        raise click.UsageError("--kind statics requires --file")

    table = session.load(executable)
    selectors = {
        "all": lambda: list(table.symbols),
        "functions": table.functions,
        "globals": table.global_variables,
        "statics": lambda: table.static_variables(unit or ""),
        "labels": table.symbol_variables,
        "consts": table.const_variables,
    }
    symbols = selectors[kind.lower()]()

    if session.json_output:
        session.echo_json(_dump(symbols[:limit] if limit is not None else symbols))
        return
    session.output.display_symbols(
        symbols, title=f"Symbols ({kind})", max_display=limit
    )


@locus_cli.command("lookup")
@click.argument("executable", type=click.Path(exists=True, dir_okay=False))
@click.argument("address", type=INT_LITERAL)
@click.option(
    "--offset",
    type=INT_LITERAL,
    default=None,
    help="Relocate all loadable sections by this load offset first.",
)
@click.option(
    "--section", "-s",
    "placements",
    type=PLACEMENT,
    multiple=True,
    help="Place a section at a runtime address first (NAME=ADDRESS, repeatable).",
)
@click.pass_obj
def lookup_cmd(
    session: _Session,
    executable: str,
    address: int,
    offset: int | None,
    placements: tuple[tuple[str, int], ...],
) -> None:
    """Find the function of EXECUTABLE containing ADDRESS."""
    table = session.load(executable)
    if offset is not None:
        table.relocate_with_offset(offset)
    if placements:
        table.relocate(placements)
    relocated = offset is not None or bool(placements)

    symbol = table.function_at(address, relocated=relocated)
    if session.json_output:
        session.echo_json(symbol.model_dump(mode="json") if symbol else None)
    else:
        session.output.display_match(f"0x{address:x}", symbol, relocated=relocated)
    if symbol is None:
        sys.exit(1)


@locus_cli.command("find")
@click.argument("executable", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.option(
    "--file", "-f",
    "unit",
    default=None,
    help="Prefer a static function from this compile unit.",
)
@click.pass_obj
def find_cmd(session: _Session, executable: str, name: str, unit: str | None) -> None:
    """Find the function NAME in EXECUTABLE."""
    table = session.load(executable)
    symbol = table.function_by_name(name, unit)
    if session.json_output:
        session.echo_json(symbol.model_dump(mode="json") if symbol else None)
    else:
        session.output.display_match(name, symbol)
    if symbol is None:
        sys.exit(1)


# ---------------------------------------------------------------------------
# Module entry point
# ---------------------------------------------------------------------------

def main() -> None:
    """Entry point for ``python -m locus.cli``."""
    locus_cli()


if __name__ == "__main__":
    main()
