"""
Objdump Collector
==================

Runs GNU ``objdump`` against an executable and captures its output as a
:class:`~locus.core.models.ToolReport`.

The collector never raises for tool failures; it records them on the
report, and the parsers turn a failed report into
:class:`~locus.core.errors.ToolInvocationError`.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

from shared.config import ObjdumpConfig
from shared.logger import LocusLogger

from locus.core.models import ToolReport

logger = LocusLogger("locus.collectors.objdump")


class OutputLimitExceeded(Exception):
    """Captured output was larger than the configured limit."""


class ObjdumpCollector:
    """Capture ``objdump`` section-header and symbol reports.

    Usage::

        collector = ObjdumpCollector(ObjdumpConfig(path="arm-none-eabi-objdump"))
        headers = collector.section_headers("firmware.elf")
        symbols = collector.symbols("firmware.elf")
    """

    def __init__(self, config: Optional[ObjdumpConfig] = None) -> None:
        self._config: ObjdumpConfig = config or ObjdumpConfig()

    @property
    def config(self) -> ObjdumpConfig:
        return self._config

    def section_headers(self, executable: str | Path) -> ToolReport:
        """Run ``objdump --section-headers``."""
        return self.run(["--section-headers", str(executable)])

    def symbols(self, executable: str | Path) -> ToolReport:
        """Run ``objdump --syms`` (demangled unless disabled in the config)."""
        args = ["--syms"]
        if self._config.demangle:
            args.append("--demangle")
        args.append(str(executable))
        return self.run(args)

    def run(self, args: list[str]) -> ToolReport:
        """Run objdump with *args* and capture the result."""
        command = (self._config.path, *args)
        logger.debug("Running %s", " ".join(command))

        try:
            completed = subprocess.run(
                list(command),
                capture_output=True,
                timeout=self._config.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.error("Could not run %s: %s", command[0], exc)
            return ToolReport(command=command, returncode=None, error=exc)

        if len(completed.stdout) > self._config.max_output_bytes:
            exc = OutputLimitExceeded(
                f"{len(completed.stdout)} bytes of output exceed the "
                f"{self._config.max_output_bytes} byte limit"
            )
            logger.error("%s", exc)
            return ToolReport(
                command=command,
                returncode=completed.returncode,
                error=exc,
            )

        stdout = completed.stdout.decode("utf-8", errors="replace")
        stderr = completed.stderr.decode("utf-8", errors="replace")
        if completed.returncode != 0:
            logger.error(
                "%s exited with status %d: %s",
                command[0],
                completed.returncode,
                stderr.strip(),
            )
        return ToolReport(
            command=command,
            stdout=stdout,
            stderr=stderr,
            returncode=completed.returncode,
        )
