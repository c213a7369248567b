"""
Locus Configuration Management
===============================

Configuration for the Locus symbol-table tooling using Python dataclasses
and TOML-based persistence.

Only the outer surfaces (the objdump collector and the CLI) read the
configuration; the parsers and the relocation model are pure functions of
their inputs.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


@dataclass(frozen=False, slots=True)
class ObjdumpConfig:
    """How the external ``objdump`` tool is invoked.

    ``max_output_bytes`` caps the captured standard output of a single
    run; symbol tables of large firmware images stay well below 10 MiB.
    """

    path: str = "objdump"
    timeout: float = 60.0
    max_output_bytes: int = 10 * 1024 * 1024
    demangle: bool = True


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging settings shared by all Locus components."""

    log_level: str = "WARNING"
    log_file: Optional[str] = None
    log_json: bool = False


@dataclass(frozen=False, slots=True)
class LocusConfig:
    """Master configuration.

    Usage:
        >>> config = LocusConfig.load()                  # from default path
        >>> config = LocusConfig.load("custom.toml")     # from custom path
        >>> config.objdump.path
        'objdump'
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    objdump: ObjdumpConfig = field(default_factory=ObjdumpConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> LocusConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root and falls back to defaults when it is absent.  Missing
        keys fall back to dataclass defaults.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does not exist.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            objdump=cls._build_section(ObjdumpConfig, raw.get("objdump", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored so that newer config
        files keep working with older code.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)

