"""
Prism Configuration Management
===============================

Centralized configuration for the Prism toolkit using Python dataclasses
and TOML-based persistence.

Every tool reads its own section from the same ``config.toml``; keys that
a section does not declare are ignored so older builds keep loading newer
files.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[no-redef]


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ========================== Tool-Specific Configs ==========================


@dataclass(frozen=False, slots=True)
class DexMapConfig:
    """Configuration for DexMap -- DEX structure visualiser.

    Controls the canvas geometry, output naming and how strictly the
    encoded-value arrays of static initialisers are measured.
    """

    canvas_width: int = 256
    max_file_size: int = 52_428_800  # 50 MiB
    output_extension: str = ".ppn"
    strict_encoded_values: bool = False
    write_region_report: bool = False

    def __post_init__(self) -> None:
        for name in ("canvas_width", "max_file_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"dexmap.{name} must be a positive integer, got {value!r}")
        if not isinstance(self.output_extension, str):
            raise ValueError(
                f"dexmap.output_extension must be a string, got {self.output_extension!r}"
            )


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings shared across all Prism tools.

    Controls logging verbosity, log destinations and the output directory.
    """

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    output_dir: str = "."


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class PrismConfig:
    """Master configuration aggregating global and tool-specific settings.

    Usage:
        >>> config = PrismConfig.load()                  # from default path
        >>> config = PrismConfig.load("custom.toml")     # from custom path
        >>> config.dexmap.canvas_width
        256
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    dexmap: DexMapConfig = field(default_factory=DexMapConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> PrismConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.
                  Defaults to ``<project_root>/config.toml``.

        Returns:
            A fully-populated :class:`PrismConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
            ValueError: The file is not valid TOML or a ``[dexmap]`` value is
                out of range.
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
            dexmap=cls._build_section(DexMapConfig, raw.get("dexmap", {})),
        )

    # ------------------------------------------------------------------ #
    #  Serialisation helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)
