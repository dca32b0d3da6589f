"""Configuration loading from environment variables and dimems.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from dimems.errors import ConfigurationError

_CONFIG_FILENAME = "dimems.toml"
_DEFAULT_LONGTERM_DIRS = ["concepts", "methods", "people"]


@dataclass
class VaultConfig:
    """Vault root and the sub-paths of the three memory kinds."""

    path: Path = Path("./vault")
    short_term: str = "short-term.md"
    episodic_dir: str = "episodes"
    longterm_dirs: list[str] = field(default_factory=lambda: list(_DEFAULT_LONGTERM_DIRS))
    extension: str = ".md"


@dataclass
class LoggingConfig:
    """Log level and optional log file (relative paths live under the vault)."""

    level: str = "INFO"
    file: str | None = ".system/logs/system.log"


@dataclass
class DimemsConfig:
    """Top-level dimems configuration."""

    vault: VaultConfig = field(default_factory=VaultConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _read_toml(path: Path) -> dict:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid config file: {path}", {"path": str(path), "error": str(e)}) from e


def load_config(config_path: Path | None = None) -> DimemsConfig:
    """Load configuration from environment variables and optional dimems.toml.

    Priority: environment variables > dimems.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = _read_toml(config_path)
    else:
        # Search current dir and ~/.dimems/
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".dimems" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = _read_toml(candidate)
                break

    vault_data = file_data.get("vault", {})
    logging_data = file_data.get("logging", {})

    longterm_dirs = vault_data.get("longterm_dirs", list(_DEFAULT_LONGTERM_DIRS))
    if not isinstance(longterm_dirs, list) or not longterm_dirs:
        raise ConfigurationError(
            "vault.longterm_dirs must be a non-empty list", {"value": longterm_dirs}
        )

    extension = vault_data.get("extension", ".md")
    if not extension.startswith("."):
        extension = "." + extension

    config = DimemsConfig(
        vault=VaultConfig(
            path=Path(os.getenv("DIMEMS_VAULT_PATH", vault_data.get("path", "./vault"))),
            short_term=vault_data.get("short_term", "short-term.md"),
            episodic_dir=vault_data.get("episodic_dir", "episodes"),
            longterm_dirs=[str(d) for d in longterm_dirs],
            extension=extension,
        ),
        logging=LoggingConfig(
            level=os.getenv("DIMEMS_LOG_LEVEL", logging_data.get("level", "INFO")),
            file=os.getenv("DIMEMS_LOG_FILE", logging_data.get("file", ".system/logs/system.log"))
            or None,
        ),
    )
    return config
