"""Vault layout: where each memory kind lives on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from dimems.config import VaultConfig
from dimems.errors import FileSystemError

logger = logging.getLogger(__name__)

# Long-term category -> preferred directory name. "other" has no directory of
# its own and always lands in the first configured one.
CATEGORY_DIRS = {"concept": "concepts", "method": "methods", "person": "people"}

SYSTEM_DIR = ".system"


class VaultLayout:
    """Resolve vault-relative locations from an explicit VaultConfig."""

    def __init__(self, config: VaultConfig) -> None:
        self.config = config
        self.root = Path(config.path).expanduser().resolve()
        self.extension = config.extension

    @property
    def short_term_path(self) -> Path:
        return self.root / self.config.short_term

    @property
    def episodic_dir(self) -> Path:
        return self.root / self.config.episodic_dir

    @property
    def longterm_dirs(self) -> dict[str, Path]:
        """Configured long-term directories, in configuration order."""
        return {name: self.root / name for name in self.config.longterm_dirs}

    @property
    def system_dir(self) -> Path:
        return self.root / SYSTEM_DIR

    def category_dir(self, category: str) -> Path:
        """Directory for a long-term category.

        Falls back to the first configured directory when the category has no
        mapping or its mapped directory is not configured.
        """
        dirs = self.longterm_dirs
        first = next(iter(dirs.values()))
        name = CATEGORY_DIRS.get(category)
        if name is None:
            return first
        if name not in dirs:
            logger.warning(
                "Category %r maps to unconfigured directory %r, using %s", category, name, first
            )
            return first
        return dirs[name]

    def ensure_structure(self) -> None:
        """Create the vault skeleton. Idempotent; never touches existing files."""
        try:
            for d in [self.root, self.episodic_dir, self.system_dir, *self.longterm_dirs.values()]:
                d.mkdir(parents=True, exist_ok=True)
            if not self.short_term_path.exists():
                self.short_term_path.parent.mkdir(parents=True, exist_ok=True)
                self.short_term_path.write_text("", encoding="utf-8")
                logger.info("Created short-term file: %s", self.short_term_path)
        except OSError as e:
            raise FileSystemError(
                f"Failed to initialize vault: {self.root}",
                {"operation": "init", "path": str(self.root), "error": str(e)},
            ) from e
