"""Exception hierarchy for dimems.

Every error carries a machine-readable ``code`` and a ``context`` dict so the
tool layer can turn it into a plain result record without inspecting types.
"""

from __future__ import annotations

from typing import Any


class DimemsError(Exception):
    """Base class for all dimems errors."""

    code = "MEMORY_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message}


class NotFoundError(DimemsError):
    """A requested path or record id does not exist."""

    code = "NOT_FOUND"


class ParseError(DimemsError):
    """A frontmatter block or a record field could not be parsed."""

    code = "PARSE_ERROR"


class FileSystemError(DimemsError):
    """An I/O fault (permissions, disk, directory creation)."""

    code = "FILESYSTEM_ERROR"


class ClassificationError(DimemsError):
    """Unexpected internal fault while scoring or extracting metadata."""

    code = "CLASSIFICATION_ERROR"


class ConfigurationError(DimemsError):
    """Invalid configuration file or values."""

    code = "CONFIGURATION_ERROR"
