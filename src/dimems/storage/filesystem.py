"""Document store: markdown files with YAML frontmatter.

Files are the source of truth; nothing is cached. Every write goes to a hidden
temporary sibling first and is moved over the target with ``os.replace``, so a
reader sees either the previous file or the new one, never a partial write.

On-disk format::

    ---
    id: 6f1c...
    title: Kickoff Meeting
    ---

    <body, verbatim>
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any
from uuid import uuid4

import yaml
from frontmatter.default_handlers import YAMLHandler

from dimems.errors import FileSystemError, NotFoundError, ParseError
from dimems.memory.types import Document

logger = logging.getLogger(__name__)

_DELIMITER = re.compile(r"^-{3}[ \t]*$", re.MULTILINE)

DELETED_SUFFIX = ".deleted"


class DocumentStore:
    """Atomic read/write access to frontmatter documents under a vault root."""

    def __init__(self, root: Path, extension: str = ".md") -> None:
        self.root = Path(root)
        self.extension = extension
        self._handler = YAMLHandler()

    # ── Paths ─────────────────────────────────────────────────

    def resolve(self, path: str | Path) -> Path:
        """Absolute paths are used as-is; anything else lives under the root."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.root / p

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).exists()

    # ── Serialization ─────────────────────────────────────────

    def _render(self, body: str, metadata: dict[str, Any]) -> str:
        if not metadata and not _DELIMITER.match(body):
            return body
        fm = self._handler.export(metadata, sort_keys=False)
        return f"---\n{fm}\n---\n\n{body}"

    def _parse(self, text: str, path: Path) -> tuple[dict[str, Any], str]:
        opening = _DELIMITER.match(text)
        if opening is None:
            return {}, text
        closing = _DELIMITER.search(text, opening.end())
        if closing is None:
            raise ParseError(f"Unterminated frontmatter: {path}", {"path": str(path)})

        try:
            metadata = self._handler.load(text[opening.end() : closing.start()])
        except yaml.YAMLError as e:
            raise ParseError(
                f"Malformed frontmatter: {path}", {"path": str(path), "error": str(e)}
            ) from e
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise ParseError(
                f"Frontmatter is not a mapping: {path}",
                {"path": str(path), "type": type(metadata).__name__},
            )

        # Line break after the closing delimiter, then the blank separator line.
        body = text[closing.end() :]
        for _ in range(2):
            if body.startswith("\n"):
                body = body[1:]
        return metadata, body

    # ── CRUD ──────────────────────────────────────────────────

    def read(self, path: str | Path) -> Document:
        """Read and parse a document. Raises NotFoundError / ParseError."""
        full = self.resolve(path)
        if not full.is_file():
            raise NotFoundError(f"File not found: {path}", {"path": str(full)})
        try:
            raw = full.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"File is not valid UTF-8: {path}", {"path": str(full)}) from e
        except OSError as e:
            raise FileSystemError(
                f"Failed to read document: {path}",
                {"operation": "read", "path": str(full), "error": str(e)},
            ) from e
        metadata, body = self._parse(raw, full)
        return Document(metadata=metadata, body=body, path=full)

    def write(self, path: str | Path, body: str, metadata: dict[str, Any] | None = None) -> Path:
        """Atomically write body + metadata. Returns the resolved path."""
        full = self.resolve(path)
        text = self._render(body, dict(metadata or {}))
        tmp = full.with_name(f".{full.name}.{uuid4().hex[:8]}.tmp")
        try:
            full.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(text.encode("utf-8"))
            os.replace(tmp, full)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove temporary file %s", tmp)
            raise FileSystemError(
                f"Failed to write document: {path}",
                {"operation": "write", "path": str(full), "error": str(e)},
            ) from e
        logger.debug("Document written: %s", full)
        return full

    def update(
        self,
        path: str | Path,
        body: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Path:
        """Shallow-merge ``metadata`` over the stored frontmatter, optionally replace body.

        Keys mapped to None are ignored: a patch cannot delete a key.
        """
        doc = self.read(path)
        merged = dict(doc.metadata)
        if metadata:
            merged.update({k: v for k, v in metadata.items() if v is not None})
        new_body = doc.body if body is None else body
        written = self.write(doc.path, new_body, merged)
        logger.debug("Document updated: %s", written)
        return written

    def soft_delete(self, path: str | Path) -> Path:
        """Rename to ``<name>.deleted``; the file stays on disk."""
        full = self.resolve(path)
        if not full.is_file():
            raise NotFoundError(f"File not found: {path}", {"path": str(full)})
        target = full.with_name(full.name + DELETED_SUFFIX)
        try:
            os.replace(full, target)
        except OSError as e:
            raise FileSystemError(
                f"Failed to delete document: {path}",
                {"operation": "soft_delete", "path": str(full), "error": str(e)},
            ) from e
        logger.debug("Document deleted: %s", full)
        return target

    def hard_delete(self, path: str | Path) -> None:
        full = self.resolve(path)
        if not full.is_file():
            raise NotFoundError(f"File not found: {path}", {"path": str(full)})
        try:
            full.unlink()
        except OSError as e:
            raise FileSystemError(
                f"Failed to permanently delete document: {path}",
                {"operation": "hard_delete", "path": str(full), "error": str(e)},
            ) from e
        logger.debug("Document permanently deleted: %s", full)

    # ── Listing ───────────────────────────────────────────────

    def list_files(self, directory: str | Path, recursive: bool = False) -> list[Path]:
        """Files carrying the store extension, in name order, depth-first.

        A missing directory yields an empty list.
        """
        full = self.resolve(directory)
        if not full.is_dir():
            return []
        try:
            entries = sorted(full.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise FileSystemError(
                f"Failed to list files in: {directory}",
                {"operation": "list", "path": str(full), "error": str(e)},
            ) from e

        files: list[Path] = []
        for entry in entries:
            if entry.is_file() and entry.name.endswith(self.extension):
                files.append(entry)
            elif entry.is_dir() and recursive:
                files.extend(self.list_files(entry, recursive=True))
        return files
