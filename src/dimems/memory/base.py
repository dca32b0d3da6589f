"""Shared plumbing for the file-per-record repositories (episodic, long-term)."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Generic, Iterator, TypeVar

from dimems.errors import NotFoundError
from dimems.memory.types import Document, as_iso, now_iso, strip_wiki_link
from dimems.storage.filesystem import DocumentStore
from dimems.storage.index import PathIndex
from dimems.storage.layout import VaultLayout

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")

# Fields a caller can never overwrite through update().
PROTECTED_FIELDS = frozenset(["id", "created_at", "file_path"])


def slugify(title: str, max_length: int) -> str:
    """Lower-case, non-alphanumeric runs to hyphens, trimmed, truncated."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")[:max_length]
    return slug or "unnamed"


def unique_path(path: Path) -> Path:
    """``path`` if free, else ``<stem>-2``, ``<stem>-3``, ..."""
    if not path.exists():
        return path
    counter = 2
    candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
    while candidate.exists():
        counter += 1
        candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
    logger.warning("File name collision for %s, using %s", path.name, candidate.name)
    return candidate


def clean_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unset optionals (None, empty lists) and turn tuples into lists."""
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            value = list(value)
        cleaned[key] = value
    return cleaned


class RecordRepository(Generic[RecordT]):
    """Scan-based lookup over one-file-per-record directories.

    Every lookup re-reads the tree. With ``index=True`` an id -> path map is
    consulted first, but a hit is only trusted after the file is re-read and
    its ``id`` matches.
    """

    kind = "record"
    related_field = "related"

    def __init__(self, store: DocumentStore, layout: VaultLayout, index: bool = False) -> None:
        self.store = store
        self.layout = layout
        self._index: PathIndex | None = None
        if index:
            self._index = PathIndex()
            self._index.rebuild(store, self._directories())

    # ── Hooks ─────────────────────────────────────────────────

    def _directories(self) -> list[Path]:
        raise NotImplementedError

    def _to_record(self, doc: Document) -> RecordT:
        raise NotImplementedError

    def _bump(self, metadata: dict[str, Any]) -> dict[str, Any]:
        """Extra metadata written on every update."""
        return {}

    # ── Scanning ──────────────────────────────────────────────

    def _scan(self) -> Iterator[Document]:
        for directory in self._directories():
            for path in self.store.list_files(directory, recursive=True):
                yield self.store.read(path)

    def _locate(self, record_id: str) -> Document | None:
        if self._index is not None:
            path = self._index.get(record_id)
            if path is not None and self.store.exists(path):
                doc = self.store.read(path)
                if doc.metadata.get("id") == record_id:
                    return doc
            self._index.discard(record_id)

        for doc in self._scan():
            if doc.metadata.get("id") == record_id:
                if self._index is not None:
                    self._index.put(record_id, doc.path)
                return doc
        return None

    def _remember(self, record_id: str, path: Path) -> None:
        if self._index is not None:
            self._index.put(record_id, path)

    # ── Public API ────────────────────────────────────────────

    def get_by_id(self, record_id: str) -> RecordT | None:
        """The record with this id, or None when no file carries it."""
        doc = self._locate(record_id)
        return self._to_record(doc) if doc is not None else None

    def get_related(self, record_id: str) -> list[RecordT]:
        """Resolve the record's related ids; unknown ids are skipped."""
        doc = self._locate(record_id)
        if doc is None:
            return []
        refs = doc.metadata.get(self.related_field) or []
        related = []
        for ref in refs:
            target = self.get_by_id(strip_wiki_link(str(ref)))
            if target is not None:
                related.append(target)
        return related

    def _update(self, record_id: str, fields: dict[str, Any]) -> tuple[Path, str]:
        doc = self._locate(record_id)
        if doc is None:
            raise NotFoundError(f"{self.kind.capitalize()} not found: {record_id}", {"id": record_id})

        body = fields.pop("content", None)
        patch = {
            k: list(v) if isinstance(v, tuple) else as_iso(v)
            for k, v in fields.items()
            if v is not None and k not in PROTECTED_FIELDS
        }
        updated_at = now_iso()
        patch.update(self._bump(doc.metadata))
        patch["updated_at"] = updated_at

        path = self.store.update(doc.path, body=body, metadata=patch)
        self._remember(record_id, path)
        logger.info("Updated %s %s", self.kind, record_id)
        return path, updated_at
