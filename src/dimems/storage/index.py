"""Optional in-memory id -> path index.

Built once by a full scan and updated incrementally on writes. It is only a
shortcut: callers must verify the indexed file still carries the id and fall
back to a scan when it does not.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from dimems.storage.filesystem import DocumentStore

logger = logging.getLogger(__name__)


class PathIndex:
    def __init__(self) -> None:
        self._paths: dict[str, Path] = {}

    def __len__(self) -> int:
        return len(self._paths)

    def rebuild(self, store: DocumentStore, directories: Iterable[Path]) -> None:
        self._paths.clear()
        for directory in directories:
            for path in store.list_files(directory, recursive=True):
                record_id = store.read(path).metadata.get("id")
                if record_id:
                    self._paths[str(record_id)] = path
        logger.debug("Index rebuilt: %d records", len(self._paths))

    def get(self, record_id: str) -> Path | None:
        return self._paths.get(record_id)

    def put(self, record_id: str, path: Path) -> None:
        self._paths[record_id] = path

    def discard(self, record_id: str) -> None:
        self._paths.pop(record_id, None)
