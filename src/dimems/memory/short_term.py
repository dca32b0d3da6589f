"""Short-term memory: one append-only markdown log.

Each item is a block::

    ## 2024-03-01T09:30:00.000Z #task !high

    call the plumber

    ---
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from dimems.memory.types import ShortTermItem, ShortTermSnapshot, WriteResult, now_iso
from dimems.storage.filesystem import DocumentStore
from dimems.storage.layout import VaultLayout

logger = logging.getLogger(__name__)

DELIMITER = "---"
_DELIMITER_LINE = re.compile(r"^---[ \t]*$", re.MULTILINE)
_HEADER = re.compile(r"^##\s+(.+?)(?:\s+#(\w+))?(?:\s+!(\w+))?$")


def format_item(item: ShortTermItem) -> str:
    category = f" #{item.category}" if item.category else ""
    priority = f" !{item.priority}" if item.priority else ""
    return f"## {item.timestamp}{category}{priority}\n\n{item.content}\n\n{DELIMITER}"


def parse_items(content: str) -> list[ShortTermItem]:
    """Blocks without a recognizable header are skipped."""
    items = []
    for section in _DELIMITER_LINE.split(content):
        lines = section.strip().split("\n")
        for i, line in enumerate(lines):
            match = _HEADER.match(line.strip())
            if match:
                break
        else:
            continue

        timestamp, category, priority = match.groups()
        items.append(
            ShortTermItem(
                timestamp=timestamp,
                content="\n".join(lines[i + 1 :]).strip(),
                category=category,
                priority=priority,
            )
        )
    return items


class ShortTermMemory:
    """Notes appended to a single file; the timestamp identifies an item."""

    def __init__(self, store: DocumentStore, layout: VaultLayout) -> None:
        self.store = store
        self.layout = layout

    @property
    def path(self) -> Path:
        return self.layout.short_term_path

    def add(
        self,
        content: str,
        category: str | None = None,
        priority: str | None = None,
    ) -> WriteResult:
        """Append an item and rewrite the file atomically."""
        item = ShortTermItem(
            timestamp=now_iso(), content=content, category=category, priority=priority
        )

        existing = ""
        metadata: dict = {}
        if self.store.exists(self.path):
            doc = self.store.read(self.path)
            existing, metadata = doc.body.strip(), doc.metadata

        body = f"{existing}\n\n{format_item(item)}\n" if existing else f"{format_item(item)}\n"
        written = self.store.write(self.path, body, metadata)
        logger.info("Added short-term item %s (category=%s)", item.timestamp, category)
        return WriteResult(success=True, file_path=written, timestamp=item.timestamp)

    def read(self) -> ShortTermSnapshot:
        if not self.store.exists(self.path):
            return ShortTermSnapshot()
        doc = self.store.read(self.path)
        return ShortTermSnapshot(items=parse_items(doc.body), content=doc.body)

    def clear(self) -> WriteResult:
        """Replace the whole log with a fresh header. Irreversible."""
        timestamp = now_iso()
        written = self.store.write(
            self.path, f"# Short-Term Memory\n\nCleared at: {timestamp}\n", {}
        )
        logger.info("Cleared short-term memory")
        return WriteResult(success=True, file_path=written, timestamp=timestamp)
