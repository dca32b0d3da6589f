"""Long-term memory: timeless, categorized, versioned concepts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from uuid import uuid4

from dimems.memory.base import RecordRepository, clean_fields, slugify, unique_path
from dimems.memory.types import Concept, Document, WriteResult, as_iso, now_iso

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 80


def _title_key(concept: Concept) -> tuple[str, str]:
    return (concept.title.casefold(), concept.title)


class LongtermMemory(RecordRepository[Concept]):
    """Concepts live at ``<category_dir>/<slug>.md``."""

    kind = "concept"
    related_field = "related_concepts"

    def _directories(self) -> list[Path]:
        return list(self.layout.longterm_dirs.values())

    def _to_record(self, doc: Document) -> Concept:
        fm = doc.metadata
        return Concept(
            id=str(fm.get("id", "")),
            title=str(fm.get("title", "")),
            content=doc.body,
            category=fm.get("category") or "other",
            created_at=as_iso(fm.get("created_at", "")),
            updated_at=as_iso(fm.get("updated_at", "")),
            version=int(fm.get("version") or 1),
            tags=fm.get("tags"),
            related_concepts=fm.get("related_concepts"),
            sources=fm.get("sources"),
            file_path=doc.path,
        )

    def _bump(self, metadata: dict[str, Any]) -> dict[str, Any]:
        return {"version": int(metadata.get("version") or 1) + 1}

    def add(
        self,
        title: str,
        content: str,
        category: str,
        tags: list[str] | None = None,
        related_concepts: list[str] | None = None,
        sources: list[str] | None = None,
    ) -> WriteResult:
        """Create a concept at version 1 in its category's directory."""
        concept_id = str(uuid4())
        now = now_iso()

        directory = self.layout.category_dir(category)
        path = unique_path(directory / f"{slugify(title, SLUG_MAX_LENGTH)}{self.layout.extension}")
        frontmatter: dict[str, Any] = {
            "id": concept_id,
            "title": title,
            "category": category,
            "created_at": now,
            "updated_at": now,
            "version": 1,
        }
        frontmatter.update(
            clean_fields({"tags": tags, "related_concepts": related_concepts, "sources": sources})
        )

        written = self.store.write(path, content, frontmatter)
        self._remember(concept_id, written)
        logger.info("Created concept %s (%s, %s)", concept_id, title, category)
        return WriteResult(success=True, file_path=written, id=concept_id)

    def get_by_category(self, category: str) -> list[Concept]:
        """Every concept stored in the category's directory, sorted by title."""
        concepts = [
            self._to_record(self.store.read(path))
            for path in self.store.list_files(self.layout.category_dir(category), recursive=True)
        ]
        concepts.sort(key=_title_key)
        return concepts

    def get_all(self) -> list[Concept]:
        concepts = [self._to_record(doc) for doc in self._scan()]
        concepts.sort(key=_title_key)
        return concepts

    def update(self, concept_id: str, **fields: Any) -> WriteResult:
        """Merge ``fields`` and bump ``version`` by one. Raises NotFoundError.

        A caller-supplied ``version`` is ignored; the file stays in its
        directory even if ``category`` changes.
        """
        fields.pop("version", None)
        path, _ = self._update(concept_id, dict(fields))
        return WriteResult(success=True, file_path=path, id=concept_id)
