"""Tests for long-term (concept) memory."""

from __future__ import annotations

from pathlib import Path

import pytest

from dimems.config import VaultConfig
from dimems.errors import NotFoundError
from dimems.memory.longterm import LongtermMemory
from dimems.storage.filesystem import DocumentStore
from dimems.storage.layout import VaultLayout


def _make(tmp_path: Path, **vault) -> LongtermMemory:
    layout = VaultLayout(VaultConfig(path=tmp_path / "vault", **vault))
    layout.ensure_structure()
    return LongtermMemory(DocumentStore(layout.root), layout)


@pytest.fixture
def longterm(tmp_path: Path) -> LongtermMemory:
    return _make(tmp_path)


class TestAdd:
    def test_category_directories(self, longterm: LongtermMemory):
        root = longterm.layout.root
        assert longterm.add("Entropy", "x", "concept").file_path.parent == root / "concepts"
        assert longterm.add("Pomodoro", "x", "method").file_path.parent == root / "methods"
        assert longterm.add("Ada Lovelace", "x", "person").file_path.parent == root / "people"
        assert longterm.add("Misc", "x", "other").file_path.parent == root / "concepts"

    def test_filename_is_slug(self, longterm: LongtermMemory):
        result = longterm.add("Spaced Repetition: A Primer!", "x", "method")
        assert result.file_path.name == "spaced-repetition-a-primer.md"

    def test_initial_frontmatter(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "Disorder measure", "concept", tags=["physics"], sources=[])
        doc = longterm.store.read(result.file_path)
        assert doc.metadata["id"] == result.id
        assert doc.metadata["version"] == 1
        assert doc.metadata["category"] == "concept"
        assert doc.metadata["tags"] == ["physics"]
        assert "sources" not in doc.metadata
        assert "related_concepts" not in doc.metadata

    def test_category_fallback_to_first_configured_dir(self, tmp_path: Path):
        longterm = _make(tmp_path, longterm_dirs=["notes", "methods"])
        root = longterm.layout.root
        concept = longterm.add("Entropy", "x", "concept")
        person = longterm.add("Grace Hopper", "x", "person")
        method = longterm.add("Pomodoro", "x", "method")
        assert concept.file_path.parent == root / "notes"
        assert person.file_path.parent == root / "notes"
        assert method.file_path.parent == root / "methods"
        assert longterm.get_by_id(person.id).category == "person"

    def test_duplicate_title_does_not_overwrite(self, longterm: LongtermMemory):
        first = longterm.add("Entropy", "thermodynamics", "concept")
        second = longterm.add("Entropy", "information theory", "concept")
        assert first.file_path != second.file_path
        assert second.file_path.name == "entropy-2.md"
        assert longterm.get_by_id(first.id).content == "thermodynamics"


class TestLookup:
    def test_get_by_id(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "Disorder measure", "concept")
        concept = longterm.get_by_id(result.id)
        assert concept.title == "Entropy"
        assert concept.content == "Disorder measure"
        assert concept.version == 1

    def test_get_by_id_missing_is_none(self, longterm: LongtermMemory):
        assert longterm.get_by_id("missing") is None

    def test_get_by_category_sorted_by_title(self, longterm: LongtermMemory):
        longterm.add("banana", "x", "concept")
        longterm.add("Apple", "x", "concept")
        longterm.add("cherry", "x", "concept")
        longterm.add("Zettelkasten", "x", "method")
        assert [c.title for c in longterm.get_by_category("concept")] == [
            "Apple",
            "banana",
            "cherry",
        ]

    def test_get_all(self, longterm: LongtermMemory):
        longterm.add("Zettelkasten", "x", "method")
        longterm.add("Ada", "x", "person")
        longterm.add("entropy", "x", "concept")
        assert [c.title for c in longterm.get_all()] == ["Ada", "entropy", "Zettelkasten"]


class TestUpdate:
    def test_version_increments(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "v1", "concept")
        original = longterm.get_by_id(result.id)

        previous = original.updated_at
        for n in range(1, 4):
            longterm.update(result.id, content=f"v{n + 1}")
            concept = longterm.get_by_id(result.id)
            assert concept.version == 1 + n
            assert concept.created_at == original.created_at
            assert concept.updated_at >= previous
            previous = concept.updated_at
        assert concept.content == "v4"

    def test_caller_version_ignored(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "x", "concept")
        longterm.update(result.id, version=99, tags=["physics"])
        concept = longterm.get_by_id(result.id)
        assert concept.version == 2
        assert concept.tags == ["physics"]

    def test_unknown_frontmatter_preserved(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "x", "concept")
        longterm.store.update(result.file_path, metadata={"aliases": ["S"]})
        longterm.update(result.id, title="Entropy (physics)")
        doc = longterm.store.read(result.file_path)
        assert doc.metadata["aliases"] == ["S"]
        assert doc.metadata["title"] == "Entropy (physics)"

    def test_category_change_keeps_file(self, longterm: LongtermMemory):
        result = longterm.add("Entropy", "x", "concept")
        longterm.update(result.id, category="method")
        concept = longterm.get_by_id(result.id)
        assert concept.category == "method"
        assert concept.file_path == result.file_path

    def test_unknown_id(self, longterm: LongtermMemory):
        with pytest.raises(NotFoundError):
            longterm.update("missing", title="x")


class TestRelated:
    def test_get_related(self, longterm: LongtermMemory):
        a = longterm.add("Heat", "x", "concept")
        b = longterm.add("Carnot", "x", "person")
        c = longterm.add(
            "Entropy", "x", "concept", related_concepts=[f"[[{a.id}]]", b.id, "[[missing]]"]
        )
        assert [r.title for r in longterm.get_related(c.id)] == ["Heat", "Carnot"]

    def test_no_related(self, longterm: LongtermMemory):
        result = longterm.add("Lonely", "x", "concept")
        assert longterm.get_related(result.id) == []

    def test_unknown_source(self, longterm: LongtermMemory):
        assert longterm.get_related("missing") == []
