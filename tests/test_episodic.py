"""Tests for episodic memory."""

from __future__ import annotations

from pathlib import Path

import pytest

from dimems.config import VaultConfig
from dimems.errors import NotFoundError, ParseError
from dimems.memory.episodic import EpisodicMemory
from dimems.storage.filesystem import DocumentStore
from dimems.storage.layout import VaultLayout


def _make(tmp_path: Path, index: bool = False) -> EpisodicMemory:
    layout = VaultLayout(VaultConfig(path=tmp_path / "vault"))
    layout.ensure_structure()
    return EpisodicMemory(DocumentStore(layout.root), layout, index=index)


@pytest.fixture
def episodic(tmp_path: Path) -> EpisodicMemory:
    return _make(tmp_path)


class TestAdd:
    def test_path_bucketed_by_month(self, episodic: EpisodicMemory):
        result = episodic.add("Kickoff Meeting", "We met.", date="2023-06-15T10:00:00Z")
        assert result.success
        assert result.file_path.parts[-3:] == ("episodes", "2023-06", "2023-06-15-kickoff-meeting.md")
        assert result.file_path.exists()

    def test_frontmatter(self, episodic: EpisodicMemory):
        result = episodic.add(
            "Offsite",
            "Planning day",
            date="2024-02-10",
            tags=["team"],
            location="Lisbon",
            participants=["Ana", "Rui"],
        )
        doc = episodic.store.read(result.file_path)
        assert doc.metadata["id"] == result.id
        assert doc.metadata["title"] == "Offsite"
        assert doc.metadata["date"] == "2024-02-10"
        assert doc.metadata["tags"] == ["team"]
        assert doc.metadata["participants"] == ["Ana", "Rui"]
        assert doc.metadata["created_at"] == doc.metadata["updated_at"]
        assert "related_episodes" not in doc.metadata
        assert doc.body == "Planning day"

    def test_date_defaults_to_now(self, episodic: EpisodicMemory):
        result = episodic.add("Now", "body")
        episode = episodic.get_by_id(result.id)
        assert episode.date == episode.created_at
        assert episode.date.endswith("Z")

    def test_slug_collision_gets_suffix(self, episodic: EpisodicMemory):
        first = episodic.add("Standup", "one", date="2024-01-05")
        second = episodic.add("Standup", "two", date="2024-01-05")
        assert first.file_path.name == "2024-01-05-standup.md"
        assert second.file_path.name == "2024-01-05-standup-2.md"
        assert episodic.get_by_id(first.id).content == "one"
        assert episodic.get_by_id(second.id).content == "two"

    def test_invalid_date(self, episodic: EpisodicMemory):
        with pytest.raises(ParseError):
            episodic.add("Bad", "body", date="not a date")


class TestLookup:
    def test_get_by_id(self, episodic: EpisodicMemory):
        result = episodic.add("Demo", "Showed the prototype", date="2024-04-01")
        episode = episodic.get_by_id(result.id)
        assert episode is not None
        assert episode.title == "Demo"
        assert episode.content == "Showed the prototype"
        assert episode.file_path == result.file_path

    def test_get_by_id_missing_is_none(self, episodic: EpisodicMemory):
        assert episodic.get_by_id("does-not-exist") is None

    def test_date_range_inclusive_boundaries(self, episodic: EpisodicMemory):
        episodic.add("Start", "x", date="2023-01-01")
        episodic.add("Last day", "x", date="2023-12-31")
        episodic.add("Last day evening", "x", date="2023-12-31T22:00:00Z")
        episodic.add("Next year", "x", date="2024-01-02")
        episodic.add("Before", "x", date="2022-12-31")

        titles = [e.title for e in episodic.get_by_date_range("2023-01-01", "2023-12-31")]
        assert "Last day" in titles
        assert "Last day evening" in titles
        assert "Start" in titles
        assert "Next year" not in titles
        assert "Before" not in titles

    def test_date_range_sorted_descending(self, episodic: EpisodicMemory):
        episodic.add("B", "x", date="2024-02-01")
        episodic.add("C", "x", date="2024-03-01")
        episodic.add("A", "x", date="2024-01-01")
        assert [e.title for e in episodic.get_all()] == ["C", "B", "A"]

    def test_open_ended_range(self, episodic: EpisodicMemory):
        episodic.add("Old", "x", date="2020-05-05")
        episodic.add("New", "x", date="2024-05-05")
        assert [e.title for e in episodic.get_by_date_range(start="2021-01-01")] == ["New"]
        assert [e.title for e in episodic.get_by_date_range(end="2021-01-01")] == ["Old"]

    def test_files_without_date_skipped(self, episodic: EpisodicMemory):
        episodic.store.write(episodic.layout.episodic_dir / "loose.md", "x", {"id": "loose"})
        episodic.add("Dated", "x", date="2024-01-01")
        assert [e.title for e in episodic.get_all()] == ["Dated"]

    def test_handwritten_unquoted_date(self, episodic: EpisodicMemory):
        path = episodic.layout.episodic_dir / "2024-05" / "hand.md"
        path.parent.mkdir(parents=True)
        path.write_text("---\nid: hand\ntitle: Hand\ndate: 2024-05-02\n---\n\nbody", encoding="utf-8")
        episode = episodic.get_by_id("hand")
        assert episode.date == "2024-05-02"
        assert [e.title for e in episodic.get_by_date_range("2024-05-01", "2024-05-31")] == ["Hand"]


class TestUpdate:
    def test_merge_fields(self, episodic: EpisodicMemory):
        result = episodic.add("Retro", "went ok", date="2024-03-10", tags=["team"])
        before = episodic.get_by_id(result.id)

        episodic.update(result.id, title="Retro (Q1)", location="Room 4", content="went well")

        after = episodic.get_by_id(result.id)
        assert after.title == "Retro (Q1)"
        assert after.location == "Room 4"
        assert after.tags == ["team"]
        assert after.content == "went well"
        assert after.created_at == before.created_at
        assert after.updated_at >= before.updated_at
        assert after.file_path == before.file_path

    def test_protected_fields(self, episodic: EpisodicMemory):
        result = episodic.add("Retro", "x", date="2024-03-10")
        before = episodic.get_by_id(result.id)
        episodic.update(result.id, id="other", created_at="1999-01-01", file_path="/tmp/x")
        after = episodic.get_by_id(result.id)
        assert after is not None
        assert after.created_at == before.created_at

    def test_body_kept_when_not_supplied(self, episodic: EpisodicMemory):
        result = episodic.add("Retro", "original", date="2024-03-10")
        episodic.update(result.id, title="Renamed")
        assert episodic.get_by_id(result.id).content == "original"

    def test_unknown_id(self, episodic: EpisodicMemory):
        with pytest.raises(NotFoundError):
            episodic.update("missing", title="x")


class TestRelated:
    def test_get_related(self, episodic: EpisodicMemory):
        a = episodic.add("A", "x", date="2024-01-01")
        b = episodic.add("B", "x", date="2024-01-02")
        c = episodic.add(
            "C", "x", date="2024-01-03", related_episodes=[a.id, f"[[{b.id}]]", "ghost"]
        )
        related = episodic.get_related(c.id)
        assert [e.id for e in related] == [a.id, b.id]

    def test_unknown_source(self, episodic: EpisodicMemory):
        assert episodic.get_related("missing") == []


class TestIndex:
    def test_index_built_from_existing_files(self, tmp_path: Path):
        result = _make(tmp_path).add("Seed", "x", date="2024-01-01")
        indexed = _make(tmp_path, index=True)
        assert indexed.get_by_id(result.id).title == "Seed"

    def test_stale_index_falls_back_to_scan(self, tmp_path: Path):
        episodic = _make(tmp_path, index=True)
        result = episodic.add("Moved", "x", date="2024-01-01")
        moved = result.file_path.with_name("elsewhere.md")
        result.file_path.rename(moved)

        episode = episodic.get_by_id(result.id)
        assert episode is not None
        assert episode.file_path == moved
