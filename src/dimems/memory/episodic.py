"""Episodic memory: dated events, one file each, bucketed by year-month."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from dimems.errors import ParseError
from dimems.memory.base import RecordRepository, clean_fields, slugify, unique_path
from dimems.memory.types import Document, Episode, WriteResult, as_iso, now_iso

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50


def parse_date(value: str) -> datetime:
    """ISO-8601 date or date-time; aware values are converted to UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ParseError(f"Invalid episode date: {value!r}", {"date": value}) from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed


class EpisodicMemory(RecordRepository[Episode]):
    """Episodes live at ``<episodic_dir>/<YYYY-MM>/<YYYY-MM-DD>-<slug>.md``."""

    kind = "episode"
    related_field = "related_episodes"

    def _directories(self) -> list[Path]:
        return [self.layout.episodic_dir]

    def _file_path(self, date: str, title: str) -> Path:
        d = parse_date(date)
        name = f"{d:%Y-%m-%d}-{slugify(title, SLUG_MAX_LENGTH)}{self.layout.extension}"
        return self.layout.episodic_dir / f"{d:%Y-%m}" / name

    def _to_record(self, doc: Document) -> Episode:
        fm = doc.metadata
        return Episode(
            id=str(fm.get("id", "")),
            title=str(fm.get("title", "")),
            date=as_iso(fm.get("date", "")),
            content=doc.body,
            created_at=as_iso(fm.get("created_at", "")),
            updated_at=as_iso(fm.get("updated_at", "")),
            tags=fm.get("tags"),
            location=fm.get("location"),
            participants=fm.get("participants"),
            related_episodes=fm.get("related_episodes"),
            file_path=doc.path,
        )

    def add(
        self,
        title: str,
        content: str,
        date: str | None = None,
        tags: list[str] | None = None,
        location: str | None = None,
        participants: list[str] | None = None,
        related_episodes: list[str] | None = None,
    ) -> WriteResult:
        """Create an episode; ``date`` defaults to now."""
        episode_id = str(uuid4())
        now = now_iso()
        date = date or now

        path = unique_path(self._file_path(date, title))
        frontmatter: dict[str, Any] = {
            "id": episode_id,
            "title": title,
            "date": date,
            "created_at": now,
            "updated_at": now,
        }
        frontmatter.update(
            clean_fields(
                {
                    "tags": tags,
                    "location": location,
                    "participants": participants,
                    "related_episodes": related_episodes,
                }
            )
        )

        written = self.store.write(path, content, frontmatter)
        self._remember(episode_id, written)
        logger.info("Created episode %s (%s, %s)", episode_id, title, date)
        return WriteResult(success=True, file_path=written, id=episode_id)

    def get_by_date_range(self, start: str | None = None, end: str | None = None) -> list[Episode]:
        """Episodes with ``start <= date <= end``, newest first.

        Dates are compared as ISO-8601 text. A bound shorter than the stored
        value is compared against the same-length prefix, so a date-only
        ``end`` covers that whole day.
        """
        episodes = []
        for doc in self._scan():
            episode_date = as_iso(doc.metadata.get("date"))
            if not episode_date:
                continue
            episode_date = str(episode_date)
            if start and episode_date < start:
                continue
            if end and episode_date[: len(end)] > end:
                continue
            episodes.append(self._to_record(doc))

        episodes.sort(key=lambda e: e.date, reverse=True)
        return episodes

    def get_all(self) -> list[Episode]:
        return self.get_by_date_range()

    def update(self, episode_id: str, **fields: Any) -> WriteResult:
        """Merge ``fields`` into the episode; ``content`` replaces the body.

        The file is not moved when ``date`` changes. Raises NotFoundError.
        """
        path, _ = self._update(episode_id, dict(fields))
        return WriteResult(success=True, file_path=path, id=episode_id)
