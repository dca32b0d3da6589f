"""Record types shared by the store, the repositories and the classifier."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Literal

MemoryType = Literal["short_term", "episodic", "longterm"]
LongtermCategory = Literal["concept", "method", "person", "other"]
ShortTermCategory = Literal["task", "thought", "reference"]
Priority = Literal["low", "medium", "high"]

LONGTERM_CATEGORIES: tuple[str, ...] = ("concept", "method", "person", "other")


def now_iso() -> str:
    """Current UTC time as a fixed-width ISO-8601 string, e.g. 2024-03-01T09:30:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def as_iso(value: Any) -> Any:
    """Normalize YAML-decoded dates back to ISO strings; other values pass through."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def strip_wiki_link(ref: str) -> str:
    """``[[abc]]`` -> ``abc``."""
    return ref.replace("[[", "").replace("]]", "").strip()


@dataclass
class Document:
    """A parsed file: frontmatter mapping, verbatim body, resolved path."""

    metadata: dict[str, Any]
    body: str
    path: Path


@dataclass
class ShortTermItem:
    timestamp: str
    content: str
    category: str | None = None
    priority: str | None = None
    status: str = "active"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ShortTermSnapshot:
    items: list[ShortTermItem] = field(default_factory=list)
    content: str = ""


@dataclass
class Episode:
    id: str
    title: str
    date: str
    content: str
    created_at: str
    updated_at: str
    tags: list[str] | None = None
    location: str | None = None
    participants: list[str] | None = None
    related_episodes: list[str] | None = None
    file_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["file_path"] = str(self.file_path) if self.file_path else None
        return data


@dataclass
class Concept:
    id: str
    title: str
    content: str
    category: str
    created_at: str
    updated_at: str
    version: int = 1
    tags: list[str] | None = None
    related_concepts: list[str] | None = None
    sources: list[str] | None = None
    file_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["file_path"] = str(self.file_path) if self.file_path else None
        return data


@dataclass(frozen=True)
class WriteResult:
    """Plain result of a mutating repository call."""

    success: bool
    file_path: Path
    id: str | None = None
    timestamp: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "file_path": str(self.file_path)}
        if self.id is not None:
            data["id"] = self.id
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True)
class ClassificationMetadata:
    date: str | None = None
    title: str | None = None
    tags: tuple[str, ...] | None = None
    location: str | None = None
    participants: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            data[key] = list(value) if isinstance(value, tuple) else value
        return data


@dataclass(frozen=True)
class ClassificationResult:
    type: str
    confidence: float
    metadata: ClassificationMetadata = field(default_factory=ClassificationMetadata)
    category: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "confidence": self.confidence,
            "metadata": self.metadata.to_dict(),
        }
        if self.category is not None:
            data["category"] = self.category
        return data
