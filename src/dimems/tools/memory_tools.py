"""Tool callables over the memory system.

These functions are designed to be registered as agent tools (MCP or
otherwise). Parameters arrive already validated; every callable returns a
JSON-serializable dict. Errors become ``{"success": False, "error": <code>,
"message": <text>}`` instead of partial results.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable

from dimems.errors import DimemsError

if TYPE_CHECKING:
    from dimems.core import MemorySystem
    from dimems.memory.types import Concept, Episode

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200


def _snippet(text: str) -> str:
    return text[:SNIPPET_LENGTH] + "..." if len(text) > SNIPPET_LENGTH else text


def _episode_summary(e: Episode) -> dict[str, Any]:
    return {
        "id": e.id,
        "title": e.title,
        "date": e.date,
        "tags": e.tags,
        "content": _snippet(e.content),
    }


def _concept_summary(c: Concept) -> dict[str, Any]:
    return {
        "id": c.id,
        "title": c.title,
        "category": c.category,
        "tags": c.tags,
        "content": _snippet(c.content),
    }


def _as_result(fn: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            return fn(*args, **kwargs)
        except DimemsError as e:
            logger.error("%s failed: %s", fn.__name__, e.message)
            return {"success": False, **e.to_dict()}

    return wrapper


def get_memory_tools(system: MemorySystem) -> dict[str, Callable[..., dict[str, Any]]]:
    """Return a dict of tool_name -> callable for memory operations."""

    @_as_result
    def short_term_add(content: str, category: str | None = None, priority: str | None = None):
        """Add a note to short-term memory."""
        return system.short_term.add(content, category=category, priority=priority).to_dict()

    @_as_result
    def short_term_read():
        """Read every short-term item."""
        snapshot = system.short_term.read()
        return {
            "items": [item.to_dict() for item in snapshot.items],
            "count": len(snapshot.items),
        }

    @_as_result
    def short_term_clear():
        """Wipe short-term memory."""
        return system.short_term.clear().to_dict()

    @_as_result
    def episodic_add(title: str, content: str, **params: Any):
        """Store a dated event."""
        result = system.episodic.add(title, content, **params)
        return {**result.to_dict(), "message": "Episode stored in episodic memory"}

    @_as_result
    def episodic_get_by_id(id: str):
        episode = system.episodic.get_by_id(id)
        return {"episode": episode.to_dict() if episode else None, "found": episode is not None}

    @_as_result
    def episodic_get_by_date_range(start: str | None = None, end: str | None = None):
        episodes = system.episodic.get_by_date_range(start, end)
        return {"episodes": [_episode_summary(e) for e in episodes], "count": len(episodes)}

    @_as_result
    def episodic_update(id: str, **updates: Any):
        return system.episodic.update(id, **updates).to_dict()

    @_as_result
    def episodic_get_related(id: str):
        related = system.episodic.get_related(id)
        return {
            "related": [{"id": e.id, "title": e.title, "date": e.date} for e in related],
            "count": len(related),
        }

    @_as_result
    def longterm_add(title: str, content: str, category: str, **params: Any):
        """Store timeless knowledge, a method or a person."""
        result = system.longterm.add(title, content, category, **params)
        return {**result.to_dict(), "message": "Concept stored in long-term memory"}

    @_as_result
    def longterm_get_by_id(id: str):
        concept = system.longterm.get_by_id(id)
        return {"concept": concept.to_dict() if concept else None, "found": concept is not None}

    @_as_result
    def longterm_get_by_category(category: str):
        concepts = system.longterm.get_by_category(category)
        return {"concepts": [_concept_summary(c) for c in concepts], "count": len(concepts)}

    @_as_result
    def longterm_get_all():
        concepts = system.longterm.get_all()
        return {"concepts": [_concept_summary(c) for c in concepts], "count": len(concepts)}

    @_as_result
    def longterm_update(id: str, **updates: Any):
        return system.longterm.update(id, **updates).to_dict()

    @_as_result
    def longterm_get_related(id: str):
        related = system.longterm.get_related(id)
        return {
            "related": [{"id": c.id, "title": c.title, "category": c.category} for c in related],
            "count": len(related),
        }

    @_as_result
    def classify(content: str, context: str | None = None):
        """Suggest which memory kind a piece of text belongs to."""
        return system.classifier.classify(content, context).to_dict()

    return {
        "memory_short_term_add": short_term_add,
        "memory_short_term_read": short_term_read,
        "memory_short_term_clear": short_term_clear,
        "memory_episodic_add": episodic_add,
        "memory_episodic_get_by_id": episodic_get_by_id,
        "memory_episodic_get_by_date_range": episodic_get_by_date_range,
        "memory_episodic_update": episodic_update,
        "memory_episodic_get_related": episodic_get_related,
        "memory_longterm_add": longterm_add,
        "memory_longterm_get_by_id": longterm_get_by_id,
        "memory_longterm_get_by_category": longterm_get_by_category,
        "memory_longterm_get_all": longterm_get_all,
        "memory_longterm_update": longterm_update,
        "memory_longterm_get_related": longterm_get_related,
        "memory_classify": classify,
    }
