"""Heuristic memory classifier.

Scores text against fixed keyword lexicons to decide which memory kind it
belongs to, and pulls out structured metadata with regular expressions.

Scoring
    Each lexicon feeds one accumulator with a fixed weight per matching
    keyword (a keyword counts once, however often it appears):

    ============  ===========  ======
    lexicon       accumulator  weight
    ============  ===========  ======
    temporal      short_term   2
    task          short_term   3
    event         episodic     3
    concept       longterm     2
    ============  ===========  ======

    A date-like pattern adds 5 to episodic, a past-tense cue adds 2, content
    under 100 characters adds 2 to short_term and content over 500 characters
    adds 1 to both episodic and longterm.

Tie-breaking
    The highest accumulator wins and ties go to short_term, then episodic,
    then longterm. The long-term category pass breaks ties method, then
    person, then concept.

The classifier is stateless; ``classify`` is a pure function of its input.
"""

from __future__ import annotations

import logging
import re

from dimems.errors import ClassificationError
from dimems.memory.types import ClassificationMetadata, ClassificationResult

logger = logging.getLogger(__name__)

TEMPORAL_KEYWORDS = (
    "today",
    "yesterday",
    "tomorrow",
    "tonight",
    "morning",
    "afternoon",
    "evening",
    "later",
    "soon",
    "now",
)

TASK_KEYWORDS = (
    "todo",
    "task",
    "need to",
    "should",
    "must",
    "remember to",
    "don't forget",
)

EVENT_KEYWORDS = (
    "meeting",
    "workshop",
    "conference",
    "call",
    "talked",
    "discussed",
    "met with",
    "attended",
    "visited",
    "went to",
)

CONCEPT_KEYWORDS = (
    "is",
    "means",
    "refers to",
    "defined as",
    "concept of",
    "principle",
    "theory",
    "framework",
    "model",
    "approach",
)

METHOD_KEYWORDS = (
    "how to",
    "method",
    "process",
    "procedure",
    "technique",
    "strategy",
    "way to",
    "steps to",
)

PERSON_KEYWORDS = (
    "person",
    "people",
    "client",
    "colleague",
    "friend",
    "contact",
    "works at",
    "email",
    "phone",
)

# (lexicon, accumulator, weight)
TYPE_LEXICONS = (
    (TEMPORAL_KEYWORDS, "short_term", 2),
    (TASK_KEYWORDS, "short_term", 3),
    (EVENT_KEYWORDS, "episodic", 3),
    (CONCEPT_KEYWORDS, "longterm", 2),
)

# Order is the tie-break precedence.
TYPE_PRECEDENCE = ("short_term", "episodic", "longterm")
CATEGORY_LEXICONS = (
    ("method", METHOD_KEYWORDS),
    ("person", PERSON_KEYWORDS),
    ("concept", CONCEPT_KEYWORDS),
)

DATE_BONUS = 5
PAST_TENSE_BONUS = 2
SHORT_CONTENT_LENGTH = 100
SHORT_CONTENT_BONUS = 2
LONG_CONTENT_LENGTH = 500
LONG_CONTENT_BONUS = 1
DEFAULT_CONFIDENCE = 0.5

TITLE_MAX_LENGTH = 100
TITLE_TRUNCATE_LENGTH = 50

_DATE_PATTERNS = (
    re.compile(r"\d{4}-\d{2}-\d{2}"),
    re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}"),
    re.compile(r"\d{1,2}\.\d{1,2}\.\d{2,4}"),
    re.compile(
        r"(january|february|march|april|may|june|july|august|september|october|november|december)"
        r"\s+\d{1,2}",
        re.IGNORECASE,
    ),
    re.compile(r"\d{1,2}\s+(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE),
)

_PAST_TENSE_PATTERNS = (
    re.compile(r"\b(was|were|had|did|went|came|saw|met|talked|discussed)\b"),
    re.compile(r"\b\w+ed\b"),
)

_ISO_DATETIME = re.compile(r"\d{4}-\d{2}-\d{2}T?\d{2}:\d{2}:\d{2}")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_SENTENCE_END = re.compile(r"[.!?]")
_TAG = re.compile(r"#(\w+)")

_NAME = r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*"
_LOCATION_PATTERNS = (
    re.compile(rf"\bat\s+(?:the\s+)?({_NAME})"),
    re.compile(rf"\bin\s+(?:the\s+)?({_NAME})"),
    re.compile(r"\blocation:\s*(.+?)(?:\n|$)", re.IGNORECASE),
)
_WITH_NAME = re.compile(rf"\bwith\s+({_NAME})")
# Capitalized phrases, but not at the very start or right after ". "
_PROPER_NAME = re.compile(rf"(?<!^)(?<!\. )\b({_NAME})")

WEEKDAYS = frozenset(
    ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
)


def _count_matches(text: str, keywords: tuple[str, ...]) -> int:
    return sum(1 for keyword in keywords if keyword in text)


def _dedupe(values: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def has_date_pattern(text: str) -> bool:
    return any(p.search(text) for p in _DATE_PATTERNS)


def has_past_tense(text: str) -> bool:
    return any(p.search(text) for p in _PAST_TENSE_PATTERNS)


def extract_date(text: str) -> str | None:
    """First ISO date-time, else first ISO date."""
    match = _ISO_DATETIME.search(text) or _ISO_DATE.search(text)
    return match.group(0) if match else None


def extract_title(content: str) -> str | None:
    first_line = content.split("\n")[0].strip()
    if 0 < len(first_line) <= TITLE_MAX_LENGTH:
        return first_line

    first_sentence = _SENTENCE_END.split(content)[0].strip()
    if 0 < len(first_sentence) <= TITLE_MAX_LENGTH:
        return first_sentence

    if len(content) > TITLE_TRUNCATE_LENGTH:
        return content[:TITLE_TRUNCATE_LENGTH] + "..."
    return content or None


def extract_tags(text: str) -> tuple[str, ...]:
    return _dedupe(_TAG.findall(text))


def extract_location(text: str) -> str | None:
    for pattern in _LOCATION_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1).strip()
    return None


def extract_participants(text: str) -> tuple[str, ...]:
    names = _WITH_NAME.findall(text)
    names.extend(n for n in _PROPER_NAME.findall(text) if n not in WEEKDAYS)
    return _dedupe(names)


def extract_metadata(content: str, context: str | None = None) -> ClassificationMetadata:
    """Pattern-based metadata. Missing matches are simply left as None."""
    tags = extract_tags(f"{content} {context or ''}")
    participants = extract_participants(content)
    return ClassificationMetadata(
        date=extract_date(content),
        title=extract_title(content),
        tags=tags or None,
        location=extract_location(content),
        participants=participants or None,
    )


def score(content: str, context: str | None = None) -> dict[str, int]:
    """Accumulator totals per memory type."""
    combined = f"{content.lower()} {(context or '').lower()}"
    scores = dict.fromkeys(TYPE_PRECEDENCE, 0)

    for keywords, memory_type, weight in TYPE_LEXICONS:
        scores[memory_type] += _count_matches(combined, keywords) * weight

    if has_date_pattern(combined):
        scores["episodic"] += DATE_BONUS
    if has_past_tense(combined):
        scores["episodic"] += PAST_TENSE_BONUS
    if len(content) < SHORT_CONTENT_LENGTH:
        scores["short_term"] += SHORT_CONTENT_BONUS
    if len(content) > LONG_CONTENT_LENGTH:
        scores["episodic"] += LONG_CONTENT_BONUS
        scores["longterm"] += LONG_CONTENT_BONUS
    return scores


def determine_category(text: str) -> str:
    """Long-term category for already lower-cased text."""
    category_scores = [(name, _count_matches(text, keywords)) for name, keywords in CATEGORY_LEXICONS]
    best = max(s for _, s in category_scores)
    if best == 0:
        return "other"
    # max() keeps the first of equal scores, i.e. the precedence order.
    return max(category_scores, key=lambda item: item[1])[0]


class MemoryClassifier:
    """Route raw text to short_term / episodic / longterm."""

    def classify(self, content: str, context: str | None = None) -> ClassificationResult:
        try:
            scores = score(content, context)
            best = max(scores.values())

            category = None
            if best == 0:
                memory_type = "episodic"
                confidence = DEFAULT_CONFIDENCE
            else:
                memory_type = next(t for t in TYPE_PRECEDENCE if scores[t] == best)
                confidence = best / sum(scores.values())
                if memory_type == "longterm":
                    combined = f"{content.lower()} {(context or '').lower()}"
                    category = determine_category(combined)

            metadata = extract_metadata(content, context)
        except Exception as e:
            raise ClassificationError(
                "Failed to classify memory", {"error": str(e), "content": str(content)[:200]}
            ) from e

        logger.debug(
            "Classification result: type=%s confidence=%.3f category=%s scores=%s",
            memory_type,
            confidence,
            category,
            scores,
        )
        return ClassificationResult(
            type=memory_type, confidence=confidence, category=category, metadata=metadata
        )
