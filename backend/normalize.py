"""Pure helpers that turn raw entry input into its stored form.

Day truncation and the date key live here so writes and reads derive the
key the same way.
"""
import re
from datetime import date, datetime
from typing import Iterable, List, Optional

MAX_SECONDARY_MOODS = 2
TAG_SEPARATOR = ","

_WHITESPACE = re.compile(r"[ \t\r\n]+")


def local_now() -> datetime:
    """Current local time, timezone-aware."""
    return datetime.now().astimezone()


def to_day(value: date | datetime) -> date:
    """Truncate a datetime to its calendar day; dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    return value


def date_key(value: date | datetime) -> str:
    """Canonical YYYY-MM-DD key for the day of ``value``."""
    return to_day(value).strftime("%Y-%m-%d")


def count_words(text: Optional[str]) -> int:
    stripped = (text or "").strip()
    if not stripped:
        return 0
    return len(_WHITESPACE.split(stripped))


def _dedupe_casefold(values: Iterable[Optional[str]]) -> List[str]:
    """Trim, drop blanks and case-insensitive duplicates, keep first occurrence."""
    seen = set()
    result = []
    for raw in values:
        value = (raw or "").strip()
        if not value:
            continue
        folded = value.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        result.append(value)
    return result


def normalize_secondary_moods(
    moods: Optional[Iterable[Optional[str]]], primary_mood: Optional[str]
) -> List[str]:
    """At most two secondary moods, distinct from each other and from the primary."""
    primary = (primary_mood or "").strip().casefold()
    cleaned = [m for m in _dedupe_casefold(moods or []) if m.casefold() != primary]
    return cleaned[:MAX_SECONDARY_MOODS]


def normalize_tags(tags: Optional[Iterable[Optional[str]]]) -> List[str]:
    # A tag holding the separator is stored as the tags on either side of it
    parts = (part for tag in tags or [] for part in (tag or "").split(TAG_SEPARATOR))
    return _dedupe_casefold(parts)


def join_tags(tags: Optional[Iterable[Optional[str]]]) -> str:
    return TAG_SEPARATOR.join(normalize_tags(tags))


def split_tags(csv: Optional[str]) -> List[str]:
    return _dedupe_casefold((csv or "").split(TAG_SEPARATOR))
