"""Streak and frequency calculations over journal entries."""
from datetime import date, timedelta
from typing import Dict, Iterable, List, NamedTuple, Optional

NO_MOOD = "-"


class Streaks(NamedTuple):
    current: int
    longest: int
    missed: int


def current_streak(days: Iterable[date], today: date) -> int:
    """Count consecutive days ending at today; 0 if today has no entry."""
    day_set = set(days)
    streak = 0
    cursor = today
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: Iterable[date]) -> int:
    ordered = sorted(set(days))
    if not ordered:
        return 0

    longest = 1
    run = 1
    for previous, day in zip(ordered, ordered[1:]):
        if day == previous + timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def calculate_streaks(days: Iterable[date], today: date) -> Streaks:
    """
    Calculate current, longest and missed-day counts.

    Missed days are the days between the earliest entry and today that have
    no entry, never negative.
    """
    distinct = set(days)
    if not distinct:
        return Streaks(0, 0, 0)

    earliest = min(distinct)
    total_days = (today - earliest).days + 1
    missed = max(0, total_days - len(distinct))

    return Streaks(
        current=current_streak(distinct, today),
        longest=longest_streak(distinct),
        missed=missed,
    )


def count_case_insensitive(values: Iterable[Optional[str]]) -> Dict[str, int]:
    """
    Count values ignoring case, most frequent first.

    Each key keeps the casing it was first seen with; ties keep first-seen order.
    """
    counts: Dict[str, int] = {}
    display: Dict[str, str] = {}
    for raw in values:
        value = (raw or "").strip()
        if not value:
            continue
        folded = value.casefold()
        display.setdefault(folded, value)
        counts[folded] = counts.get(folded, 0) + 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return {display[folded]: count for folded, count in ranked}


def most_common(values: Iterable[Optional[str]]) -> str:
    counts = count_case_insensitive(values)
    if not counts:
        return NO_MOOD
    return next(iter(counts))


def count_in_window(days: List[date], start: date, end: date) -> int:
    return sum(1 for day in days if start <= day <= end)
