"""Journal entry persistence and analytics.

JournalEntryService is the only way the application reads or writes entries.
Every public coroutine first awaits the store's ensure_ready(), so callers
never deal with initialization order.
"""
import logging
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set

from sqlalchemy import delete
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select

from db import JournalStore
from errors import ConstraintViolationError
from models import JournalEntry
from normalize import (
    count_words,
    date_key,
    join_tags,
    local_now,
    normalize_secondary_moods,
    to_day,
)
from schemas import DashboardStats, StreakStats
from stats import (
    calculate_streaks,
    count_case_insensitive,
    count_in_window,
    current_streak,
    most_common,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

# Columns replaced when an entry for the same day is written again
MUTABLE_FIELDS = (
    "category",
    "title",
    "body",
    "primary_mood",
    "secondary_mood_1",
    "secondary_mood_2",
    "tags_csv",
    "word_count",
    "updated_at",
)


class JournalEntryService:
    def __init__(self, store: JournalStore, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            store: Storage handle the entries live in
            clock: Returns the current timezone-aware local time; "today" for all statistics
                   is derived from it
        """
        self.store = store
        self.clock = clock or local_now
        self._listeners: List[Listener] = []

    def today(self) -> date:
        return self.clock().date()

    # =========================================================================
    # Change notification
    # =========================================================================

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked after every committed write."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_changed(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"Data changed listener failed: {str(e)}", exc_info=True)

    # =========================================================================
    # Lookups
    # =========================================================================

    async def _fetch(self, stmt) -> List[JournalEntry]:
        await self.store.ensure_ready()
        async with self.store.session() as session:
            result = await session.exec(stmt)
            return list(result.all())

    async def get_by_id(self, entry_id: int) -> Optional[JournalEntry]:
        rows = await self._fetch(select(JournalEntry).where(JournalEntry.id == entry_id))
        return rows[0] if rows else None

    async def get_by_date(self, day: date | datetime) -> Optional[JournalEntry]:
        key = date_key(day)
        rows = await self._fetch(select(JournalEntry).where(JournalEntry.date_key == key))
        return rows[0] if rows else None

    async def has_entry_for_date(self, day: date | datetime) -> bool:
        return (await self.get_by_date(day)) is not None

    # =========================================================================
    # Writes
    # =========================================================================

    async def upsert_for_date(
        self,
        day: date | datetime,
        category: Optional[str],
        title: Optional[str],
        body: Optional[str],
        primary_mood: Optional[str],
        secondary_moods: Optional[Iterable[str]] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> int:
        """
        Create the entry for a day, or overwrite it if one already exists.

        Secondary moods are trimmed, de-duplicated ignoring case, stripped of
        the primary mood and cut to two. Tags are split on commas, trimmed and
        de-duplicated ignoring case, keeping first-occurrence order.

        Returns:
            The id of the created or updated entry
        """
        await self.store.ensure_ready()

        entry_day = to_day(day)
        key = date_key(entry_day)
        moods = normalize_secondary_moods(secondary_moods, primary_mood)

        values = {
            "category": category or "",
            "title": title or "",
            "body": body or "",
            "primary_mood": primary_mood or "",
            "secondary_mood_1": moods[0] if len(moods) > 0 else "",
            "secondary_mood_2": moods[1] if len(moods) > 1 else "",
            "tags_csv": join_tags(tags),
            "word_count": count_words(body),
            "updated_at": self.clock(),
        }

        try:
            entry_id = await self._insert_or_update(key, entry_day, values)
        except ConstraintViolationError:
            logger.warning(f"Unique conflict writing entry for {key}, updating existing row")
            entry_id = await self._update_existing(key, values)

        logger.info(f"Upserted entry {entry_id} for {key}")
        self._notify_changed()
        return entry_id

    async def _insert_or_update(self, key: str, entry_day: date, values: Dict) -> int:
        """Single INSERT ... ON CONFLICT(date_key) DO UPDATE, returning the row id."""
        stmt = sqlite_insert(JournalEntry).values(
            date_key=key,
            entry_date=entry_day,
            created_at=values["updated_at"],
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["date_key"],
            set_={name: stmt.excluded[name] for name in MUTABLE_FIELDS},
        ).returning(JournalEntry.id)

        async with self.store.session() as session:
            try:
                result = await session.exec(stmt)
                entry_id = result.scalar_one()
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ConstraintViolationError(key) from e
        return entry_id

    async def _update_existing(self, key: str, values: Dict) -> int:
        async with self.store.session() as session:
            result = await session.exec(select(JournalEntry).where(JournalEntry.date_key == key))
            entry = result.first()
            if entry is None:
                raise ConstraintViolationError(key, f"Entry for {key} conflicted but could not be found")

            for name in MUTABLE_FIELDS:
                setattr(entry, name, values[name])
            session.add(entry)
            await session.commit()
            return entry.id

    async def delete(self, entry_id: int) -> None:
        """Delete an entry by id; a missing id is a no-op."""
        await self.store.ensure_ready()

        async with self.store.session() as session:
            result = await session.exec(delete(JournalEntry).where(JournalEntry.id == entry_id))
            await session.commit()

        if result.rowcount:
            logger.info(f"Deleted entry {entry_id}")
        else:
            logger.info(f"No entry {entry_id} to delete")
        self._notify_changed()

    # =========================================================================
    # Listings
    # =========================================================================

    def _newest_first(self):
        return select(JournalEntry).order_by(col(JournalEntry.entry_date).desc())

    async def get_all(self) -> List[JournalEntry]:
        return await self._fetch(self._newest_first())

    async def get_range(self, date_from: date | datetime, date_to: date | datetime) -> List[JournalEntry]:
        """Entries between two days inclusive, newest first."""
        stmt = (
            self._newest_first()
            .where(JournalEntry.entry_date >= to_day(date_from))
            .where(JournalEntry.entry_date <= to_day(date_to))
        )
        return await self._fetch(stmt)

    async def get_page(self, page_index: int, page_size: int) -> List[JournalEntry]:
        page_index = max(0, page_index)
        page_size = max(1, page_size)
        stmt = self._newest_first().offset(page_index * page_size).limit(page_size)
        return await self._fetch(stmt)

    async def _entries_for(self, date_from, date_to) -> List[JournalEntry]:
        # A range only applies when both bounds are given
        if date_from is not None and date_to is not None:
            return await self.get_range(date_from, date_to)
        return await self.get_all()

    # =========================================================================
    # Analytics
    # =========================================================================

    async def get_dashboard_stats(self) -> DashboardStats:
        entries = await self.get_all()
        today = self.today()
        days = [entry.entry_date for entry in entries]

        return DashboardStats(
            this_week=count_in_window(days, today - timedelta(days=6), today),
            current_streak=current_streak(days, today),
            common_mood=most_common(entry.primary_mood for entry in entries),
        )

    async def get_streak_stats(self) -> StreakStats:
        entries = await self.get_all()
        streaks = calculate_streaks((entry.entry_date for entry in entries), self.today())
        return StreakStats(current=streaks.current, longest=streaks.longest, missed=streaks.missed)

    async def get_mood_counts(self, date_from=None, date_to=None) -> Dict[str, int]:
        entries = await self._entries_for(date_from, date_to)
        return count_case_insensitive(entry.primary_mood for entry in entries)

    async def get_tag_counts(self, date_from=None, date_to=None) -> Dict[str, int]:
        entries = await self._entries_for(date_from, date_to)
        return count_case_insensitive(tag for entry in entries for tag in entry.tags)

    async def get_date_keys_with_entries(self, month: date | datetime) -> Set[str]:
        """Date keys of every entry in the calendar month containing ``month``."""
        start = date(month.year, month.month, 1)
        end = date(month.year, month.month, monthrange(month.year, month.month)[1])

        await self.store.ensure_ready()
        async with self.store.session() as session:
            result = await session.exec(
                select(JournalEntry.date_key)
                .where(JournalEntry.entry_date >= start)
                .where(JournalEntry.entry_date <= end)
            )
            return set(result.all())

    async def search(
        self,
        text: Optional[str] = None,
        date_from: Optional[date | datetime] = None,
        date_to: Optional[date | datetime] = None,
        mood: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> List[JournalEntry]:
        """
        Find entries matching every given filter, newest first.

        Date bounds and the exact primary mood are filtered in the database;
        tag membership and the case-insensitive text match on title and body
        are applied afterwards. Blank filters are ignored.
        """
        stmt = self._newest_first()
        if date_from is not None:
            stmt = stmt.where(JournalEntry.entry_date >= to_day(date_from))
        if date_to is not None:
            stmt = stmt.where(JournalEntry.entry_date <= to_day(date_to))
        if mood and mood.strip():
            stmt = stmt.where(JournalEntry.primary_mood == mood)

        entries = await self._fetch(stmt)

        if tag and tag.strip():
            wanted = tag.strip().casefold()
            entries = [e for e in entries if any(t.casefold() == wanted for t in e.tags)]

        if text and text.strip():
            needle = text.strip().casefold()
            entries = [
                e for e in entries
                if needle in (e.title or "").casefold() or needle in (e.body or "").casefold()
            ]

        return entries
