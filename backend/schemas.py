from datetime import date, datetime

from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel

from models import JournalEntry
from taxonomy import mood_group


class EntryUpsertRequest(BaseModel):
    category: str = ""
    title: str = ""
    body: str = ""  # Markdown
    primary_mood: str
    secondary_moods: list[str] = []
    tags: list[str] = []

    @field_validator("primary_mood")
    @classmethod
    def validate_primary_mood(cls, v):
        if not v or not v.strip():
            raise ValueError("Primary mood is required")
        return v.strip()


class UpsertResponse(BaseModel):
    ok: bool
    id: int


class EntryResponse(SQLModel):
    id: int
    date_key: str
    entry_date: date
    category: str
    title: str
    body: str
    primary_mood: str
    mood_group: str | None = None
    secondary_moods: list[str] = []
    tags: list[str] = []
    word_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: JournalEntry) -> "EntryResponse":
        return cls(
            id=entry.id,
            date_key=entry.date_key,
            entry_date=entry.entry_date,
            category=entry.category,
            title=entry.title,
            body=entry.body,
            primary_mood=entry.primary_mood,
            mood_group=mood_group(entry.primary_mood),
            secondary_moods=entry.secondary_moods,
            tags=entry.tags,
            word_count=entry.word_count,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class DashboardStats(BaseModel):
    this_week: int
    current_streak: int
    common_mood: str


class StreakStats(BaseModel):
    current: int
    longest: int
    missed: int


class ExportResponse(BaseModel):
    ok: bool
    path: str
