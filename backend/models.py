from datetime import date, datetime

from sqlmodel import Field, SQLModel, UniqueConstraint

from normalize import local_now, split_tags


class JournalEntry(SQLModel, table=True):
    __tablename__ = "journal_entry"
    __table_args__ = (UniqueConstraint("date_key", name="uniq_journal_entry_date_key"),)

    id: int | None = Field(default=None, primary_key=True)
    date_key: str  # YYYY-MM-DD, derived from entry_date; unique
    entry_date: date = Field(index=True)
    category: str = Field(default="")
    title: str = Field(default="")
    body: str = Field(default="")  # Markdown
    primary_mood: str = Field(default="", index=True)
    secondary_mood_1: str = Field(default="")
    secondary_mood_2: str = Field(default="")
    tags_csv: str = Field(default="")  # Normalized: case-insensitive unique, comma-joined
    word_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=local_now)
    updated_at: datetime = Field(default_factory=local_now)

    @property
    def secondary_moods(self) -> list[str]:
        return [m for m in (self.secondary_mood_1, self.secondary_mood_2) if m]

    @property
    def tags(self) -> list[str]:
        return split_tags(self.tags_csv)
