import logging
import os
from contextlib import asynccontextmanager
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from db import store
from export import export_range
from schemas import (
    DashboardStats,
    EntryResponse,
    EntryUpsertRequest,
    ExportResponse,
    StreakStats,
    UpsertResponse,
)
from service import JournalEntryService
from taxonomy import ENTRY_CATEGORIES, MOOD_GROUPS, PREBUILT_TAGS

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

journal_service = JournalEntryService(store)


def get_service() -> JournalEntryService:
    """Get the journal entry service."""
    return journal_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup, close it on shutdown."""
    await store.ensure_ready()
    logger.info("Database initialized")
    yield
    await store.dispose()


# Create FastAPI app
app = FastAPI(title="Journal API", version="1.0.0", lifespan=lifespan)

# The API only serves the local UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def check_range(date_from: date, date_to: date):
    if date_from > date_to:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")


@app.get("/taxonomy")
def get_taxonomy():
    """Suggested categories, moods and tags for the entry editor."""
    return {
        "categories": ENTRY_CATEGORIES,
        "mood_groups": MOOD_GROUPS,
        "tags": PREBUILT_TAGS,
    }


@app.get("/entries", response_model=list[EntryResponse])
async def get_entries(
    page: int | None = Query(None, description="Zero-based page index"),
    page_size: int = Query(20, description="Entries per page"),
    service: JournalEntryService = Depends(get_service),
):
    """Get all entries newest first, or one page of them."""
    logger.info(f"Entries request - page: {page}, page_size: {page_size}")

    try:
        if page is None:
            entries = await service.get_all()
        else:
            entries = await service.get_page(page, page_size)
        return [EntryResponse.from_entry(entry) for entry in entries]
    except Exception as e:
        logger.error(f"Error getting entries: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/entries/range", response_model=list[EntryResponse])
async def get_entries_in_range(
    date_from: date = Query(..., description="Start date (YYYY-MM-DD)"),
    date_to: date = Query(..., description="End date (YYYY-MM-DD)"),
    service: JournalEntryService = Depends(get_service),
):
    """Get entries between two dates inclusive, newest first."""
    logger.info(f"Range request - from: {date_from}, to: {date_to}")
    check_range(date_from, date_to)

    try:
        entries = await service.get_range(date_from, date_to)
        return [EntryResponse.from_entry(entry) for entry in entries]
    except Exception as e:
        logger.error(f"Error getting entry range: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/entries/search", response_model=list[EntryResponse])
async def search_entries(
    text: str | None = Query(None, description="Text to find in title or body"),
    date_from: date | None = Query(None, description="Start date filter (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date filter (YYYY-MM-DD)"),
    mood: str | None = Query(None, description="Exact primary mood"),
    tag: str | None = Query(None, description="Tag the entry must carry"),
    service: JournalEntryService = Depends(get_service),
):
    """Search entries; all given filters must match."""
    logger.info(f"Search request - text: {text}, from: {date_from}, to: {date_to}, mood: {mood}, tag: {tag}")

    try:
        entries = await service.search(text=text, date_from=date_from, date_to=date_to, mood=mood, tag=tag)
        return [EntryResponse.from_entry(entry) for entry in entries]
    except Exception as e:
        logger.error(f"Error searching entries: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/entries/by-date/{day}", response_model=EntryResponse)
async def get_entry_for_date(day: date, service: JournalEntryService = Depends(get_service)):
    """Get the entry written for a given day."""
    entry = await service.get_by_date(day)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    return EntryResponse.from_entry(entry)


@app.get("/entries/by-date/{day}/exists")
async def check_entry_for_date(day: date, service: JournalEntryService = Depends(get_service)):
    """Check whether a day already has an entry."""
    return {"date": day.isoformat(), "exists": await service.has_entry_for_date(day)}


@app.put("/entries/by-date/{day}", response_model=UpsertResponse)
async def upsert_entry_for_date(
    day: date,
    request: EntryUpsertRequest,
    service: JournalEntryService = Depends(get_service),
):
    """Create or overwrite the entry for a day."""
    logger.info(f"Upsert request for {day} (mood: {request.primary_mood}, tags: {request.tags})")

    try:
        entry_id = await service.upsert_for_date(
            day,
            category=request.category,
            title=request.title,
            body=request.body,
            primary_mood=request.primary_mood,
            secondary_moods=request.secondary_moods,
            tags=request.tags,
        )
        return UpsertResponse(ok=True, id=entry_id)
    except Exception as e:
        logger.error(f"Error upserting entry for {day}: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/entries/{entry_id}", response_model=EntryResponse)
async def get_entry(entry_id: int, service: JournalEntryService = Depends(get_service)):
    """Get a specific entry by ID."""
    entry = await service.get_by_id(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Entry not found")
    return EntryResponse.from_entry(entry)


@app.delete("/entries/{entry_id}")
async def delete_entry(entry_id: int, service: JournalEntryService = Depends(get_service)):
    """Delete a specific entry by ID. Unknown IDs are ignored."""
    logger.info(f"Delete entry request for ID: {entry_id}")

    try:
        await service.delete(entry_id)
        return {"ok": True, "message": "Entry deleted successfully"}
    except Exception as e:
        logger.error(f"Error deleting entry: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/stats/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(service: JournalEntryService = Depends(get_service)):
    """Entries this week, current streak and most common mood."""
    return await service.get_dashboard_stats()


@app.get("/stats/streaks", response_model=StreakStats)
async def get_streak_stats(service: JournalEntryService = Depends(get_service)):
    """Current, longest and missed-day streak counts."""
    return await service.get_streak_stats()


@app.get("/stats/moods")
async def get_mood_counts(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    service: JournalEntryService = Depends(get_service),
) -> dict[str, int]:
    """Primary mood counts, most frequent first."""
    return await service.get_mood_counts(date_from, date_to)


@app.get("/stats/tags")
async def get_tag_counts(
    date_from: date | None = Query(None, description="Start date (YYYY-MM-DD)"),
    date_to: date | None = Query(None, description="End date (YYYY-MM-DD)"),
    service: JournalEntryService = Depends(get_service),
) -> dict[str, int]:
    """Tag counts, most frequent first."""
    return await service.get_tag_counts(date_from, date_to)


@app.get("/calendar/{year}/{month}")
async def get_calendar_month(year: int, month: int, service: JournalEntryService = Depends(get_service)):
    """Dates in a month that have an entry."""
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")

    keys = await service.get_date_keys_with_entries(date(year, month, 1))
    return {"year": year, "month": month, "dates": sorted(keys)}


@app.post("/export", response_model=ExportResponse)
async def export_entries(
    date_from: date = Query(..., description="Start date (YYYY-MM-DD)"),
    date_to: date = Query(..., description="End date (YYYY-MM-DD)"),
    service: JournalEntryService = Depends(get_service),
):
    """Export a date range to a printable file."""
    logger.info(f"Export requested - from: {date_from}, to: {date_to}")
    check_range(date_from, date_to)

    try:
        path = await export_range(service, date_from, date_to)
        return ExportResponse(ok=True, path=str(path))
    except Exception as e:
        logger.error(f"Failed to export entries: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e)) from e


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Journal API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    # Local UI only
    uvicorn.run(app, host="127.0.0.1", port=int(os.getenv("PORT", "8000")))
