"""Printable export of a range of journal entries."""
import asyncio
import logging
import os
from datetime import date, datetime
from html import escape
from pathlib import Path
from typing import List, Optional

from models import JournalEntry
from normalize import to_day

logger = logging.getLogger(__name__)

EMPTY_RANGE_MESSAGE = "No entries found for this date range."


def default_export_dir() -> Path:
    return Path(os.getenv("JOURNAL_EXPORT_DIR", "./exports"))


def export_filename(date_from: date, date_to: date, now: datetime) -> str:
    return f"Journal_{date_from:%Y%m%d}_{date_to:%Y%m%d}_{now:%H%M%S}.html"


def write_export(path: Path, html: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(html, encoding="utf-8")


def _entry_card(entry: JournalEntry) -> str:
    moods = ", ".join([entry.primary_mood] + entry.secondary_moods)
    body = (entry.body or "").strip() or "(empty)"

    card = f"""
            <div class="entry">
                <h2>{entry.entry_date:%Y-%m-%d} &bull; {escape(entry.title)}</h2>
                <p class="meta">Category: {escape(entry.category)}</p>
                <p class="meta">Mood: {escape(moods)}</p>
    """
    if entry.tags_csv:
        card += f"""
                <p class="meta">Tags: {escape(entry.tags_csv)}</p>
        """
    card += f"""
                <hr>
                <div class="body">{escape(body)}</div>
            </div>
    """
    return card


def generate_export_html(
    entries: List[JournalEntry],
    date_from: date,
    date_to: date,
    generated_at: Optional[datetime] = None,
) -> str:
    """Generate the export document; oldest entry first."""
    generated_at = generated_at or datetime.now()

    html = f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <title>Journal Export {date_from:%Y-%m-%d} to {date_to:%Y-%m-%d}</title>
        <style>
            @page {{ size: A4; margin: 25px; }}
            body {{ font-family: Arial, sans-serif; font-size: 11pt; color: #111; }}
            h1 {{ font-size: 18pt; border-bottom: 3px solid #000; padding-bottom: 10px; }}
            .entry {{ border: 1px solid #999; padding: 10px; margin-bottom: 10px; page-break-inside: avoid; }}
            .entry h2 {{ font-size: 12pt; margin: 0 0 4px; }}
            .meta {{ margin: 2px 0; color: #444; }}
            .body {{ white-space: pre-wrap; }}
            .empty {{ text-align: center; color: #999; }}
            .footer {{ margin-top: 30px; padding-top: 10px; border-top: 1px solid #ddd; color: #666; font-size: 9pt; text-align: center; }}
        </style>
    </head>
    <body>
        <h1>Journal Export</h1>
        <p>{date_from:%B %d, %Y} to {date_to:%B %d, %Y}</p>
    """

    if entries:
        for entry in sorted(entries, key=lambda e: e.entry_date):
            html += _entry_card(entry)
    else:
        html += f"""
        <p class="empty">{EMPTY_RANGE_MESSAGE}</p>
        """

    html += f"""
        <div class="footer">Generated: {generated_at:%Y-%m-%d %H:%M}</div>
    </body>
    </html>
    """

    return html


async def export_range(service, date_from, date_to, export_dir: Optional[Path] = None) -> Path:
    """
    Export entries between two days (inclusive) to an HTML file.

    Args:
        service: JournalEntryService to read entries from
        date_from: First day of the range
        date_to: Last day of the range
        export_dir: Target folder, created if missing (or from JOURNAL_EXPORT_DIR)

    Returns:
        Path of the written file
    """
    start, end = to_day(date_from), to_day(date_to)
    entries = await service.get_range(start, end)

    folder = Path(export_dir) if export_dir else default_export_dir()
    now = service.clock()
    path = folder / export_filename(start, end, now)
    html = generate_export_html(entries, start, end, generated_at=now)

    await asyncio.to_thread(write_export, path, html)

    logger.info(f"Exported {len(entries)} entries ({start} to {end}) to {path}")
    return path
