"""Tests for range export."""
import asyncio
from datetime import date, datetime
from unittest.mock import patch

import pytest

from export import EMPTY_RANGE_MESSAGE, export_range, generate_export_html, write_export
from models import JournalEntry


def make_entry(day: date, **fields) -> JournalEntry:
    values = {
        "date_key": day.strftime("%Y-%m-%d"),
        "entry_date": day,
        "category": "Travel",
        "title": "A day out",
        "body": "We went to the coast.",
        "primary_mood": "Happy",
    }
    values.update(fields)
    return JournalEntry(**values)


def test_empty_range_renders_placeholder():
    html = generate_export_html([], date(2024, 1, 1), date(2024, 1, 31))
    assert EMPTY_RANGE_MESSAGE in html
    assert "Journal Export" in html


def test_entries_render_oldest_first_with_metadata():
    entries = [
        make_entry(date(2024, 1, 3), title="Third", secondary_mood_1="Excited", tags_csv="Travel,Food"),
        make_entry(date(2024, 1, 1), title="First", body="   "),
    ]

    html = generate_export_html(entries, date(2024, 1, 1), date(2024, 1, 3), generated_at=datetime(2024, 2, 1, 10, 5))

    assert html.index("2024-01-01 &bull; First") < html.index("2024-01-03 &bull; Third")
    assert "Mood: Happy, Excited" in html
    assert "Tags: Travel,Food" in html
    assert "(empty)" in html
    assert "Generated: 2024-02-01 10:05" in html
    assert EMPTY_RANGE_MESSAGE not in html


def test_user_text_is_escaped():
    entry = make_entry(date(2024, 1, 1), title="<script>alert(1)</script>", body="a & b")
    html = generate_export_html([entry], date(2024, 1, 1), date(2024, 1, 1))

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "a &amp; b" in html


@pytest.mark.asyncio
async def test_export_range_writes_file(service, write_entry, tmp_path, clock):
    await write_entry(date(2024, 3, 1), title="Inside")
    await write_entry(date(2024, 3, 20), title="Outside")

    path = await export_range(service, date(2024, 3, 1), date(2024, 3, 10), export_dir=tmp_path / "exports")

    assert path.parent == tmp_path / "exports"
    assert path.name == "Journal_20240301_20240310_093000.html"
    content = path.read_text(encoding="utf-8")
    assert "Inside" in content
    assert "Outside" not in content


@pytest.mark.asyncio
async def test_export_empty_range_still_writes_file(service, tmp_path):
    path = await export_range(service, date(2024, 3, 1), date(2024, 3, 10), export_dir=tmp_path)

    assert path.exists()
    assert EMPTY_RANGE_MESSAGE in path.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_export_writes_file_off_the_event_loop(service, write_entry, tmp_path):
    """Test that the folder and file are written in a worker thread."""
    await write_entry(date(2024, 3, 1), title="Threaded")
    folder = tmp_path / "nested" / "exports"

    with patch("export.asyncio.to_thread", wraps=asyncio.to_thread) as mock_to_thread:
        path = await export_range(service, date(2024, 3, 1), date(2024, 3, 1), export_dir=folder)

    mock_to_thread.assert_called_once()
    assert mock_to_thread.call_args.args[0] is write_export
    assert path.parent == folder
    assert "Threaded" in path.read_text(encoding="utf-8")
