import pytest
from fastapi.testclient import TestClient

from app import app, get_service


@pytest.fixture(scope="function")
def client(service):
    """Create a test client with dependency override."""

    def get_test_service():
        return service

    app.dependency_overrides[get_service] = get_test_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def put_entry(client, day, **fields):
    payload = {
        "category": "Reflection",
        "title": f"Entry {day}",
        "body": "Some thoughts",
        "primary_mood": "Calm",
    }
    payload.update(fields)
    return client.put(f"/entries/by-date/{day}", json=payload)


def test_upsert_and_get_by_date(client):
    """Test creating an entry and reading it back."""
    response = put_entry(
        client,
        "2024-03-10",
        primary_mood="Happy",
        secondary_moods=["happy", "Grateful", "Excited", "Calm"],
        tags=["Travel", "travel", " Food "],
    )
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    entry_id = data["id"]

    response = client.get("/entries/by-date/2024-03-10")
    assert response.status_code == 200
    entry = response.json()
    assert entry["id"] == entry_id
    assert entry["date_key"] == "2024-03-10"
    assert entry["primary_mood"] == "Happy"
    assert entry["mood_group"] == "Positive"
    assert entry["secondary_moods"] == ["Grateful", "Excited"]
    assert entry["tags"] == ["Travel", "Food"]
    assert entry["word_count"] == 2


def test_upsert_same_day_keeps_single_entry(client):
    first = put_entry(client, "2024-03-10", title="First").json()
    second = put_entry(client, "2024-03-10", title="Second").json()

    assert first["id"] == second["id"]
    entries = client.get("/entries").json()
    assert len(entries) == 1
    assert entries[0]["title"] == "Second"


def test_upsert_requires_primary_mood(client):
    """Test validation when primary mood is blank."""
    response = put_entry(client, "2024-03-10", primary_mood="   ")
    assert response.status_code == 422


def test_upsert_invalid_date(client):
    response = put_entry(client, "not-a-date")
    assert response.status_code == 422


def test_get_entry_by_id(client):
    entry_id = put_entry(client, "2024-03-10").json()["id"]

    response = client.get(f"/entries/{entry_id}")
    assert response.status_code == 200
    assert response.json()["date_key"] == "2024-03-10"


def test_get_entry_not_found(client):
    assert client.get("/entries/99999").status_code == 404
    assert client.get("/entries/by-date/2020-01-01").status_code == 404


def test_entry_exists_check(client):
    put_entry(client, "2024-03-10")

    assert client.get("/entries/by-date/2024-03-10/exists").json() == {"date": "2024-03-10", "exists": True}
    assert client.get("/entries/by-date/2024-03-11/exists").json()["exists"] is False


def test_entries_paging(client):
    for day in ("2024-03-01", "2024-03-02", "2024-03-03"):
        put_entry(client, day)

    response = client.get("/entries?page=1&page_size=2")
    assert response.status_code == 200
    assert [e["date_key"] for e in response.json()] == ["2024-03-01"]


def test_entries_range(client):
    for day in ("2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04"):
        put_entry(client, day)

    response = client.get("/entries/range?date_from=2024-01-01&date_to=2024-01-03")
    assert response.status_code == 200
    assert [e["date_key"] for e in response.json()] == ["2024-01-03", "2024-01-02", "2024-01-01"]


def test_entries_range_rejects_reversed_bounds(client):
    response = client.get("/entries/range?date_from=2024-01-05&date_to=2024-01-01")
    assert response.status_code == 400


def test_search(client):
    put_entry(client, "2024-04-01", title="My cat", tags=["Travel"])
    put_entry(client, "2024-04-02", body="cat at work", tags=["Work"])

    response = client.get("/entries/search?text=CAT&tag=travel")
    assert response.status_code == 200
    assert [e["date_key"] for e in response.json()] == ["2024-04-01"]


def test_delete_entry_success(client):
    entry_id = put_entry(client, "2024-03-10").json()["id"]

    response = client.delete(f"/entries/{entry_id}")
    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert client.get("/entries").json() == []


def test_delete_entry_not_found_is_ok(client):
    """Test deleting a non-existent entry is a no-op."""
    put_entry(client, "2024-03-10")

    response = client.delete("/entries/99999")
    assert response.status_code == 200
    assert len(client.get("/entries").json()) == 1


def test_stats_endpoints(client):
    # The test clock is fixed at 2024-03-15
    for day in ("2024-03-13", "2024-03-14", "2024-03-15"):
        put_entry(client, day, primary_mood="Happy" if day != "2024-03-14" else "happy", tags=["Work"])

    assert client.get("/stats/streaks").json() == {"current": 3, "longest": 3, "missed": 0}
    assert client.get("/stats/dashboard").json() == {"this_week": 3, "current_streak": 3, "common_mood": "Happy"}
    assert client.get("/stats/moods").json() == {"Happy": 3}
    assert client.get("/stats/tags?date_from=2024-03-14&date_to=2024-03-15").json() == {"Work": 2}


def test_calendar_month(client):
    for day in ("2024-02-29", "2024-02-01", "2024-03-01"):
        put_entry(client, day)

    response = client.get("/calendar/2024/2")
    assert response.status_code == 200
    assert response.json() == {"year": 2024, "month": 2, "dates": ["2024-02-01", "2024-02-29"]}


def test_calendar_invalid_month(client):
    assert client.get("/calendar/2024/13").status_code == 400


def test_export(client, tmp_path, monkeypatch):
    monkeypatch.setenv("JOURNAL_EXPORT_DIR", str(tmp_path / "exports"))
    put_entry(client, "2024-03-10", title="Exported")

    response = client.post("/export?date_from=2024-03-01&date_to=2024-03-31")
    assert response.status_code == 200
    data = response.json()
    assert data["ok"] is True
    assert data["path"].endswith(".html")
    assert (tmp_path / "exports").exists()


def test_taxonomy(client):
    data = client.get("/taxonomy").json()
    assert "Travel" in data["categories"]
    assert data["mood_groups"]["Negative"][0] == "Angry"
    assert "Self-care" in data["tags"]


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "message" in data
    assert "docs" in data
