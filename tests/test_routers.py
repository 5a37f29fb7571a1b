import asyncio
from datetime import datetime, time, timezone

import pytest
from fastapi.testclient import TestClient

from tvfeed.config import settings
from tvfeed.main import app
from tvfeed.models import Programme, Thumbnail
from tvfeed.services.feed_fetch_service import feed_cache, fetch_and_process


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def cached_listing():
    feed_cache.replace(
        [
            Programme(
                title="Uutiset",
                description="Päivän uutiset",
                id=8155949,
                channel_id=1855486,
                start_date_time=datetime(2020, 1, 5, 10, 0, 0, tzinfo=timezone.utc).astimezone(),
                duration=1800,
            ),
            Programme(title="Elokuva", id=852238),
        ],
        [Thumbnail(url="http://tvkaista.com/thumbs/1.jpg", time=time(0, 0, 5))],
    )


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "programmes" in response.json()["endpoints"]


def test_health_reports_cache(client, cached_listing):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["programmes_cached"] == 2
    assert body["thumbnails_cached"] == 1
    assert body["last_update"] is not None


def test_health_reports_last_fetch_sources(client, tmp_path, sample_feed):
    async def download(url, filename):
        path = tmp_path / filename
        path.write_bytes(sample_feed)
        return path

    asyncio.run(fetch_and_process(["http://feeds.example.com/channels/1/"], downloader=download))

    body = client.get("/health").json()

    assert body["last_fetch"] is not None
    assert body["programmes_cached"] == 3
    assert len(body["sources"]) == 1
    source = body["sources"][0]
    assert source["status"] == "success"
    assert source["programmes_parsed"] == 3
    assert source["bytes_downloaded"] == len(sample_feed)


def test_health_before_any_fetch(client):
    body = client.get("/health").json()

    assert body["last_fetch"] is None
    assert body["sources"] == []


def test_programmes(client, cached_listing):
    body = client.get("/programmes").json()

    assert body["count"] == 2
    first, second = body["programmes"]
    assert first["id"] == 8155949
    assert first["channel_id"] == 1855486
    assert first["duration"] == 1800
    assert datetime.fromisoformat(first["start_date_time"].replace("Z", "+00:00")) == datetime(2020, 1, 5, 10, tzinfo=timezone.utc)
    assert second["channel_id"] == -1
    assert second["start_date_time"] is None


def test_programmes_filtered_by_channel(client, cached_listing):
    body = client.get("/programmes", params={"channel_id": 1855486}).json()

    assert body["count"] == 1
    assert body["programmes"][0]["title"] == "Uutiset"


def test_invalid_channel_filter_is_rejected(client):
    response = client.get("/programmes", params={"channel_id": "yle"})

    assert response.status_code == 422
    assert response.json()["detail"][0]["loc"] == ["query", "channel_id"]


def test_thumbnails(client, cached_listing):
    body = client.get("/thumbnails").json()

    assert body["count"] == 1
    assert body["thumbnails"][0] == {"url": "http://tvkaista.com/thumbs/1.jpg", "time": "00:00:05"}


def test_fetch_without_sources_is_server_error(client, monkeypatch):
    monkeypatch.setattr(settings, "feed_sources", [])

    response = client.post("/fetch")

    assert response.status_code == 500
    assert response.json()["detail"] == "FEED_SOURCES not configured"
