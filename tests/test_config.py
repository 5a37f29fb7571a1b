import pytest
from pydantic import ValidationError

from tvfeed.config import CustomSettings


def test_defaults(monkeypatch):
    monkeypatch.delenv("FEED_SOURCES", raising=False)

    config = CustomSettings(_env_file=None)

    assert config.feed_sources == []
    assert config.feed_parse_timeout_sec == 120
    assert config.keep_thumbnails_between_fetches is False
    assert config.log_level == "INFO"


def test_feed_sources_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("FEED_SOURCES", "http://tvkaista.com/feed/channels/1/flv.mediarss, https://example.com/rss")

    config = CustomSettings(_env_file=None)

    assert config.feed_sources == [
        "http://tvkaista.com/feed/channels/1/flv.mediarss",
        "https://example.com/rss",
    ]


def test_non_http_source_rejected():
    with pytest.raises(ValidationError, match="HTTP/HTTPS"):
        CustomSettings(_env_file=None, feed_sources="ftp://example.com/feed.xml")


def test_log_level_normalized():
    assert CustomSettings(_env_file=None, log_level="debug").log_level == "DEBUG"

    with pytest.raises(ValidationError):
        CustomSettings(_env_file=None, log_level="chatty")


@pytest.mark.parametrize("field, value", [
    ("feed_parse_timeout_sec", -1),
    ("feed_fetch_concurrency", 0),
    ("feed_read_chunk_size", 0),
    ("download_max_retries", 0),
    ("download_timeout_sec", 0),
    ("download_backoff_factor", 0.5),
])
def test_out_of_range_values_rejected(field, value):
    with pytest.raises(ValidationError):
        CustomSettings(_env_file=None, **{field: value})
