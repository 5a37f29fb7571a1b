"""
Feed Fetching Service

Coordinates downloading and parsing of programme feeds from multiple sources
and keeps the latest results in memory.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Literal, Sequence

from tvfeed.config import settings
from tvfeed.models import Programme, Thumbnail
from tvfeed.services.feed_parser_service import parse_feed_file
from tvfeed.utils.file_operations import cleanup_temp_file, download_file
from tvfeed.utils.logging_helpers import (
    log_fetch_end,
    log_fetch_start,
    log_parse_summary,
    log_source_processing,
)


logger = logging.getLogger(__name__)

Downloader = Callable[[str, str], Awaitable[Path]]

# Global lock to prevent concurrent fetch operations
_fetch_lock = asyncio.Lock()


@dataclass(slots=True)
class SourceSummary:
    index: int
    source_url: str
    sanitized_url: str
    started_at: datetime
    completed_at: datetime
    status: Literal["success", "failed"]
    programmes_parsed: int = 0
    thumbnails_parsed: int = 0
    bytes_downloaded: int = 0
    error: str | None = None
    programmes: list[Programme] = field(default_factory=list)
    thumbnails: list[Thumbnail] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float:
        return max(0.0, (self.completed_at - self.started_at).total_seconds())

    def to_dict(self) -> dict:
        payload = {
            "source_index": self.index,
            "sanitized_url": self.sanitized_url,
            "status": self.status,
            "programmes_parsed": self.programmes_parsed,
            "thumbnails_parsed": self.thumbnails_parsed,
            "bytes_downloaded": self.bytes_downloaded,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_seconds": self.duration_seconds,
        }
        if self.error:
            payload["error"] = self.error
        return payload


class FeedCache:
    """Latest programmes and thumbnails, plus the per-source outcome of the last fetch cycle."""

    def __init__(self) -> None:
        self._programmes: list[Programme] = []
        self._thumbnails: list[Thumbnail] = []
        self._sources: list[dict] = []
        self.updated_at: datetime | None = None
        self.last_fetch_at: datetime | None = None

    def replace(
        self,
        programmes: Sequence[Programme],
        thumbnails: Sequence[Thumbnail],
        *,
        keep_thumbnails: bool = False,
    ) -> None:
        """Swap in a new fetch result; thumbnails are appended when keep_thumbnails is set."""
        self._programmes = list(programmes)
        if keep_thumbnails:
            self._thumbnails = self._thumbnails + list(thumbnails)
        else:
            self._thumbnails = list(thumbnails)
        self.updated_at = datetime.now(timezone.utc)

    def get_programmes(self, channel_id: int | None = None) -> list[Programme]:
        if channel_id is None:
            return list(self._programmes)
        return [programme for programme in self._programmes if programme.channel_id == channel_id]

    def get_thumbnails(self) -> list[Thumbnail]:
        return list(self._thumbnails)

    def record_sources(self, summaries: Sequence[SourceSummary]) -> None:
        """Remember how each source fared, whether or not the listings were replaced."""
        self._sources = [summary.to_dict() for summary in summaries]
        self.last_fetch_at = datetime.now(timezone.utc)

    def get_sources(self) -> list[dict]:
        return list(self._sources)

    def clear(self) -> None:
        self._programmes = []
        self._thumbnails = []
        self._sources = []
        self.updated_at = None
        self.last_fetch_at = None


feed_cache = FeedCache()


async def _download_source(url: str, filename: str) -> Path:
    return await download_file(
        url,
        filename,
        timeout=settings.download_timeout_sec,
        max_retries=settings.download_max_retries,
        backoff_factor=settings.download_backoff_factor,
        chunk_size=settings.feed_read_chunk_size,
    )


async def parse_feed_async(
    file_path: Path | str,
    *,
    parse_timeout_seconds: int | None = None,
    chunk_size: int | None = None
) -> tuple[list[Programme], list[Thumbnail]]:
    """
    Parse a feed file in the default thread pool with timeout protection

    Args:
        file_path: Path to the feed document
        parse_timeout_seconds: Timeout in seconds (0/None disables timeout)
        chunk_size: Bytes read from the file per step

    Returns:
        Tuple of (programmes, thumbnails)

    Raises:
        ValueError: If parsing times out or the document is not a programme feed
    """
    effective_timeout = parse_timeout_seconds if parse_timeout_seconds and parse_timeout_seconds > 0 else None
    timeout_display = f"{effective_timeout}s" if effective_timeout else "disabled"

    loop = asyncio.get_running_loop()
    logger.debug("Offloading feed parsing to thread pool executor (timeout: %s)...", timeout_display)
    parse_task = loop.run_in_executor(
        None,
        lambda: parse_feed_file(file_path, chunk_size=chunk_size)
    )

    try:
        if effective_timeout:
            return await asyncio.wait_for(parse_task, timeout=effective_timeout)
        return await parse_task
    except asyncio.TimeoutError:
        logger.error("Feed parsing timed out after %s for %s", timeout_display, file_path)
        raise ValueError("Feed parsing timed out - file may be too large or malformed")


class FeedFetchPipeline:
    """Coordinates download and parse stages for a fetch cycle."""

    def __init__(
        self,
        sources: Sequence[str],
        *,
        max_concurrency: int | None = None,
        downloader: Downloader | None = None,
    ) -> None:
        self.sources = [source for source in sources if source]
        self.total_sources = len(self.sources)
        self._concurrency = max(1, max_concurrency or settings.feed_fetch_concurrency)
        self._semaphore = asyncio.Semaphore(self._concurrency)
        self._downloader = downloader or _download_source
        self._parse_timeout = settings.feed_parse_timeout_sec
        self._chunk_size = settings.feed_read_chunk_size

    async def run(self) -> dict:
        started_at = datetime.now(timezone.utc)
        logger.info(
            "Feed parsing timeout per source: %s",
            f"{self._parse_timeout}s" if self._parse_timeout else "disabled",
        )

        summaries = await self._collect_sources()

        programmes = [p for summary in summaries for p in summary.programmes]
        thumbnails = [t for summary in summaries for t in summary.thumbnails]
        log_parse_summary(logger, len(programmes), len(thumbnails))

        return {
            "started_at": started_at,
            "summaries": summaries,
            "programmes": programmes,
            "thumbnails": thumbnails,
        }

    async def _collect_sources(self) -> list[SourceSummary]:
        if not self.sources:
            logger.warning("No feed sources configured - skipping fetch cycle")
            return []

        tasks = [
            asyncio.create_task(self._process_source(index, source_url))
            for index, source_url in enumerate(self.sources, start=1)
        ]

        summaries = list(await asyncio.gather(*tasks))
        summaries.sort(key=lambda summary: summary.index)
        return summaries

    async def _process_source(self, index: int, source_url: str) -> SourceSummary:
        sanitized_url = _sanitize_url_for_logging(source_url)
        started_at = datetime.now(timezone.utc)

        async with self._semaphore:
            log_source_processing(logger, index, self.total_sources, sanitized_url)
            temp_file = None
            try:
                temp_file = await self._downloader(source_url, f"programme_feed_{index}.xml")
                bytes_downloaded = temp_file.stat().st_size
                programmes, thumbnails = await parse_feed_async(
                    temp_file,
                    parse_timeout_seconds=self._parse_timeout,
                    chunk_size=self._chunk_size,
                )
            except Exception as exc:
                logger.error(
                    "[Source %s] Failed to process %s: %s",
                    index,
                    sanitized_url,
                    exc,
                    exc_info=True,
                )
                return SourceSummary(
                    index=index,
                    source_url=source_url,
                    sanitized_url=sanitized_url,
                    started_at=started_at,
                    completed_at=datetime.now(timezone.utc),
                    status="failed",
                    error=str(exc),
                )
            finally:
                if temp_file is not None and not cleanup_temp_file(temp_file):
                    logger.debug("[Source %s] Cleanup skipped (file not found)", index)

        logger.info(
            "[Source %s/%s] Completed: %s (%s programmes, %s thumbnails)",
            index,
            self.total_sources,
            sanitized_url,
            len(programmes),
            len(thumbnails),
        )

        return SourceSummary(
            index=index,
            source_url=source_url,
            sanitized_url=sanitized_url,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            status="success",
            programmes_parsed=len(programmes),
            thumbnails_parsed=len(thumbnails),
            bytes_downloaded=bytes_downloaded,
            programmes=programmes,
            thumbnails=thumbnails,
        )


def _sanitize_url_for_logging(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    if "://" not in url:
        return url
    protocol, rest = url.split("://", 1)
    if "@" in rest.split("/", 1)[0]:
        rest = rest.split("@", 1)[1]
        return f"{protocol}://***:***@{rest}"
    return url


async def fetch_and_process(
    sources: Sequence[str] | None = None,
    *,
    downloader: Downloader | None = None,
) -> dict:
    """
    Main entry point for feed fetching with concurrency protection.

    Args:
        sources: Feed URLs, defaults to the configured feed_sources
        downloader: Coroutine fetching a URL into a local file

    Returns:
        Dictionary with fetch statistics or error/skip message.
    """
    if _fetch_lock.locked():
        logger.warning("Feed fetch already in progress, skipping this request")
        return {
            "status": "skipped",
            "message": "Feed fetch operation already in progress",
        }

    async with _fetch_lock:
        log_fetch_start(logger)

        feed_sources = list(sources) if sources is not None else list(settings.feed_sources or [])
        if not feed_sources:
            logger.warning("FEED_SOURCES not configured - fetch aborted")
            return {"error": "FEED_SOURCES not configured"}

        pipeline = FeedFetchPipeline(feed_sources, downloader=downloader)
        try:
            outcome = await pipeline.run()
        except Exception as exc:  # Catch-all to ensure API stability
            logger.error("Unexpected error during feed fetch: %s", exc, exc_info=True)
            return {"error": str(exc)}

        summaries: list[SourceSummary] = outcome["summaries"]
        successes = sum(1 for summary in summaries if summary.status == "success")
        feed_cache.record_sources(summaries)

        if successes:
            feed_cache.replace(
                outcome["programmes"],
                outcome["thumbnails"],
                keep_thumbnails=settings.keep_thumbnails_between_fetches,
            )
        else:
            logger.warning("All feed sources failed - keeping previously cached data")

        log_fetch_end(logger)

        return {
            "status": "success" if successes else "failed",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "started_at": outcome["started_at"].isoformat(),
            "sources_processed": len(summaries),
            "sources_succeeded": successes,
            "sources_failed": len(summaries) - successes,
            "programmes_parsed": len(outcome["programmes"]),
            "thumbnails_parsed": len(outcome["thumbnails"]),
            "source_details": [summary.to_dict() for summary in summaries],
        }
