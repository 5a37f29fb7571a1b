"""
Structured logging helpers for consistent log formatting.
"""
import logging
from datetime import datetime, timezone


def log_source_processing(logger: logging.Logger, idx: int, total: int, url: str) -> None:
    """
    Log source processing header.

    Args:
        logger: Logger instance
        idx: Current source index (1-based)
        total: Total number of sources
        url: Source URL being processed (already sanitized)
    """
    logger.info(f"Processing source {idx}/{total}: {url}")


def log_fetch_start(logger: logging.Logger) -> None:
    """Log feed fetch operation start."""
    logger.info(f"Feed fetch started at {datetime.now(timezone.utc).isoformat()}")


def log_fetch_end(logger: logging.Logger) -> None:
    """Log feed fetch operation end."""
    logger.info(f"Feed fetch completed at {datetime.now(timezone.utc).isoformat()}")


def log_parse_summary(
    logger: logging.Logger,
    programmes_count: int,
    thumbnails_count: int
) -> None:
    """
    Log the totals of a fetch cycle.

    Args:
        logger: Logger instance
        programmes_count: Programmes parsed across all sources
        thumbnails_count: Thumbnails parsed across all sources
    """
    logger.info(f"Parse summary - Programmes: {programmes_count}, Thumbnails: {thumbnails_count}")
