"""
File operation utilities

Feeds are streamed straight to a temporary file so that large listings are
never held in memory. Partial downloads are written next to the target with
a '.part' suffix and only renamed into place once complete.
"""
import logging
import tempfile
from pathlib import Path
import asyncio

import aiofiles
import httpx


logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def feed_temp_path(filename: str) -> Path:
    """Location of a downloaded feed in the system temp directory"""
    return Path(tempfile.gettempdir()) / filename


def _is_retryable(error: httpx.HTTPError) -> bool:
    """Timeouts, refused connections and 5xx responses are worth another attempt"""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, (httpx.TimeoutException, httpx.ConnectError))


def _describe(error: httpx.HTTPError) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    return type(error).__name__


async def _stream_to_file(client: httpx.AsyncClient, url: str, target: Path, chunk_size: int) -> int:
    partial = target.with_name(target.name + ".part")
    size = 0
    try:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            async with aiofiles.open(partial, 'wb') as f:
                async for chunk in response.aiter_bytes(chunk_size):
                    await f.write(chunk)
                    size += len(chunk)
    except httpx.HTTPError:
        cleanup_temp_file(partial)
        raise

    partial.replace(target)
    return size


async def download_file(
    url: str,
    filename: str,
    timeout: float = 60.0,
    max_retries: int = 3,
    backoff_factor: float = 2.0,
    chunk_size: int = DOWNLOAD_CHUNK_SIZE
) -> Path:
    """
    Stream a feed from URL into the temp directory, retrying transient failures

    Args:
        url: Feed URL
        filename: Name of the file created in the temp directory
        timeout: HTTP timeout in seconds
        max_retries: Maximum number of attempts
        backoff_factor: Wait before attempt n+1 is backoff_factor ** (n - 1) seconds
        chunk_size: Bytes written per step

    Returns:
        Path to the downloaded file

    Raises:
        httpx.HTTPStatusError: On a 4xx response, or 5xx after the last attempt
        httpx.TransportError: If the network error persists after the last attempt
    """
    target = feed_temp_path(filename)

    for attempt in range(1, max_retries + 1):
        try:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                size = await _stream_to_file(client, url, target, chunk_size)
        except httpx.HTTPError as e:
            if not _is_retryable(e):
                logger.error(f"Feed download from {url} failed ({_describe(e)}), not retrying")
                raise
            if attempt == max_retries:
                logger.error(f"Feed download from {url} failed after {max_retries} attempts ({_describe(e)})")
                raise

            delay = backoff_factor ** (attempt - 1)
            logger.warning(
                f"Feed download attempt {attempt}/{max_retries} failed ({_describe(e)}), "
                f"retrying in {delay:.1f}s"
            )
            await asyncio.sleep(delay)
            continue

        logger.info(f"Downloaded {size / 1024:.1f} KB from {url} to {target}")
        return target

    raise RuntimeError(f"No download attempts made for {url} (max_retries={max_retries})")


def cleanup_temp_file(file_path: Path | None) -> bool:
    """
    Delete a downloaded feed if it is still there

    Returns:
        True if a file was removed
    """
    if not file_path or not file_path.exists():
        return False

    try:
        file_path.unlink()
        logger.debug(f"Removed temporary file: {file_path}")
        return True
    except OSError as e:
        logger.warning(f"Could not remove temporary file {file_path}: {e}")
        return False
