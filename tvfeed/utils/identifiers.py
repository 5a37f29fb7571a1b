"""
Identifier extraction from feed URLs.

All helpers are best-effort: malformed input yields the -1 sentinel
(or None for parse_strict_int) instead of an exception.
"""
import re
from typing import Optional


_INTEGER_RE = re.compile(r"\s*[+-]?\d+\s*", re.ASCII)

CHANNELS_MARKER = "channels/"


def parse_strict_int(value: Optional[str]) -> Optional[int]:
    """
    Parse a decimal integer, rejecting anything int() would be lenient about

    Args:
        value: Text such as '42', ' -7 ' or '1_000'

    Returns:
        The integer, or None if value is not a plain signed decimal
    """
    if value is None or not _INTEGER_RE.fullmatch(value):
        return None
    return int(value)


def parse_programme_id(url: str) -> int:
    """
    Extract the programme ID from an item link

    Examples:
        'http://tvkaista.com/search/?findid=8155949' -> 8155949
        'http://services.tvkaista.com/feedbeta/seasonpasses/852238' -> 852238

    Returns:
        Programme ID, or -1 if the tail of the link is not an integer
    """
    pos = url.rfind("=")
    if pos < 0:
        pos = url.rfind("/")

    programme_id = parse_strict_int(url[pos + 1:])
    return -1 if programme_id is None else programme_id


def parse_channel_id(url: str) -> int:
    """
    Extract the channel ID from a source URL

    Example:
        'http://tvkaista.com/feed/channels/1855486/flv.mediarss' -> 1855486

    Returns:
        Channel ID, or -1 if the URL has no 'channels/<id>/' segment
    """
    start = url.find(CHANNELS_MARKER)
    if start < 0:
        return -1

    start += len(CHANNELS_MARKER)
    end = url.find("/", start)
    if end < 0:
        return -1

    channel_id = parse_strict_int(url[start:end])
    return -1 if channel_id is None else channel_id
