"""
Record types produced by the programme feed parser.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time


@dataclass(slots=True)
class Programme:
    """One programme listing, built from a feed <item> element."""
    title: str = ""
    description: str = ""
    id: int = -1
    channel_id: int = -1
    start_date_time: datetime | None = None
    duration: int = 0


@dataclass(slots=True)
class Thumbnail:
    """A preview image taken at some offset into a programme."""
    url: str
    time: time | None = None


__all__ = ["Programme", "Thumbnail"]
