"""
Programme Feed Parser

Streams an RSS programme feed (rss/channel/item/media:group) into
Programme and Thumbnail records.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, AnyStr

from tvfeed.models import Programme, Thumbnail
from tvfeed.utils.identifiers import parse_channel_id, parse_programme_id, parse_strict_int
from tvfeed.utils.timezone import parse_pub_date, parse_time_of_day
from tvfeed.utils.xml_reader import FeedEventReader

logger = logging.getLogger(__name__)


class FeedFormatError(ValueError):
    """Raised when a document is not a programme feed"""
    pass


class FeedParser:
    """
    Parser for programme feeds.

    Programmes are reset on every parse. Thumbnails are kept across parses
    unless the parser is created with keep_thumbnails=False.
    """

    def __init__(self, keep_thumbnails: bool = True, chunk_size: int | None = None):
        self.keep_thumbnails = keep_thumbnails
        self._chunk_size = chunk_size
        self._programmes: list[Programme] = []
        self._thumbnails: list[Thumbnail] = []
        self._error = ""

    @property
    def last_error(self) -> str:
        return self._error

    @property
    def programmes(self) -> list[Programme]:
        return list(self._programmes)

    @property
    def thumbnails(self) -> list[Thumbnail]:
        return list(self._thumbnails)

    def parse(self, stream: IO[AnyStr]) -> bool:
        """
        Parse one feed document from a readable stream

        Args:
            stream: Binary or text stream positioned at the document start

        Returns:
            True if the document is an rss feed, False otherwise (see last_error)
        """
        reader = FeedEventReader(stream, chunk_size=self._chunk_size)
        self._programmes.clear()
        if not self.keep_thumbnails:
            self._thumbnails.clear()

        if not reader.read_next_start_element():
            return self._fail("Invalid programme feed", reader)

        if reader.name != "rss":
            return self._fail("Programme feed does not contain rss element", reader)

        while reader.read_next_start_element():
            if reader.name == "channel":
                self._parse_channel_element(reader)
            else:
                reader.skip_current_element()

        if reader.error:
            logger.warning(f"Programme feed ended with XML error: {reader.error}")

        logger.debug(
            f"Parsed {len(self._programmes)} programmes, "
            f"{len(self._thumbnails)} thumbnails collected"
        )
        return True

    def _fail(self, message: str, reader: FeedEventReader) -> bool:
        self._error = message
        if reader.error:
            logger.warning(f"{message}: {reader.error}")
        else:
            logger.warning(message)
        return False

    def _parse_channel_element(self, reader: FeedEventReader) -> None:
        while reader.read_next_start_element():
            if reader.name == "item":
                self._parse_item_element(reader)
            else:
                reader.skip_current_element()

    def _parse_item_element(self, reader: FeedEventReader) -> None:
        programme = Programme()

        while reader.read_next_start_element():
            name = reader.name
            if name == "title":
                programme.title = reader.read_element_text()
            elif name == "description":
                programme.description = reader.read_element_text()
            elif reader.qualified_name == "link":
                programme.id = parse_programme_id(reader.read_element_text())
            elif name == "source":
                programme.channel_id = parse_channel_id(reader.attribute("url"))
                reader.skip_current_element()
            elif name == "pubDate":
                programme.start_date_time = parse_pub_date(reader.read_element_text())
            elif reader.qualified_name == "media:group":
                self._parse_media_group_element(reader, programme)
            else:
                reader.skip_current_element()

        self._programmes.append(programme)

    def _parse_media_group_element(self, reader: FeedEventReader, programme: Programme) -> None:
        while reader.read_next_start_element():
            qualified_name = reader.qualified_name
            if qualified_name == "media:content":
                duration = parse_strict_int(reader.attribute("duration"))
                if duration is not None:
                    programme.duration = duration
            elif qualified_name == "media:thumbnail":
                thumbnail = Thumbnail(
                    url=reader.attribute("url"),
                    time=parse_time_of_day(reader.attribute("time")),
                )
                if thumbnail.time is not None:
                    self._thumbnails.append(thumbnail)
                else:
                    logger.debug(f"Dropping thumbnail without valid time: {thumbnail.url}")

            reader.skip_current_element()


def parse_feed_file(
    file_path: Path | str,
    *,
    chunk_size: int | None = None
) -> tuple[list[Programme], list[Thumbnail]]:
    """
    Parse a programme feed file and return programmes and thumbnails

    Args:
        file_path: Path to the feed document
        chunk_size: Bytes read from the file per step

    Returns:
        Tuple of (programmes, thumbnails)

    Raises:
        FeedFormatError: If the document is not an rss programme feed
        FileNotFoundError: If file doesn't exist
        OSError: If file can't be read
    """
    logger.debug(f"Parsing programme feed file: {file_path}")

    parser = FeedParser(chunk_size=chunk_size)
    with open(file_path, "rb") as stream:
        if not parser.parse(stream):
            raise FeedFormatError(parser.last_error)

    programmes = parser.programmes
    thumbnails = parser.thumbnails
    logger.info(f"Feed parsing complete: {len(programmes)} programmes, {len(thumbnails)} thumbnails")

    return programmes, thumbnails
