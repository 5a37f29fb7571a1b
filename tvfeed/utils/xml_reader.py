"""
Pull-style XML event reader

Wraps lxml's XMLPullParser so that callers can walk a document element by
element while the underlying stream is read lazily in chunks.
"""
from __future__ import annotations

from collections import deque
import logging
from typing import IO, AnyStr, Optional

from lxml import etree # type: ignore


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class FeedEventReader:
    """
    Cursor over the start/end element events of one XML document.

    The reader never raises on malformed XML: the first syntax error ends
    the event stream and is exposed through ``error``.
    """

    def __init__(self, stream: IO[AnyStr], chunk_size: int | None = None):
        self._stream = stream
        self._chunk_size = chunk_size or DEFAULT_CHUNK_SIZE
        self._parser: Optional[etree.XMLPullParser] = None
        self._events: deque[tuple[str, etree._Element]] = deque()
        self._exhausted = False
        self._current: Optional[etree._Element] = None
        self._error: Optional[str] = None

    @property
    def error(self) -> Optional[str]:
        """Tokenizer error message, or None while the document is well-formed"""
        return self._error

    @property
    def name(self) -> str:
        """Local name of the current element"""
        if self._current is None:
            return ""
        return etree.QName(self._current).localname

    @property
    def qualified_name(self) -> str:
        """Name of the current element as written, e.g. 'media:group'"""
        if self._current is None:
            return ""
        prefix = self._current.prefix
        local_name = etree.QName(self._current).localname
        return f"{prefix}:{local_name}" if prefix else local_name

    def attribute(self, name: str, default: str = "") -> str:
        """Value of an unqualified attribute on the current element"""
        if self._current is None:
            return default
        return self._current.get(name, default)

    def read_next_start_element(self) -> bool:
        """
        Advance to the next child start tag of the current element

        Returns:
            True if positioned on a start tag, False once the enclosing
            element ends, the document ends, or an error occurs
        """
        event = self._next_event()
        if event is None:
            return False

        action, element = event
        self._current = element
        if action == "start":
            return True

        self._release(element)
        return False

    def read_element_text(self) -> str:
        """Consume the current element and return all text inside it"""
        element = self._current
        if element is None:
            return ""

        if not self._consume_subtree():
            return ""

        text = "".join(element.itertext())
        self._release(element)
        return text

    def skip_current_element(self) -> None:
        """Consume and discard the current element and its subtree"""
        element = self._current
        if element is None:
            return

        if self._consume_subtree():
            self._release(element)

    def _consume_subtree(self) -> bool:
        depth = 1
        while depth:
            event = self._next_event()
            if event is None:
                return False
            depth += 1 if event[0] == "start" else -1
        return True

    def _next_event(self) -> Optional[tuple[str, etree._Element]]:
        while not self._events:
            if self._exhausted:
                return None
            self._read_chunk()
        return self._events.popleft()

    def _read_chunk(self) -> None:
        chunk = self._stream.read(self._chunk_size)
        is_text = isinstance(chunk, str)
        if self._parser is None:
            self._parser = self._create_parser(is_text)
        if is_text:
            chunk = chunk.encode("utf-8")

        try:
            if chunk:
                self._parser.feed(chunk)
            else:
                self._exhausted = True
                self._parser.close()
        except etree.XMLSyntaxError as e:
            self._exhausted = True
            self._error = str(e)
            logger.debug(f"XML syntax error: {e}")

        self._events.extend(self._parser.read_events())

    @staticmethod
    def _create_parser(is_text: bool) -> etree.XMLPullParser:
        # Text is already decoded, so its encoding declaration no longer applies
        return etree.XMLPullParser(
            events=("start", "end"),
            encoding="utf-8" if is_text else None,
            resolve_entities=False,
            no_network=True,
        )

    @staticmethod
    def _release(element: etree._Element) -> None:
        # Drop finished elements so long feeds do not accumulate a full tree
        element.clear(keep_tail=True)
        parent = element.getparent()
        if parent is not None:
            while element.getprevious() is not None:
                del parent[0]
