"""
Forward-only markup cursor over lxml's pull parser.

Document chunks are fed to ``etree.XMLPullParser`` and the resulting
start/end events are handed out one at a time. The cursor never seeks
backwards; sub-decoders consume an element with ``read_text`` or ``skip``,
both of which stop on the end event of the element they started on.
"""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from enum import Enum

from lxml import etree  # type: ignore

from xmltv_reader.exceptions import DecodeCancelledError, SourceFaultError
from xmltv_reader.utils.file_operations import DEFAULT_CHUNK_SIZE, PathDocument, StreamDocument


logger = logging.getLogger(__name__)


class NodeType(Enum):
    ELEMENT = "start"
    END_ELEMENT = "end"


class MarkupCursor:
    """Event cursor bound to one document.

    Attributes:
        node_type: Kind of the current event, None before the first read and after exhaustion
        element: lxml element of the current event
        cancellation: Optional event checked before every advance
    """

    def __init__(self, document: PathDocument | StreamDocument, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._document = document
        self._chunk_size = chunk_size
        self._parser: etree.XMLPullParser | None = None
        self._force_utf8 = False
        self._events: deque[tuple[str, etree._Element]] = deque()
        self._eof = False
        self._closed = False
        self.node_type: NodeType | None = None
        self.element: etree._Element | None = None
        self.cancellation: asyncio.Event | None = None

    @property
    def name(self) -> str | None:
        if self.element is None:
            return None
        return self.element.tag

    @property
    def closed(self) -> bool:
        return self._closed

    def get(self, attribute: str) -> str | None:
        """Look up an attribute of the current element"""
        if self.element is None:
            return None
        return self.element.get(attribute)

    def is_start(self, name: str | None = None) -> bool:
        return self.node_type is NodeType.ELEMENT and (name is None or self.name == name)

    def is_end_of(self, element: etree._Element) -> bool:
        return self.node_type is NodeType.END_ELEMENT and self.element is element

    async def read(self) -> bool:
        """
        Advance to the next start or end event

        Returns:
            True when positioned on a new event, False once the document is exhausted

        Raises:
            DecodeCancelledError: If the cancellation event is set
            SourceFaultError: If the document cannot be read or is not well-formed
        """
        if self.cancellation is not None and self.cancellation.is_set():
            raise DecodeCancelledError("XMLTV decode cancelled")

        while not self._events:
            if self._eof or self._closed:
                self.node_type = None
                self.element = None
                return False
            await self._fill()

        event, element = self._events.popleft()
        self.node_type = NodeType(event)
        self.element = element
        return True

    async def read_text(self) -> str | None:
        """Consume the current element and return its leading text content, None when it has none"""
        element = self.element
        await self.skip()
        if element is None:
            return None
        return element.text

    async def skip(self) -> None:
        """Consume events up to and including the end of the current element"""
        element = self.element
        if element is None or self.node_type is NodeType.END_ELEMENT:
            return
        while await self.read():
            if self.is_end_of(element):
                return

    def outer_markup(self, element: etree._Element) -> str:
        """Serialize a completed element subtree"""
        return etree.tostring(element, encoding="unicode", with_tail=False)

    def release(self, element: etree._Element) -> None:
        """Drop a processed top-level element and its earlier siblings from the tree"""
        element.clear(keep_tail=False)
        parent = element.getparent()
        if parent is None:
            return
        while element.getprevious() is not None:
            del parent[0]

    async def close(self) -> None:
        """Release the parser and the underlying document. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._events.clear()
        self._parser = None
        self.node_type = None
        self.element = None
        await self._document.close()
        logger.debug("Markup cursor closed")

    async def _fill(self) -> None:
        try:
            chunk = await self._document.read(self._chunk_size)
        except (OSError, ValueError) as e:
            raise SourceFaultError(f"Failed to read XMLTV source: {e}") from e

        if self._parser is None:
            self._force_utf8 = isinstance(chunk, str)
            self._parser = self._create_parser(force_utf8=self._force_utf8)

        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")

        try:
            if chunk:
                self._parser.feed(chunk)
            else:
                self._eof = True
                self._parser.close()
        except etree.XMLSyntaxError as e:
            logger.error(f"XML parsing error: {e}")
            raise SourceFaultError(f"Malformed XMLTV document: {e}") from e

        self._events.extend(self._parser.read_events())

    @staticmethod
    def _create_parser(force_utf8: bool) -> etree.XMLPullParser:
        options = {
            "events": ("start", "end"),
            "remove_comments": True,
            "remove_pis": True,
            "remove_blank_text": True,
            "resolve_entities": False,
            "load_dtd": False,
            "no_network": True,
            "huge_tree": True,
        }
        if force_utf8:
            options["encoding"] = "utf-8"
        return etree.XMLPullParser(**options)
