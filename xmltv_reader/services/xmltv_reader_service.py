"""
XMLTV decode engine

Walks the markup cursor over a whole document, recognizes <channel> and
<programme> elements, applies suppression and filter policy, and hands
accepted elements to the record builders. Records come out one at a time
through XmlTvReader.read() or all at once through read_all().
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from xmltv_reader.config import ReaderSettings
from xmltv_reader.exceptions import DecodeTimeoutError
from xmltv_reader.services.filter_service import accepts_channel, accepts_programme
from xmltv_reader.services.markup_cursor import MarkupCursor, NodeType
from xmltv_reader.services.record_builders import build_channel, build_programme
from xmltv_reader.services.xmltv_types import Channel, Programme, XmlTvElement, XmlTvResult
from xmltv_reader.utils.file_operations import DEFAULT_CHUNK_SIZE, open_document
from xmltv_reader.utils.logging_helpers import log_decode_summary
from xmltv_reader.utils.timezone import parse_xmltv_time, to_timezone


logger = logging.getLogger(__name__)


class ReaderState(Enum):
    IDLE = "idle"
    AT_TOP_LEVEL = "at_top_level"
    IN_RECORD = "in_record"
    EXHAUSTED = "exhausted"


@dataclass(slots=True)
class ReaderStats:
    channels_read: int = 0
    channels_skipped: int = 0
    programmes_read: int = 0
    programmes_skipped: int = 0


class XmlTvReader:
    """
    Pull-mode XMLTV reader bound to one source

    Usage:
        async with XmlTvReader("guide.xml") as reader:
            async for record in reader:
                ...

    The reader owns its cursor and releases it exactly once: on exhaustion,
    on close(), or when a fault or cancellation escapes read(). Once
    exhausted, read() keeps returning None. Not safe for concurrent read() calls.
    """

    def __init__(
        self,
        source,
        settings: ReaderSettings | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> None:
        """
        Args:
            source: Filesystem path, binary stream or text stream
            settings: Session settings, defaults when omitted
            chunk_size: Bytes or characters read from the source per parser feed

        Raises:
            InvalidSourceError: If source is None, an empty/blank path or an unsupported type
        """
        self._cursor = MarkupCursor(open_document(source), chunk_size=chunk_size)
        self.settings = settings or ReaderSettings()
        self.state = ReaderState.IDLE
        self.stats = ReaderStats()

    async def read(self, cancellation: asyncio.Event | None = None) -> XmlTvElement | None:
        """
        Read the next accepted channel or programme

        Args:
            cancellation: Optional event; once set, the next cursor advance raises DecodeCancelledError

        Returns:
            Channel or Programme, or None at end of stream

        Raises:
            SourceFaultError: If the source cannot be read or is malformed
            DecodeCancelledError: If cancellation is observed
        """
        if self.state is ReaderState.EXHAUSTED:
            return None

        if self.settings.ignore_channels and self.settings.ignore_programmes:
            logger.debug("Channels and programmes both ignored; nothing to read")
            await self._finish()
            return None

        self._cursor.cancellation = cancellation
        try:
            return await self._read_next()
        except (Exception, asyncio.CancelledError):
            # the cursor may be mid-record; the session cannot resume
            await self._finish()
            raise
        finally:
            self._cursor.cancellation = None

    @property
    def closed(self) -> bool:
        return self._cursor.closed

    async def close(self) -> None:
        await self._finish()

    async def __aenter__(self) -> "XmlTvReader":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __aiter__(self) -> "XmlTvReader":
        return self

    async def __anext__(self) -> XmlTvElement:
        record = await self.read()
        if record is None:
            raise StopAsyncIteration
        return record

    async def _read_next(self) -> XmlTvElement | None:
        cursor = self._cursor
        self.state = ReaderState.AT_TOP_LEVEL

        while await cursor.read():
            if cursor.node_type is not NodeType.ELEMENT:
                continue

            handler = _TOP_LEVEL_HANDLERS.get(cursor.name)
            if handler is None:
                continue

            record = await handler(self, cursor)
            if record is not None:
                return record
            if self.state is ReaderState.EXHAUSTED:
                return None

        logger.debug("XMLTV source exhausted")
        await self._finish()
        return None

    async def _on_channel(self, cursor: MarkupCursor) -> Channel | None:
        element = cursor.element

        if self.settings.ignore_channels:
            await cursor.skip()
            cursor.release(element)
            return None

        self.state = ReaderState.IN_RECORD
        channel_id = cursor.get("id")
        channel = None

        if not channel_id or not channel_id.strip():
            logger.debug("Skipping channel with missing ID attribute")
            await cursor.skip()
        elif not accepts_channel(channel_id, self.settings):
            logger.debug(f"Skipping channel {channel_id} rejected by channel filter")
            await cursor.skip()
        else:
            channel = await build_channel(cursor, channel_id, self.settings)

        cursor.release(element)
        self.state = ReaderState.AT_TOP_LEVEL

        if channel is None:
            self.stats.channels_skipped += 1
        else:
            self.stats.channels_read += 1
        return channel

    async def _on_programme(self, cursor: MarkupCursor) -> Programme | None:
        if self.settings.ignore_programmes:
            logger.debug("Programme reached while programmes are ignored; stopping")
            await self._finish()
            return None

        element = cursor.element
        self.state = ReaderState.IN_RECORD
        programme = None

        channel_id = cursor.get("channel")
        start = parse_xmltv_time(cursor.get("start"))
        stop = parse_xmltv_time(cursor.get("stop"))

        if start is None or stop is None or not channel_id or not channel_id.strip():
            logger.debug(
                f"Skipping programme with missing or invalid start/stop/channel "
                f"(channel={channel_id!r}, start={cursor.get('start')!r}, stop={cursor.get('stop')!r})"
            )
            await cursor.skip()
        else:
            start = to_timezone(start, self.settings.timezone)
            stop = to_timezone(stop, self.settings.timezone)
            if accepts_programme(channel_id, start, stop, self.settings):
                programme = await build_programme(cursor, start, stop, channel_id, self.settings)
            else:
                logger.debug(f"Skipping programme on {channel_id} at {start.isoformat()} rejected by filters")
                await cursor.skip()

        cursor.release(element)
        self.state = ReaderState.AT_TOP_LEVEL

        if programme is None:
            self.stats.programmes_skipped += 1
        else:
            self.stats.programmes_read += 1
        return programme

    async def _finish(self) -> None:
        self.state = ReaderState.EXHAUSTED
        await self._cursor.close()


_TOP_LEVEL_HANDLERS = {
    "channel": XmlTvReader._on_channel,
    "programme": XmlTvReader._on_programme,
}


async def read_all(
    source,
    settings: ReaderSettings | None = None,
    cancellation: asyncio.Event | None = None,
    *,
    timeout: float | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE
) -> XmlTvResult:
    """
    Decode a whole XMLTV document

    Args:
        source: Filesystem path, binary stream or text stream
        settings: Session settings, defaults when omitted
        cancellation: Optional event checked at every cursor advance

    Returns:
        XmlTvResult with channels and programmes in document order

    Keyword Args:
        timeout: Seconds allowed for the whole decode (0/None disables timeout)
        chunk_size: Bytes or characters per parser feed

    Raises:
        InvalidSourceError: If source is None, an empty/blank path or an unsupported type
        SourceFaultError: If the source cannot be read or is malformed
        DecodeCancelledError: If cancellation is observed; partial results are discarded
        DecodeTimeoutError: If the decode exceeds timeout
    """
    reader = XmlTvReader(source, settings, chunk_size=chunk_size)
    effective_timeout = timeout if timeout and timeout > 0 else None

    try:
        if effective_timeout:
            result = await asyncio.wait_for(_drain(reader, cancellation), timeout=effective_timeout)
        else:
            result = await _drain(reader, cancellation)
    except asyncio.TimeoutError:
        logger.error(f"XMLTV decode timed out after {effective_timeout}s")
        raise DecodeTimeoutError(f"XMLTV decode timed out after {effective_timeout}s") from None
    finally:
        await reader.close()

    log_decode_summary(logger, reader.stats)
    return result


async def _drain(reader: XmlTvReader, cancellation: asyncio.Event | None) -> XmlTvResult:
    result = XmlTvResult()
    while True:
        record = await reader.read(cancellation)
        if record is None:
            return result
        if isinstance(record, Channel):
            result.channels.append(record)
        else:
            result.programmes.append(record)
