"""
Record builders for <channel> and <programme> elements.

A builder owns the in-progress draft of one record. The scan over the
record's scope dispatches each start event through a name -> handler table;
handlers call a field decoder and merge its value into the draft. Unknown
names are passed over without consuming them, so grammar elements nested in
unrecognized containers (``<video><quality>``) are still found. The scan
ends only on the end event of the record's own element.
"""
from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
import logging

from xmltv_reader.config import ReaderSettings
from xmltv_reader.services import field_decoders
from xmltv_reader.services.markup_cursor import MarkupCursor, NodeType
from xmltv_reader.services.xmltv_types import (
    Channel,
    Credits,
    Episode,
    Icon,
    Programme,
    Rating,
    Url,
)


logger = logging.getLogger(__name__)


class ChannelBuilder:
    def __init__(self, channel_id: str, settings: ReaderSettings) -> None:
        self.settings = settings
        self.channel_id = channel_id
        self.display_names: dict[str, str] = {}
        self.icons: list[Icon] = []
        self.urls: list[Url] = []

    async def on_display_name(self, cursor: MarkupCursor) -> None:
        entry = await field_decoders.read_localized_text(cursor, self.settings.default_language)
        if entry is not None:
            self.display_names[entry.language] = entry.text

    async def on_icon(self, cursor: MarkupCursor) -> None:
        icon = await field_decoders.read_icon(cursor)
        if icon is not None:
            self.icons.append(icon)

    async def on_url(self, cursor: MarkupCursor) -> None:
        url = await field_decoders.read_url(cursor)
        if url is not None:
            self.urls.append(url)

    def build(self, outer_xml: str | None) -> Channel:
        return Channel(
            id=self.channel_id,
            display_names=self.display_names,
            icons=self.icons,
            urls=self.urls,
            outer_xml=outer_xml,
        )


class ProgrammeBuilder:
    """Draft of a programme whose start, stop and channel have already been accepted."""

    def __init__(self, start: datetime, stop: datetime, channel_id: str, settings: ReaderSettings) -> None:
        self.settings = settings
        self.start = start
        self.stop = stop
        self.channel_id = channel_id
        self.titles: dict[str, str] = {}
        self.sub_titles: dict[str, str] = {}
        self.descriptions: dict[str, str] = {}
        self.actors: list[str] = []
        self.date: datetime | None = None
        self.is_previously_shown = False
        self.previously_shown_channel: str | None = None
        self.previously_shown_start: datetime | None = None
        self.icons: list[Icon] = []
        self.urls: list[Url] = []
        self.credits: Credits | None = None
        self.ratings: dict[str, Rating] = {}
        self.star_rating: str | None = None
        self.episodes: list[Episode] = []
        self.language: str | None = None
        self.categories: list[str] = []
        self.countries: list[str] = []
        self.quality: str | None = None
        self.is_new = False
        self.is_premiere = False
        self.premiere: str | None = None
        self.premiere_language: str | None = None

    async def _localized(self, cursor: MarkupCursor, target: dict[str, str]) -> None:
        entry = await field_decoders.read_localized_text(cursor, self.settings.default_language)
        if entry is not None:
            target[entry.language] = entry.text

    async def on_title(self, cursor: MarkupCursor) -> None:
        await self._localized(cursor, self.titles)

    async def on_sub_title(self, cursor: MarkupCursor) -> None:
        await self._localized(cursor, self.sub_titles)

    async def on_desc(self, cursor: MarkupCursor) -> None:
        await self._localized(cursor, self.descriptions)

    async def on_date(self, cursor: MarkupCursor) -> None:
        date = await field_decoders.read_air_date(cursor, self.settings.timezone)
        if date is not None:
            self.date = date

    async def on_previously_shown(self, cursor: MarkupCursor) -> None:
        shown = await field_decoders.read_previously_shown(cursor, self.settings.timezone)
        self.is_previously_shown = True
        self.previously_shown_channel = shown.channel
        self.previously_shown_start = shown.start

    async def on_actor(self, cursor: MarkupCursor) -> None:
        name = await field_decoders.read_text(cursor)
        if name is not None:
            self.actors.append(name)

    async def on_credits(self, cursor: MarkupCursor) -> None:
        self.credits = await field_decoders.read_credits(cursor)

    async def on_rating(self, cursor: MarkupCursor) -> None:
        entry = await field_decoders.read_rating(cursor)
        self.ratings[entry.system] = entry.rating

    async def on_star_rating(self, cursor: MarkupCursor) -> None:
        value = await field_decoders.read_star_rating(cursor)
        if value is not None:
            self.star_rating = value

    async def on_episode_num(self, cursor: MarkupCursor) -> None:
        episode = await field_decoders.read_episode(cursor)
        if episode is not None:
            self.episodes.append(episode)

    async def on_language(self, cursor: MarkupCursor) -> None:
        language = await field_decoders.read_text(cursor)
        if language is not None:
            self.language = language

    async def on_category(self, cursor: MarkupCursor) -> None:
        category = await field_decoders.read_text(cursor)
        if category is not None:
            self.categories.append(category)

    async def on_country(self, cursor: MarkupCursor) -> None:
        country = await field_decoders.read_text(cursor)
        if country is not None:
            self.countries.append(country)

    async def on_quality(self, cursor: MarkupCursor) -> None:
        quality = await field_decoders.read_text(cursor)
        if quality is not None:
            self.quality = quality

    async def on_new(self, cursor: MarkupCursor) -> None:
        await cursor.skip()
        self.is_new = True

    async def on_premiere(self, cursor: MarkupCursor) -> None:
        premiere = await field_decoders.read_premiere(cursor)
        self.is_premiere = True
        self.premiere_language = premiere.language
        self.premiere = premiere.text

    async def on_icon(self, cursor: MarkupCursor) -> None:
        icon = await field_decoders.read_icon(cursor)
        if icon is not None:
            self.icons.append(icon)

    async def on_url(self, cursor: MarkupCursor) -> None:
        url = await field_decoders.read_url(cursor)
        if url is not None:
            self.urls.append(url)

    def build(self, outer_xml: str | None) -> Programme:
        return Programme(
            start=self.start,
            stop=self.stop,
            channel_id=self.channel_id,
            titles=self.titles,
            sub_titles=self.sub_titles,
            descriptions=self.descriptions,
            actors=self.actors,
            date=self.date,
            is_previously_shown=self.is_previously_shown,
            previously_shown_channel=self.previously_shown_channel,
            previously_shown_start=self.previously_shown_start,
            icons=self.icons,
            urls=self.urls,
            credits=self.credits,
            ratings=self.ratings,
            star_rating=self.star_rating,
            episodes=self.episodes,
            language=self.language,
            categories=self.categories,
            countries=self.countries,
            quality=self.quality,
            is_new=self.is_new,
            is_premiere=self.is_premiere,
            premiere=self.premiere,
            premiere_language=self.premiere_language,
            outer_xml=outer_xml,
        )


CHANNEL_HANDLERS: dict[str, Callable[[ChannelBuilder, MarkupCursor], Awaitable[None]]] = {
    "display-name": ChannelBuilder.on_display_name,
    "icon": ChannelBuilder.on_icon,
    "url": ChannelBuilder.on_url,
}

PROGRAMME_HANDLERS: dict[str, Callable[[ProgrammeBuilder, MarkupCursor], Awaitable[None]]] = {
    "title": ProgrammeBuilder.on_title,
    "sub-title": ProgrammeBuilder.on_sub_title,
    "desc": ProgrammeBuilder.on_desc,
    "date": ProgrammeBuilder.on_date,
    "previously-shown": ProgrammeBuilder.on_previously_shown,
    "actor": ProgrammeBuilder.on_actor,
    "credits": ProgrammeBuilder.on_credits,
    "rating": ProgrammeBuilder.on_rating,
    "star-rating": ProgrammeBuilder.on_star_rating,
    "episode-num": ProgrammeBuilder.on_episode_num,
    "language": ProgrammeBuilder.on_language,
    "category": ProgrammeBuilder.on_category,
    "country": ProgrammeBuilder.on_country,
    "quality": ProgrammeBuilder.on_quality,
    "new": ProgrammeBuilder.on_new,
    "premiere": ProgrammeBuilder.on_premiere,
    "icon": ProgrammeBuilder.on_icon,
    "url": ProgrammeBuilder.on_url,
}


async def _scan_record(cursor: MarkupCursor, builder, handlers: dict) -> bool:
    """Dispatch every start event in the current record's scope; False if the document ended first"""
    record_element = cursor.element
    while await cursor.read():
        if cursor.is_end_of(record_element):
            return True
        if cursor.node_type is NodeType.ELEMENT:
            handler = handlers.get(cursor.name)
            if handler is not None:
                await handler(builder, cursor)
    return False


async def build_channel(cursor: MarkupCursor, channel_id: str, settings: ReaderSettings) -> Channel | None:
    """
    Build a channel from the <channel> start event under the cursor

    Returns:
        Channel, or None when the document ended inside the element
    """
    record_element = cursor.element
    builder = ChannelBuilder(channel_id, settings)
    if not await _scan_record(cursor, builder, CHANNEL_HANDLERS):
        logger.debug(f"Channel {channel_id} ended before its closing tag")
        return None

    outer_xml = cursor.outer_markup(record_element) if settings.include_outer_xml else None
    return builder.build(outer_xml)


async def build_programme(
    cursor: MarkupCursor,
    start: datetime,
    stop: datetime,
    channel_id: str,
    settings: ReaderSettings
) -> Programme | None:
    """
    Build a programme from the <programme> start event under the cursor

    Args:
        cursor: Cursor on the programme start event
        start: Accepted start, already in the target timezone
        stop: Accepted stop, already in the target timezone
        channel_id: Accepted channel id
        settings: Session settings

    Returns:
        Programme, or None when the document ended inside the element
    """
    record_element = cursor.element
    builder = ProgrammeBuilder(start, stop, channel_id, settings)
    if not await _scan_record(cursor, builder, PROGRAMME_HANDLERS):
        logger.debug(f"Programme on {channel_id} at {start.isoformat()} ended before its closing tag")
        return None

    outer_xml = cursor.outer_markup(record_element) if settings.include_outer_xml else None
    return builder.build(outer_xml)
