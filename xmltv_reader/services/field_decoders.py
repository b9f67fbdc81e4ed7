"""
Field sub-decoders.

Each decoder expects the cursor on the start event of its element, consumes
exactly that element (children included) and returns a value. Merging the
value into a record is the record builder's job.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime, tzinfo
from typing import NamedTuple

from xmltv_reader.services.markup_cursor import MarkupCursor, NodeType
from xmltv_reader.services.xmltv_types import Credits, Episode, Icon, Person, Rating, Url
from xmltv_reader.utils.timezone import AIR_DATE_FORMATS, START_STOP_FORMATS, parse_xmltv_time, to_timezone


class LocalizedText(NamedTuple):
    language: str
    text: str


class PreviouslyShown(NamedTuple):
    channel: str | None
    start: datetime | None


class Premiere(NamedTuple):
    language: str | None
    text: str | None


class RatingEntry(NamedTuple):
    system: str
    rating: Rating


# credits child -> Credits field
_CREDIT_NAMES = {
    "director": "directors",
    "writer": "writers",
    "adapter": "adapters",
    "producer": "producers",
    "composer": "composers",
    "editor": "editors",
    "presenter": "presenters",
    "commentator": "commentators",
}
_CREDIT_PEOPLE = {
    "actor": "actors",
    "guest": "guests",
}


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def read_text(cursor: MarkupCursor) -> str | None:
    return await cursor.read_text()


async def read_localized_text(cursor: MarkupCursor, default_language: str) -> LocalizedText | None:
    """Read a text element whose ``lang`` attribute falls back to the session default"""
    language = cursor.get("lang")
    if language is None:
        language = default_language
    text = await cursor.read_text()
    if text is None:
        return None
    return LocalizedText(language, text)


async def read_icon(cursor: MarkupCursor) -> Icon | None:
    """Read an icon; icons without a ``src`` are dropped"""
    source = cursor.get("src")
    height = _parse_int(cursor.get("height"))
    width = _parse_int(cursor.get("width"))
    await cursor.skip()

    if not source or not source.strip():
        return None

    return Icon(source=source, height=height, width=width)


async def read_url(cursor: MarkupCursor) -> Url | None:
    system = cursor.get("system")
    value = await cursor.read_text()
    if value is None:
        return None
    return Url(value=value, system=system)


async def read_episode(cursor: MarkupCursor) -> Episode | None:
    system = cursor.get("system")
    value = await cursor.read_text()
    if value is None:
        return None
    return Episode(value=value, system=system)


async def read_air_date(cursor: MarkupCursor, target: tzinfo) -> datetime | None:
    parsed = parse_xmltv_time(await cursor.read_text(), AIR_DATE_FORMATS)
    if parsed is None:
        return None
    return to_timezone(parsed, target)


async def read_previously_shown(cursor: MarkupCursor, target: tzinfo) -> PreviouslyShown:
    channel = cursor.get("channel")
    start = parse_xmltv_time(cursor.get("start"), START_STOP_FORMATS)
    await cursor.skip()
    return PreviouslyShown(channel, to_timezone(start, target) if start else None)


async def read_premiere(cursor: MarkupCursor) -> Premiere:
    language = cursor.get("lang")
    return Premiere(language, await cursor.read_text())


async def read_star_rating(cursor: MarkupCursor) -> str | None:
    """Read the ``value`` of a star-rating block"""
    scope = cursor.element
    value = None
    while await cursor.read():
        if cursor.is_end_of(scope):
            break
        if cursor.is_start("value"):
            text = await cursor.read_text()
            if text is not None:
                value = text
    return value


async def read_rating(cursor: MarkupCursor) -> RatingEntry:
    """
    Read a rating block

    Returns:
        Rating keyed by its ``system`` attribute ('' when absent)
    """
    system = cursor.get("system") or ""
    scope = cursor.element
    value = None
    icons: list[Icon] = []

    while await cursor.read():
        if cursor.is_end_of(scope):
            break
        if cursor.is_start("value"):
            text = await cursor.read_text()
            if text is not None:
                value = text
        elif cursor.is_start("icon"):
            icon = await read_icon(cursor)
            if icon is not None:
                icons.append(icon)

    return RatingEntry(system, Rating(value=value, icons=icons))


async def read_credits(cursor: MarkupCursor) -> Credits:
    """Read a credits block; each role keeps document order"""
    scope = cursor.element
    collected: dict[str, list] = defaultdict(list)

    while await cursor.read():
        if cursor.is_end_of(scope):
            break
        if cursor.node_type is not NodeType.ELEMENT:
            continue

        name = cursor.name
        if name in _CREDIT_NAMES:
            text = await cursor.read_text()
            if text is not None:
                collected[_CREDIT_NAMES[name]].append(text)
        elif name in _CREDIT_PEOPLE:
            role = cursor.get("role")
            text = await cursor.read_text()
            if text is not None:
                collected[_CREDIT_PEOPLE[name]].append(Person(name=text, role=role))

    return Credits(**collected)
