"""
Typed records produced by the XMLTV decoder.

Records are frozen once built; the record builders accumulate into local
drafts and construct each record in one step.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Icon:
    """Image reference attached to a channel, programme or rating."""
    source: str
    height: int | None = None
    width: int | None = None


@dataclass(frozen=True, slots=True)
class Url:
    value: str
    system: str | None = None


@dataclass(frozen=True, slots=True)
class Episode:
    """Episode number expressed in a named numbering system (xmltv_ns, onscreen, ...)."""
    value: str
    system: str | None = None


@dataclass(frozen=True, slots=True)
class Person:
    name: str
    role: str | None = None


@dataclass(frozen=True, slots=True)
class Rating:
    value: str | None = None
    icons: list[Icon] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Credits:
    """Contributors to a programme, each list in document order."""
    directors: list[str] = field(default_factory=list)
    actors: list[Person] = field(default_factory=list)
    writers: list[str] = field(default_factory=list)
    adapters: list[str] = field(default_factory=list)
    producers: list[str] = field(default_factory=list)
    composers: list[str] = field(default_factory=list)
    editors: list[str] = field(default_factory=list)
    presenters: list[str] = field(default_factory=list)
    commentators: list[str] = field(default_factory=list)
    guests: list[Person] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Channel:
    """A broadcast source with its display names keyed by language tag."""
    id: str
    display_names: dict[str, str] = field(default_factory=dict)
    icons: list[Icon] = field(default_factory=list)
    urls: list[Url] = field(default_factory=list)
    outer_xml: str | None = None


@dataclass(frozen=True, slots=True)
class Programme:
    """A scheduled broadcast bound to a channel.

    ``start``, ``stop``, ``date`` and ``previously_shown_start`` are
    timezone-aware and already converted to the reader's target timezone.
    """
    start: datetime
    stop: datetime
    channel_id: str
    titles: dict[str, str] = field(default_factory=dict)
    sub_titles: dict[str, str] = field(default_factory=dict)
    descriptions: dict[str, str] = field(default_factory=dict)
    actors: list[str] = field(default_factory=list)
    date: datetime | None = None
    is_previously_shown: bool = False
    previously_shown_channel: str | None = None
    previously_shown_start: datetime | None = None
    icons: list[Icon] = field(default_factory=list)
    urls: list[Url] = field(default_factory=list)
    credits: Credits | None = None
    ratings: dict[str, Rating] = field(default_factory=dict)
    star_rating: str | None = None
    episodes: list[Episode] = field(default_factory=list)
    language: str | None = None
    categories: list[str] = field(default_factory=list)
    countries: list[str] = field(default_factory=list)
    quality: str | None = None
    is_new: bool = False
    is_premiere: bool = False
    premiere: str | None = None
    premiere_language: str | None = None
    outer_xml: str | None = None


XmlTvElement = Channel | Programme


@dataclass(slots=True)
class XmlTvResult:
    """Channels and programmes from a bulk decode, in document order."""
    channels: list[Channel] = field(default_factory=list)
    programmes: list[Programme] = field(default_factory=list)


__all__ = [
    "Icon",
    "Url",
    "Episode",
    "Person",
    "Rating",
    "Credits",
    "Channel",
    "Programme",
    "XmlTvElement",
    "XmlTvResult",
]
