"""
Channel and programme filter evaluation.

All functions here are pure: they only consult the predicates carried by
ReaderSettings and never touch the cursor.
"""
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from xmltv_reader.config import ReaderSettings


def accepts_channel(channel_id: str, settings: ReaderSettings) -> bool:
    """Check a channel id against the general channel filter"""
    channel_filter = settings.channel_filter
    return channel_filter is None or bool(channel_filter(channel_id))


def programme_channel_filter(settings: ReaderSettings) -> Callable[[str], bool] | None:
    """
    Pick the channel-id predicate that governs programmes

    A programme-specific filter replaces the general channel filter outright;
    the two are never combined.
    """
    if settings.programme_channel_filter is not None:
        return settings.programme_channel_filter
    return settings.channel_filter


def accepts_programme(channel_id: str, start: datetime, stop: datetime, settings: ReaderSettings) -> bool:
    """
    Check a programme against the effective channel filter and the time filter

    Args:
        channel_id: Owning channel id from the programme element
        start: Start instant, already converted to the target timezone
        stop: Stop instant, already converted to the target timezone
        settings: Session settings

    Returns:
        True only when every configured predicate accepts the programme
    """
    channel_filter = programme_channel_filter(settings)
    if channel_filter is not None and not channel_filter(channel_id):
        return False

    time_filter = settings.programme_time_filter
    if time_filter is not None and not time_filter(start, stop):
        return False

    return True


def channel_ids(*ids: str | Iterable[str]) -> Callable[[str], bool]:
    """Build a channel-id predicate accepting only the given ids"""
    allowed: set[str] = set()
    for item in ids:
        if isinstance(item, str):
            allowed.add(item)
        else:
            allowed.update(item)

    def _accepts(channel_id: str) -> bool:
        return channel_id in allowed

    return _accepts


def _as_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def time_window(
    time_from: datetime | None = None,
    time_to: datetime | None = None
) -> Callable[[datetime, datetime], bool]:
    """
    Build a (start, stop) predicate keeping programmes whose start lies in the window

    Both bounds are optional and inclusive; with neither set every programme passes.
    Naive bounds are taken as UTC.
    """
    time_from = _as_aware(time_from)
    time_to = _as_aware(time_to)

    def _accepts(start: datetime, stop: datetime) -> bool:
        if time_from and start < time_from:
            return False

        if time_to and start > time_to:
            return False

        return True

    return _accepts
