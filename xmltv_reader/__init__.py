"""
xmltv_reader - streaming XMLTV decoder

Decodes XMLTV channel and programme listings into typed records, either one
at a time (XmlTvReader) or in bulk (read_all).
"""

__version__ = "0.1.0"

from xmltv_reader.config import ReaderSettings
from xmltv_reader.exceptions import (
    DecodeCancelledError,
    DecodeTimeoutError,
    InvalidSourceError,
    SourceFaultError,
    XmlTvError,
)
from xmltv_reader.services import XmlTvReader, ReaderState, channel_ids, read_all, time_window
from xmltv_reader.services.xmltv_types import (
    Channel,
    Credits,
    Episode,
    Icon,
    Person,
    Programme,
    Rating,
    Url,
    XmlTvElement,
    XmlTvResult,
)

__all__ = [
    "__version__",
    "ReaderSettings",
    "XmlTvReader",
    "ReaderState",
    "read_all",
    "channel_ids",
    "time_window",
    "Channel",
    "Programme",
    "Credits",
    "Rating",
    "Icon",
    "Url",
    "Episode",
    "Person",
    "XmlTvElement",
    "XmlTvResult",
    "XmlTvError",
    "InvalidSourceError",
    "SourceFaultError",
    "DecodeCancelledError",
    "DecodeTimeoutError",
]
