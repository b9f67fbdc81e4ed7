"""
Services package for xmltv_reader

This package contains the decode engine, record builders, field decoders,
filter evaluation and the markup cursor.
"""
from xmltv_reader.services.xmltv_reader_service import XmlTvReader, ReaderState, ReaderStats, read_all
from xmltv_reader.services.filter_service import channel_ids, time_window

__all__ = [
    'XmlTvReader',
    'ReaderState',
    'ReaderStats',
    'read_all',
    'channel_ids',
    'time_window',
]
