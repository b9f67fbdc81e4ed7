"""
Exception hierarchy for XMLTV decoding.

Only argument errors and source-level faults escape a decode. Malformed
records are skipped and never raise.
"""


class XmlTvError(Exception):
    """Base class for all xmltv_reader errors"""
    pass


class InvalidSourceError(XmlTvError, ValueError):
    """Raised when a source handle is None, empty or blank"""
    pass


class SourceFaultError(XmlTvError):
    """Raised when the underlying document cannot be read or is not well-formed XML"""
    pass


class DecodeCancelledError(XmlTvError):
    """Raised when the caller's cancellation event is observed mid-decode"""
    pass


class DecodeTimeoutError(XmlTvError):
    """Raised when a bulk decode exceeds its timeout"""
    pass


__all__ = [
    "XmlTvError",
    "InvalidSourceError",
    "SourceFaultError",
    "DecodeCancelledError",
    "DecodeTimeoutError",
]
