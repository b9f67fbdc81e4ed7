"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from xmltv_reader.services.xmltv_reader_service import ReaderStats


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_decode_summary(logger: logging.Logger, stats: "ReaderStats") -> None:
    """
    Log decode summary.

    Args:
        logger: Logger instance
        stats: Counters collected by the reader
    """
    logger.info(
        f"XMLTV decode complete: {stats.channels_read} channels, {stats.programmes_read} programmes"
    )
    if stats.channels_skipped or stats.programmes_skipped:
        logger.debug(
            f"Skipped {stats.channels_skipped} channels and {stats.programmes_skipped} programmes "
            f"(missing attributes or filtered out)"
        )


def sanitize_url_for_logging(url: str) -> str:
    """Remove credentials from URL for safe logging."""
    if "://" not in url:
        return url
    try:
        protocol, rest = url.split("://", 1)
        if "@" in rest:
            rest = rest.split("@", 1)[1]
            return f"{protocol}://***:***@{rest}"
        return url
    except (ValueError, IndexError):
        return url
