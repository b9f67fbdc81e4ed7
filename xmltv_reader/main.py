"""
Command line entry point

Decodes a local or remote XMLTV guide and prints a summary or a JSON dump
of the decoded records.
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from xmltv_reader.config import CustomSettings, ReaderSettings, setup_logging
from xmltv_reader.exceptions import XmlTvError
from xmltv_reader.services import channel_ids, read_all, time_window
from xmltv_reader.services.xmltv_types import XmlTvResult
from xmltv_reader.utils.file_operations import cleanup_temp_file, download_file, is_remote_source
from xmltv_reader.utils.logging_helpers import log_section_end, log_section_start, sanitize_url_for_logging
from xmltv_reader.utils.timezone import DateFormatError, parse_iso8601_to_utc


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xmltv-reader",
        description="Decode an XMLTV guide into channels and programmes",
    )
    parser.add_argument("source", help="Path or http(s) URL of the XMLTV document")
    parser.add_argument("--channel", action="append", default=[], metavar="ID",
                        help="Keep only this channel id (repeatable)")
    parser.add_argument("--programme-channel", action="append", default=[], metavar="ID",
                        help="Keep only programmes of this channel id, overriding --channel for programmes")
    parser.add_argument("--from", dest="time_from", metavar="ISO8601",
                        help="Keep programmes starting at or after this instant")
    parser.add_argument("--to", dest="time_to", metavar="ISO8601",
                        help="Keep programmes starting at or before this instant")
    parser.add_argument("--timezone", help="Target timezone for decoded instants (e.g. 'UTC', '+02:00', 'Europe/Paris')")
    parser.add_argument("--lang", dest="default_language", help="Language tag used when an element has none")
    parser.add_argument("--ignore-channels", action="store_true", help="Do not decode channels")
    parser.add_argument("--ignore-programmes", action="store_true", help="Stop at the first programme")
    parser.add_argument("--outer-xml", action="store_true", help="Capture each record's raw markup")
    parser.add_argument("--json", action="store_true", help="Print decoded records as JSON")
    parser.add_argument("--timeout", type=int, metavar="SECONDS",
                        help="Abort decoding after this many seconds (0 disables)")
    return parser


def build_reader_settings(args: argparse.Namespace, custom: CustomSettings) -> ReaderSettings:
    """
    Translate CLI arguments into session settings

    Raises:
        DateFormatError: If --from/--to is not valid ISO8601
        ValidationError: If timezone or language is invalid
    """
    time_filter = None
    if args.time_from or args.time_to:
        time_from = parse_iso8601_to_utc(args.time_from) if args.time_from else None
        time_to = parse_iso8601_to_utc(args.time_to) if args.time_to else None
        time_filter = time_window(time_from, time_to)

    return ReaderSettings.from_custom_settings(
        custom,
        channel_filter=channel_ids(args.channel) if args.channel else None,
        programme_channel_filter=channel_ids(args.programme_channel) if args.programme_channel else None,
        programme_time_filter=time_filter,
        default_language=args.default_language,
        timezone=args.timezone,
        ignore_channels=args.ignore_channels,
        ignore_programmes=args.ignore_programmes,
        include_outer_xml=args.outer_xml,
    )


def _json_default(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def render_json(result: XmlTvResult) -> str:
    payload = {
        "channels": [dataclasses.asdict(channel) for channel in result.channels],
        "programmes": [dataclasses.asdict(programme) for programme in result.programmes],
    }
    return json.dumps(payload, default=_json_default, ensure_ascii=False, indent=2)


async def decode_source(source: str, settings: ReaderSettings, custom: CustomSettings, timeout: int) -> XmlTvResult:
    """Decode a local path, or download a remote guide first and clean it up afterwards"""
    if not is_remote_source(source):
        return await read_all(source, settings, timeout=timeout, chunk_size=custom.chunk_size)

    temp_file: Path | None = None
    try:
        temp_file = await download_file(
            source,
            "xmltv_reader_source.xml",
            timeout=custom.download_timeout_sec,
            max_retries=custom.download_max_retries,
            backoff_factor=custom.download_backoff_factor,
        )
        return await read_all(temp_file, settings, timeout=timeout, chunk_size=custom.chunk_size)
    finally:
        if temp_file:
            cleanup_temp_file(temp_file)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        custom = CustomSettings()
    except ValidationError as e:
        print(f"Invalid XMLTV_* configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(custom.log_level)

    try:
        settings = build_reader_settings(args, custom)
    except (DateFormatError, ValidationError) as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return 2

    timeout = args.timeout if args.timeout is not None else custom.parse_timeout_sec
    section = f"decode {sanitize_url_for_logging(args.source)}"

    log_section_start(logger, section)
    try:
        result = asyncio.run(decode_source(args.source, settings, custom, timeout))
    except XmlTvError as e:
        logger.error(f"Failed to decode {sanitize_url_for_logging(args.source)}: {e}")
        return 1
    except Exception as e:
        logger.error(f"Failed to fetch {sanitize_url_for_logging(args.source)}: {e}", exc_info=True)
        return 1
    log_section_end(logger, section)

    if args.json:
        print(render_json(result))
    else:
        print(f"{len(result.channels)} channels, {len(result.programmes)} programmes")

    return 0
