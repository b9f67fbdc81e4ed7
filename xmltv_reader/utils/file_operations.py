"""
File operation utilities

This module opens XMLTV documents for chunked reading and handles remote
guide download and cleanup with retry logic.
"""
import logging
import os
import tempfile
from pathlib import Path
import asyncio

import aiofiles
import httpx

from xmltv_reader.exceptions import InvalidSourceError
from xmltv_reader.utils.logging_helpers import sanitize_url_for_logging


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class PathDocument:
    """Document read from the filesystem. The file is opened lazily and owned by this object."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._handle = None

    async def read(self, size: int) -> bytes:
        if self._handle is None:
            logger.debug(f"Opening XMLTV file: {self.path}")
            self._handle = await aiofiles.open(self.path, "rb")
        return await self._handle.read(size)

    async def close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            await handle.close()
            logger.debug(f"Closed XMLTV file: {self.path}")


class StreamDocument:
    """Document read from a caller-supplied binary or text stream.

    The caller keeps ownership of the stream; ``close`` leaves it open.
    """

    def __init__(self, stream) -> None:
        self.stream = stream

    async def read(self, size: int) -> bytes | str:
        # caller streams may block (sockets, pipes); keep the event loop free
        return await asyncio.to_thread(self.stream.read, size)

    async def close(self) -> None:
        pass


def open_document(source) -> PathDocument | StreamDocument:
    """
    Wrap a path, binary stream or text stream for chunked reading

    Args:
        source: Filesystem path (str or os.PathLike) or an object with a read(size) method

    Returns:
        Document object exposing async read(size) and close()

    Raises:
        InvalidSourceError: If source is None, a blank path, or an unsupported type
    """
    if source is None:
        raise InvalidSourceError("source must not be None")

    if isinstance(source, (str, os.PathLike)):
        path_text = os.fspath(source)
        if isinstance(path_text, bytes):
            path_text = os.fsdecode(path_text)
        if not path_text.strip():
            raise InvalidSourceError("source path must not be empty or blank")
        return PathDocument(Path(path_text))

    if callable(getattr(source, "read", None)):
        return StreamDocument(source)

    raise InvalidSourceError(f"Unsupported source type: {type(source).__name__}")


def is_remote_source(source) -> bool:
    """Check whether a source string is an HTTP/HTTPS URL"""
    return isinstance(source, str) and source.strip().lower().startswith(("http://", "https://"))


async def download_file(
    url: str,
    filename: str,
    timeout: float = 120.0,
    max_retries: int = 3,
    backoff_factor: float = 2.0
) -> Path:
    """
    Stream a file from URL to a temp file with exponential backoff retry logic

    Retries on transient network errors (timeouts, connection errors).
    Does NOT retry on 4xx HTTP errors (client errors).

    Args:
        url: URL to download from
        filename: Name for the temporary file
        timeout: HTTP timeout in seconds
        max_retries: Maximum number of retry attempts
        backoff_factor: Exponential backoff multiplier (wait = backoff_factor ^ attempt)

    Returns:
        Path to downloaded temporary file

    Raises:
        httpx.HTTPError: If download fails after all retries
    """
    logger.info(f"Downloading file from {sanitize_url_for_logging(url)}...")

    last_error: Exception | None = None

    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()

                    temp_file = Path(tempfile.gettempdir()) / filename
                    written = 0

                    async with aiofiles.open(temp_file, "wb") as f:
                        async for chunk in response.aiter_bytes():
                            await f.write(chunk)
                            written += len(chunk)

                file_size = written / (1024 * 1024)
                logger.info(f"Downloaded {file_size:.2f} MB to {temp_file}")

                return temp_file

        except (httpx.TimeoutException, httpx.ConnectError) as e:
            last_error = e
            if attempt < max_retries - 1:
                wait_time = backoff_factor ** attempt
                logger.warning(
                    f"Download attempt {attempt + 1}/{max_retries} failed (transient error): {type(e).__name__}. "
                    f"Retrying in {wait_time:.1f}s..."
                )
                await asyncio.sleep(wait_time)
            else:
                logger.error(f"Download failed after {max_retries} attempts (transient error)")

        except httpx.HTTPStatusError as e:
            if 400 <= e.response.status_code < 500:
                logger.error(f"HTTP {e.response.status_code} (client error): {e}")
                raise

            last_error = e
            if attempt < max_retries - 1:
                wait_time = backoff_factor ** attempt
                logger.warning(
                    f"Download attempt {attempt + 1}/{max_retries} failed "
                    f"(HTTP {e.response.status_code} server error). "
                    f"Retrying in {wait_time:.1f}s..."
                )
                await asyncio.sleep(wait_time)
            else:
                logger.error(f"Download failed after {max_retries} attempts (HTTP {e.response.status_code})")

    if last_error:
        raise last_error

    raise RuntimeError(f"Failed to download {url} after {max_retries} attempts")


def cleanup_temp_file(file_path: Path) -> bool:
    """
    Safely delete a temporary file

    Args:
        file_path: Path to file to delete

    Returns:
        True if deleted successfully, False otherwise
    """
    if not file_path or not file_path.exists():
        return False

    try:
        file_path.unlink()
        logger.debug(f"Cleaned up temporary file: {file_path}")
        return True
    except (OSError, PermissionError) as e:
        logger.warning(f"Failed to delete temporary file {file_path}: {e}")
        return False
