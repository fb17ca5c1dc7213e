# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Downloader

HTTP transport for remote repositories. Every failure surfaces as a
DownloadFailedError, with connect timeouts promoted to the fatal
ConnectionTimedOutError.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, UTC
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, Union
from urllib.parse import unquote, urlparse

import httpx

from smcget.core.errors import ConnectionTimedOutError, DownloadFailedError

logger = logging.getLogger(__name__)

# Progress callback: (total bytes or None if unknown, bytes done)
ProgressCallback = Callable[[Optional[int], int], None]

CHUNK_SIZE = 64 * 1024


class Downloader:
    """Fetches URLs over HTTP(S) or from `file://` locations."""

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        """
        Initialize downloader.

        Args:
            timeout: Network timeout in seconds
            client: Preconfigured client (tests pass one with a mock transport)
        """
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout, follow_redirects=True)

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        if self._owns_client:
            self.client.close()

    def get(self, url: str) -> bytes:
        """
        Fetch the content of `url`.

        Raises:
            ConnectionTimedOutError: If connecting timed out
            DownloadFailedError: On any other failure
        """
        local = _local_path(url)
        if local is not None:
            try:
                return local.read_bytes()
            except OSError as e:
                raise DownloadFailedError(url, reason=e.strerror or str(e))

        logger.debug(f"GET {url}")
        with _translate_errors(url):
            response = self.client.get(url)
            _check_status(url, response)
            return response.content

    def download(
        self,
        url: str,
        destination: Union[str, Path],
        progress: Optional[ProgressCallback] = None
    ) -> Path:
        """
        Stream `url` into the file `destination`.

        `progress` is called with (total, 0) before the first chunk and with
        (total, total) once the transfer is complete. When the size is not
        known in advance total stays None throughout.

        Returns:
            Path of the written file
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        local = _local_path(url)
        try:
            if local is not None:
                if not local.is_file():
                    raise DownloadFailedError(url, reason="no such file")
                total = local.stat().st_size
                self._write_chunks(_read_chunks(local), destination, total, progress)
            else:
                logger.debug(f"GET {url} -> {destination}")
                with _translate_errors(url):
                    with self.client.stream("GET", url) as response:
                        _check_status(url, response)
                        length = response.headers.get("Content-Length")
                        total = int(length) if length and length.isdigit() else None
                        self._write_chunks(
                            response.iter_bytes(CHUNK_SIZE), destination, total, progress
                        )
        except DownloadFailedError:
            destination.unlink(missing_ok=True)
            raise

        return destination

    def last_modified(self, url: str) -> Optional[datetime]:
        """Modification time reported for `url`, or None if unknown."""
        local = _local_path(url)
        if local is not None:
            try:
                return datetime.fromtimestamp(local.stat().st_mtime, UTC)
            except OSError as e:
                raise DownloadFailedError(url, reason=e.strerror or str(e))

        with _translate_errors(url):
            response = self.client.head(url)
            _check_status(url, response)

        header = response.headers.get("Last-Modified")
        if not header:
            return None
        try:
            return parsedate_to_datetime(header)
        except (TypeError, ValueError):
            logger.warning(f"Unparseable Last-Modified header for {url}: {header}")
            return None

    def _write_chunks(
        self,
        chunks: Iterator[bytes],
        destination: Path,
        total: Optional[int],
        progress: Optional[ProgressCallback]
    ):
        done = 0
        if progress:
            progress(total, 0)
        with open(destination, "wb") as f:
            for chunk in chunks:
                f.write(chunk)
                done += len(chunk)
                if progress:
                    progress(total, done)
        if progress:
            progress(total, total if total is not None else done)


@contextmanager
def _translate_errors(url: str):
    """Map httpx exceptions onto the error taxonomy."""
    try:
        yield
    except httpx.ConnectTimeout as e:
        raise ConnectionTimedOutError(url) from e
    except httpx.TimeoutException as e:
        raise DownloadFailedError(url, reason="timed out") from e
    except httpx.HTTPError as e:
        raise DownloadFailedError(url, reason=str(e) or type(e).__name__) from e


def _check_status(url: str, response: httpx.Response):
    if response.status_code >= 400:
        raise DownloadFailedError(
            url,
            reason=f"HTTP {response.status_code}",
            status_code=response.status_code
        )


def _local_path(url: str) -> Optional[Path]:
    """Filesystem path for `file://` URLs, None for anything else."""
    parsed = urlparse(url)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def _read_chunks(path: Path) -> Iterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
