"""
Handles the low-level downloading of files over HTTP, streaming the body to disk
under the name announced by the server's Content-Disposition header.
"""

import asyncio
import logging
from collections.abc import Callable, Mapping
from pathlib import Path

import aiofiles
import aiohttp
from pathvalidate import sanitize_filename

from tow.exceptions import (
    DestinationNotADirectoryError,
    FilenameUnparsableError,
    HeaderMissingError,
    NetworkError,
    StorageIOError,
)

log = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def parse_filename_from_content_disposition(header: str) -> str:
    """
    Extracts the value of the first 'filename=' directive of a Content-Disposition
    header.

    Only a matched pair of surrounding double quotes is removed. Extended
    'filename*=' parameters are not decoded, so a plain 'filename=' always wins.

    Raises:
        FilenameUnparsableError: If the header has no 'filename=' token.
    """
    _, found, remainder = header.partition("filename=")
    if not found:
        raise FilenameUnparsableError(f"cannot get filename from '{header}'")

    extracted = remainder.split(";", 1)[0]
    if len(extracted) >= 2 and extracted.startswith('"') and extracted.endswith('"'):
        extracted = extracted[1:-1]
    return extracted


def get_filename(headers: Mapping[str, str]) -> str:
    """
    Derives a safe output filename from response headers.

    Raises:
        HeaderMissingError: If there is no Content-Disposition header.
        FilenameUnparsableError: If no usable filename can be extracted from it.
    """
    header = headers.get(aiohttp.hdrs.CONTENT_DISPOSITION)
    if header is None:
        raise HeaderMissingError(f"no {aiohttp.hdrs.CONTENT_DISPOSITION} header")

    raw_filename = parse_filename_from_content_disposition(header)
    # Host rules only, so names valid on this system are kept as sent.
    filename = sanitize_filename(raw_filename, platform="auto")
    if raw_filename in (".", "..") or filename in ("", ".", ".."):
        raise FilenameUnparsableError(f"empty filename in '{header}'")
    return filename


def get_content_length(headers: Mapping[str, str]) -> int:
    """Returns the declared body size, or 0 when the server does not announce one."""
    raw_length = headers.get(aiohttp.hdrs.CONTENT_LENGTH)
    if raw_length is not None:
        try:
            return max(int(raw_length), 0)
        except ValueError:
            pass
    log.warning("Cannot extract content-length, download progress will be unknown.")
    return 0


class Downloader:
    """A single-shot file downloader that streams a response body to disk."""

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(self, connect_timeout: float = 15.0, read_timeout: float = 90.0):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    def _create_session(self) -> aiohttp.ClientSession:
        """
        Creates a session with transport compression disabled, so that
        Content-Length matches the number of bytes written to disk.
        """
        timeout = aiohttp.ClientTimeout(
            total=None, sock_connect=self.connect_timeout, sock_read=self.read_timeout
        )
        return aiohttp.ClientSession(
            timeout=timeout,
            auto_decompress=False,
            headers={aiohttp.hdrs.ACCEPT_ENCODING: "identity"},
        )

    async def download(
        self,
        url: str,
        destination_dir: Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """
        Downloads a URL into a directory.

        Args:
            url: The URL to fetch.
            destination_dir: An existing directory to write the file into.
            progress_callback: Optional callable receiving (completed, total) bytes
            after every chunk. The completed count never exceeds the total.

        Returns:
            The full path of the written file.

        Raises:
            DestinationNotADirectoryError: If destination_dir is not a directory.
            NetworkError: On transport failures and HTTP error statuses.
            FilenameUnavailableError: If no filename can be derived from headers.
            StorageIOError: If the file cannot be written.
        """
        destination_dir = Path(destination_dir)
        if not destination_dir.is_dir():
            raise DestinationNotADirectoryError(destination_dir)

        try:
            async with (
                self._create_session() as session,
                session.get(str(url), allow_redirects=True) as response,
            ):
                response.raise_for_status()
                total_size = get_content_length(response.headers)
                full_path = destination_dir / get_filename(response.headers)
                log.debug(f"Downloading '{url}' to '{full_path}' ({total_size} bytes)")
                await self._stream_to_file(
                    response, full_path, total_size, progress_callback
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Error while downloading '{url}': {e}") from e
        except OSError as e:
            raise StorageIOError(f"Cannot write downloaded file: {e}") from e

        log.info(f"Downloaded {url} to {full_path}")
        return full_path

    async def _stream_to_file(
        self,
        response: aiohttp.ClientResponse,
        full_path: Path,
        total_size: int,
        progress_callback: ProgressCallback | None,
    ) -> None:
        """Writes each chunk before reading the next one. Partial files are kept."""
        downloaded = 0
        async with aiofiles.open(full_path, "wb") as f:
            async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                await f.write(chunk)
                downloaded = min(downloaded + len(chunk), total_size)
                if progress_callback:
                    progress_callback(downloaded, total_size)
