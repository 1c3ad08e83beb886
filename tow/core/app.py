"""
The orchestrator translating install, uninstall and list requests into download
and store operations.
"""

import logging
import tempfile
from pathlib import Path

from yarl import URL

from tow.exceptions import StorageIOError, TowError, UrlParseError
from tow.media.downloader import Downloader, ProgressCallback
from tow.models.config import TowConfig
from tow.models.entry import BinaryEntry
from tow.storage.base import BinaryStore
from tow.storage.local_store import LocalBinaryStore

log = logging.getLogger(__name__)

STAGING_DIR_PREFIX = ".tow-download-"


def parse_source_url(url: str) -> URL:
    """
    Parses a source URL, accepting only absolute http(s) URLs with a host.

    Raises:
        UrlParseError: If the URL is malformed or not an http(s) URL.
    """
    try:
        parsed = URL(url)
    except (TypeError, ValueError) as e:
        raise UrlParseError(f"Error parsing url '{url}': {e}") from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise UrlParseError(f"Error parsing url '{url}': expected an http(s) URL")
    return parsed


class TowApp:
    """Installs, lists and removes binaries for one configuration."""

    def __init__(
        self,
        config: TowConfig,
        store: BinaryStore,
        downloader: Downloader | None = None,
    ):
        self.config = config
        self.store = store
        self.downloader = downloader or Downloader(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        )

    @classmethod
    def from_config(cls, config: TowConfig) -> "TowApp":
        """Opens the local store described by the configuration."""
        try:
            store = LocalBinaryStore.load_or_create(
                config.binaries_dir, config.store_dir
            )
        except TowError as e:
            log.error(f"Error while loading or creating the store: {e}")
            raise
        return cls(config, store)

    async def install_binary(
        self,
        url: str,
        name: str | None = None,
        version: str | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> BinaryEntry:
        """
        Downloads a URL and adds the file to the store.

        The download is staged inside the binaries directory, so the final move
        never crosses filesystems. Staged files are always cleaned up, including
        after a failed or cancelled download.

        Args:
            url: An absolute http(s) URL.
            name: The binary's name. Defaults to the downloaded file's name.
            version: The binary's version. Defaults to config.default_version.
            progress_callback: Forwarded to the downloader.
        """
        source_url = parse_source_url(url)
        binaries_dir = self.config.binaries_dir
        try:
            binaries_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Cannot create '{binaries_dir}': {e}") from e

        log.info(f"Downloading url: {source_url}")
        with tempfile.TemporaryDirectory(
            dir=binaries_dir, prefix=STAGING_DIR_PREFIX
        ) as staging_dir:
            try:
                downloaded = await self.downloader.download(
                    str(source_url), Path(staging_dir), progress_callback
                )
            except TowError as e:
                log.error(f"Error downloading url: {e}")
                raise
            log.debug(f"Downloaded to {downloaded}")

            return self.store.add_binary(
                name or downloaded.name,
                version or self.config.default_version,
                downloaded,
                str(source_url),
            )

    def uninstall_binary(self, name: str, version: str | None = None) -> None:
        """Removes a binary; version defaults to config.default_version."""
        self.store.remove_binary(name, version or self.config.default_version)

    def list_binaries(self) -> list[BinaryEntry]:
        """Returns installed binaries sorted by entry key."""
        return sorted(self.store.list_binaries(), key=lambda entry: entry.key)
