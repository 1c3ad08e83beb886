"""
Abstract contract shared by every binary store backend.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from tow.models.entry import BinaryEntry


class BinaryStore(ABC):
    """A registry of installed binaries keyed by '<name>-<version>'."""

    @abstractmethod
    def add_binary(
        self, name: str, version: str, source_path: Path, source_url: str
    ) -> BinaryEntry:
        """
        Takes ownership of the file at source_path and records it.

        Raises:
            AlreadyExistsError: If the entry key is already present.
        """

    @abstractmethod
    def remove_binary(self, name: str, version: str) -> None:
        """
        Deletes a stored binary and forgets it.

        Raises:
            NotFoundError: If the entry key is not present.
        """

    @abstractmethod
    def list_binaries(self) -> list[BinaryEntry]:
        """Returns every current entry, in no particular order."""
