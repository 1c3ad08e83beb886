"""
A JSON-file backed store that owns the binaries directory and records every
installed binary.
"""

import logging
import os
import platform
import shutil
import tempfile
from pathlib import Path

from pydantic import ValidationError

from tow.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    SerializationError,
    StorageIOError,
)
from tow.models.entry import BinaryEntry, RegistryDocument, make_entry_key

from .base import BinaryStore

log = logging.getLogger(__name__)

STORE_FILENAME = "towstore.json"
BACKUP_SUFFIX = ".bak"


class LocalBinaryStore(BinaryStore):
    """
    Keeps binaries in a single local directory and their metadata in a JSON
    registry file.

    Not safe for concurrent use: callers must serialize calls on one instance,
    and nothing guards the registry file against other processes.
    """

    def __init__(
        self,
        binaries_dir: Path,
        store_dir: Path,
        system: str,
        architecture: str,
        binaries: dict[str, BinaryEntry] | None = None,
    ):
        self.binaries_dir = Path(binaries_dir)
        self.store_dir = Path(store_dir)
        self.system = system
        self.architecture = architecture
        self._binaries: dict[str, BinaryEntry] = dict(binaries or {})

    @property
    def store_path(self) -> Path:
        return self.store_dir / STORE_FILENAME

    @property
    def backup_path(self) -> Path:
        return self.store_dir / f"{STORE_FILENAME}{BACKUP_SUFFIX}"

    @classmethod
    def load_or_create(cls, binaries_dir: Path, store_dir: Path) -> "LocalBinaryStore":
        """
        Loads the registry found in store_dir, or creates an empty store for the
        current host. Nothing is written to disk until the first save.

        Raises:
            StorageIOError: If an existing registry file cannot be read.
            SerializationError: If an existing registry file is malformed.
        """
        binaries_dir = Path(binaries_dir).absolute()
        store_dir = Path(store_dir).absolute()
        store_path = store_dir / STORE_FILENAME

        if not store_path.is_file():
            log.debug(f"No registry at '{store_path}', creating a new store.")
            return cls(
                binaries_dir,
                store_dir,
                system=platform.system().lower(),
                architecture=platform.machine(),
            )

        document = cls._load(store_path)
        store = cls(
            document.binaries_dir,
            store_dir,
            system=document.system,
            architecture=document.architecture,
            binaries=document.binaries,
        )
        if document.store_dir != store_dir:
            log.debug(
                f"Registry was saved from '{document.store_dir}', now read from "
                f"'{store_dir}'."
            )
        store._change_binaries_dir_if_needed(binaries_dir)
        return store

    @staticmethod
    def _load(store_path: Path) -> RegistryDocument:
        try:
            raw = store_path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageIOError(f"Cannot read registry '{store_path}': {e}") from e
        try:
            return RegistryDocument.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(f"Invalid registry '{store_path}':\n{e}") from e

    def _change_binaries_dir_if_needed(self, binaries_dir: Path) -> None:
        """
        Points the store at a new binaries directory. Paths of existing entries
        are left untouched.
        """
        if self.binaries_dir != binaries_dir:
            log.warning(
                f"Changing binaries_dir from '{self.binaries_dir}' to '{binaries_dir}'"
            )
            self.binaries_dir = binaries_dir

    def get_binary(self, name: str, version: str) -> BinaryEntry | None:
        """Returns the entry for (name, version), if any."""
        return self._binaries.get(make_entry_key(name, version))

    def list_binaries(self) -> list[BinaryEntry]:
        return list(self._binaries.values())

    def add_binary(
        self, name: str, version: str, source_path: Path, source_url: str
    ) -> BinaryEntry:
        """
        Moves the file at source_path into the binaries directory and records it.

        If the registry cannot be saved afterwards, the entry is dropped and the
        moved file deleted before the save error is re-raised.

        Raises:
            AlreadyExistsError: If the entry key is already present.
            StorageIOError: If the file cannot be moved or the registry written.
            SerializationError: If the registry cannot be serialized.
        """
        key = make_entry_key(name, version)
        if key in self._binaries:
            raise AlreadyExistsError(key)

        source_path = Path(source_path)
        new_location = self.binaries_dir / source_path.name
        if new_location.exists():
            raise StorageIOError(
                f"Cannot move '{source_path}': '{new_location}' already exists"
            )
        try:
            os.rename(source_path, new_location)
        except OSError as e:
            raise StorageIOError(
                f"Cannot move '{source_path}' to '{new_location}': {e}"
            ) from e

        entry = BinaryEntry(
            name=name, version=version, path=new_location, source=source_url
        )
        self._binaries[key] = entry

        try:
            self.save()
        except (StorageIOError, SerializationError):
            log.error(f"Error while saving the store, removing {key}")
            del self._binaries[key]
            self._discard_file(new_location)
            raise

        log.info(f"Added {key} to the store")
        return entry

    def remove_binary(self, name: str, version: str) -> None:
        """
        Forgets an entry and deletes its file. A failed deletion does not put the
        entry back: the registry is saved without it before the error is raised.
        A file that is already gone counts as deleted.

        Raises:
            NotFoundError: If the entry key is not present.
            StorageIOError: If the file cannot be deleted or the registry written.
        """
        key = make_entry_key(name, version)
        entry = self._binaries.pop(key, None)
        if entry is None:
            raise NotFoundError(key)

        try:
            entry.path.unlink()
        except FileNotFoundError:
            log.warning(f"'{entry.path}' was already deleted")
        except OSError as e:
            self.save()
            raise StorageIOError(f"Cannot delete '{entry.path}': {e}") from e

        self.save()
        log.info(f"Removed {key} from the store")

    def save(self) -> None:
        """
        Writes the registry, keeping the previous version in a single backup slot.

        Raises:
            StorageIOError: If the registry cannot be written.
            SerializationError: If the registry cannot be serialized.
        """
        try:
            content = self._to_document().model_dump_json(indent=2)
        except ValueError as e:
            raise SerializationError(f"Cannot serialize the registry: {e}") from e

        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            if self.store_path.is_file():
                self._create_backup()
            self._write_atomically(content)
        except OSError as e:
            raise StorageIOError(
                f"Cannot write registry '{self.store_path}': {e}"
            ) from e

    def _create_backup(self) -> None:
        try:
            shutil.copyfile(self.store_path, self.backup_path)
        except OSError as e:
            log.error(f"Cannot back up previous registry file: {e}")

    def _write_atomically(self, content: str) -> None:
        temp_fd, temp_path = tempfile.mkstemp(
            dir=self.store_dir, prefix=".towstore_", suffix=".tmp"
        )
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.store_path)
        except BaseException:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _to_document(self) -> RegistryDocument:
        return RegistryDocument(
            binaries=self._binaries,
            system=self.system,
            architecture=self.architecture,
            binaries_dir=self.binaries_dir,
            store_dir=self.store_dir,
        )

    @staticmethod
    def _discard_file(path: Path) -> None:
        try:
            path.unlink()
        except OSError as e:
            log.error(f"Cannot delete '{path}' during rollback: {e}")
