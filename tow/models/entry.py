"""
Pydantic models for installed binaries and the persisted registry document.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


def make_entry_key(name: str, version: str) -> str:
    """Builds the identity key of an installed binary."""
    return f"{name}-{version}"


class BinaryEntry(BaseModel):
    """One installed binary. Entries are never updated in place."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    path: Path
    source: str

    @property
    def key(self) -> str:
        return make_entry_key(self.name, self.version)


class RegistryDocument(BaseModel):
    """The on-disk shape of the registry file."""

    binaries: dict[str, BinaryEntry] = Field(default_factory=dict)
    system: str
    architecture: str
    binaries_dir: Path
    store_dir: Path
