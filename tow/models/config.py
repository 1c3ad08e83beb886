"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_VERSION = "latest"


class TowConfig(BaseModel):
    """A validated configuration model, built once at startup and passed by value."""

    binaries_dir: Path
    store_dir: Path
    default_version: str = DEFAULT_VERSION

    # Network timeouts in seconds. There is no cap on the total transfer time.
    connect_timeout: float = 15.0
    read_timeout: float = 90.0

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    @field_validator("binaries_dir", "store_dir")
    @classmethod
    def validate_directory(cls, v: Path) -> Path:
        """Expands '~' and makes the directory absolute."""
        return v.expanduser().absolute()

    @field_validator("default_version")
    @classmethod
    def validate_default_version(cls, v: str) -> str:
        """Ensures the default version can be part of an entry key."""
        if not v:
            raise ValueError("Default version cannot be empty.")
        if "/" in v or "\\" in v:
            raise ValueError("Default version cannot contain path separators.")
        return v

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensures timeouts are positive."""
        if v <= 0:
            raise ValueError("Timeouts must be positive numbers of seconds.")
        return v
