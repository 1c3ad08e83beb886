"""
Resolves the application's directories from the environment and CLI overrides
into a validated TowConfig.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from tow.exceptions import ConfigurationError
from tow.models.config import TowConfig

log = logging.getLogger(__name__)

TOW_BINARIES_DIR_ENV = "TOW_BINARIES_DIR"
TOW_STORE_DIR_ENV = "TOW_STORE_DIR"
TOW_DATA_FOLDER_NAME = "tow"


def default_bin_dir(environ: Mapping[str, str], home: Path) -> Path:
    """The per-user executables directory, following the XDG convention."""
    if xdg_bin := environ.get("XDG_BIN_HOME"):
        return Path(xdg_bin)
    return home / ".local" / "bin"


def default_data_dir(environ: Mapping[str, str], home: Path) -> Path:
    """The per-user data directory, following the XDG convention."""
    if xdg_data := environ.get("XDG_DATA_HOME"):
        return Path(xdg_data)
    return home / ".local" / "share"


def resolve_config(
    environ: Mapping[str, str],
    home: Path,
    overrides: dict[str, Any] | None = None,
) -> TowConfig:
    """
    Builds the configuration. CLI overrides win over environment variables,
    which win over the platform defaults.

    Args:
        environ: The environment to read, usually os.environ.
        home: The user's home directory.
        overrides: Options given on the command line; None values are ignored.

    Raises:
        ConfigurationError: If the resulting settings fail validation.
    """
    settings: dict[str, Any] = {
        "binaries_dir": environ.get(TOW_BINARIES_DIR_ENV)
        or default_bin_dir(environ, home),
        "store_dir": environ.get(TOW_STORE_DIR_ENV)
        or default_data_dir(environ, home) / TOW_DATA_FOLDER_NAME,
    }
    if overrides:
        settings.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = TowConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    log.debug(
        f"Using binaries_dir='{config.binaries_dir}', store_dir='{config.store_dir}'"
    )
    return config
