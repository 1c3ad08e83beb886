"""
Storage Layer.

This package handles all data persistence: the binary store and its registry
file, and the resolution of the directories they live in.
"""

from .base import BinaryStore
from .config_manager import resolve_config
from .local_store import LocalBinaryStore

__all__ = ["BinaryStore", "LocalBinaryStore", "resolve_config"]
