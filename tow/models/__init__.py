"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration and registry entries.
"""

from .config import TowConfig
from .entry import BinaryEntry, RegistryDocument, make_entry_key

__all__ = ["BinaryEntry", "RegistryDocument", "TowConfig", "make_entry_key"]
