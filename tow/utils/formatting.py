"""
Helper functions for formatting data into human-readable strings.
"""

from pathlib import Path


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '145.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_file_size(path: Path) -> str:
    """Formats the size of a file on disk, or '-' when it is missing."""
    try:
        return format_size(path.stat().st_size)
    except OSError:
        return "-"
