"""
Core application engine for orchestrating installs.

The `TowApp` validates requests, delegates fetching to the `Downloader` and
record keeping to a `BinaryStore`.
"""
