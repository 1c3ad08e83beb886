"""
Download Layer.

This package is responsible for fetching remote files over HTTP and naming
them from the server's response headers.
"""

from .downloader import Downloader, parse_filename_from_content_disposition

__all__ = ["Downloader", "parse_filename_from_content_disposition"]
