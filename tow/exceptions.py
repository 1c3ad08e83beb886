"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TowError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(TowError):
    """Raised for issues related to resolving or validating the configuration."""


class DestinationNotADirectoryError(TowError):
    """Raised when a download destination does not exist or is not a directory."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"'{path}' is not a directory")


class NetworkError(TowError):
    """Raised when the HTTP transport fails or the server answers with an error."""


class UrlParseError(TowError):
    """Raised when a source URL cannot be parsed into an absolute http(s) URL."""


class FilenameUnavailableError(TowError):
    """Raised when no output filename can be derived from the response headers."""


class HeaderMissingError(FilenameUnavailableError):
    """Raised when the response carries no Content-Disposition header."""


class FilenameUnparsableError(FilenameUnavailableError):
    """Raised when a Content-Disposition header has no usable 'filename=' token."""


class AlreadyExistsError(TowError):
    """Raised when adding a binary whose entry key is already in the store."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"{key} is already in the store")


class NotFoundError(TowError):
    """Raised when removing a binary whose entry key is not in the store."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"{key} is not in the store")


class StorageIOError(TowError):
    """Raised when a filesystem operation on the store or a download fails."""


class SerializationError(TowError):
    """Raised when the registry file cannot be serialized or deserialized."""
