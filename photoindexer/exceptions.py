"""Errors raised while indexing albums."""

from pathlib import Path
from typing import Optional


class PhotoIndexerError(Exception):
    """Base exception for the indexer."""


class ConfigError(PhotoIndexerError):
    """Required configuration is missing or malformed."""


class FetchError(PhotoIndexerError):
    """A call to the Photos Library API failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_text: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class FilesystemWalkError(PhotoIndexerError):
    """A local directory could not be scanned."""

    def __init__(self, path: Path, original_error: Optional[Exception] = None):
        super().__init__(f"Failed scanning {path}: {original_error}")
        self.path = path
        self.original_error = original_error


class DateIndexError(PhotoIndexerError):
    """An image could not be added to the date index."""


class DuplicateFilenameError(DateIndexError):
    def __init__(self, filename: str):
        super().__init__(f"Duplicate image {filename}")
        self.filename = filename


class TimestampParseError(DateIndexError):
    def __init__(self, filename: str, timestamp):
        super().__init__(f"Couldn't parse creation time {timestamp!r} of {filename}")
        self.filename = filename
        self.timestamp = timestamp


class AuthenticationError(PhotoIndexerError):
    """Credentials could not be loaded, refreshed or authorized."""
