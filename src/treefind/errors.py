"""Error types raised by treefind."""

from pathlib import Path


class TreefindError(Exception):
    """Base class for every treefind error."""


class InvalidPattern(TreefindError, ValueError):
    """Regex source, flag string or file filter could not be compiled."""


class EnumerationFailure(TreefindError, ValueError):
    """A root directory could not be listed."""

    def __init__(self, message: str, path: str | Path):
        super().__init__(message)
        self.path = str(path)


class FileReadFailure(TreefindError, OSError):
    """A single file could not be read as UTF-8 text."""

    def __init__(self, path: str | Path, cause: Exception):
        super().__init__(f"Cannot read {path}: {cause}")
        self.path = str(path)
        self.cause = cause
