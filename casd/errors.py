"""casd exception hierarchy.

Every failure surfaced to the command line derives from `CasdError`, so the
front-ends can report it in one place and exit non-zero.
"""

from __future__ import annotations

import os


class CasdError(Exception):
    """Base exception for all casd failures."""


class SourceNotFoundError(CasdError):
    """Raised when a source path does not exist."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__(f"The path `{path}` does not exist")
        self.path = str(path)


class NotAFileError(CasdError):
    """Raised when a source path exists but is not a regular file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__(f"The path `{path}` is not a file")
        self.path = str(path)


class NotInitializedError(CasdError):
    """Raised when no ancestor directory holds a store marker."""

    def __init__(self, start: str | os.PathLike[str]) -> None:
        super().__init__(
            f"`{start}` is not in a casd-managed directory. "
            "Perhaps you should run `casd init`?"
        )
        self.start = str(start)


class ConfigError(CasdError):
    """Raised for unusable clipping configuration."""


class ConfigMissingError(ConfigError):
    """Raised when the configuration file does not exist."""


class ConfigInvalidError(ConfigError):
    """Raised when the configuration file is malformed or incomplete."""


class StoreIOError(CasdError):
    """Raised when an underlying filesystem or process operation fails.

    Attributes:
        operation: Short name of what was being attempted, e.g. `"copy"`.
        path: The path the operation was acting on.
    """

    def __init__(
        self, operation: str, path: str | os.PathLike[str], reason: str
    ) -> None:
        super().__init__(f"{operation} failed for `{path}`: {reason}")
        self.operation = operation
        self.path = str(path)
        self.reason = reason


class ClipboardError(StoreIOError):
    """Raised when the clipboard command cannot be run or exits non-zero."""
