"""Error taxonomy shared across the workspace engine.

File-system failures (listing, reading, copying) use the built-in
``OSError`` family and are handled where they occur.
"""

from __future__ import annotations


class TermdeskError(Exception):
    """Base class for workspace errors."""


class SpawnError(TermdeskError):
    """The session process could not be started (tool or runtime missing)."""

    def __init__(self, message: str, command: str = "") -> None:
        super().__init__(message)
        self.command = command


class ConversionError(TermdeskError):
    """A document renderer could not parse a file."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ValidationError(TermdeskError):
    """A user action is missing a precondition (e.g. no working directory)."""
