"""Directory listing collaborator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class DirectoryEntry:
    """One visible entry of a directory listing."""

    name: str
    path: str
    is_directory: bool


def sort_entries(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Directories first, then case-insensitive name order."""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.lower(), e.name))


def visible_entries(entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
    """Drop hidden entries and apply the tree ordering."""
    return sort_entries([e for e in entries if not e.name.startswith(".")])


class DirectoryLister(Protocol):
    def list(self, path: str) -> list[DirectoryEntry]:
        """Immediate entries of ``path``, unfiltered and unsorted; raises OSError if unreadable."""


class LocalDirectoryLister:
    """DirectoryLister over the local file system."""

    def list(self, path: str) -> list[DirectoryEntry]:
        entries: list[DirectoryEntry] = []
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
                entries.append(DirectoryEntry(name=entry.name, path=entry.path, is_directory=is_dir))
        return entries
