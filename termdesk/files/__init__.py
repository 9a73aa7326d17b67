"""File-system collaborators: listing, copying, desktop shell."""

from termdesk.files.copier import CopyResult, FileCopier
from termdesk.files.listing import DirectoryEntry, DirectoryLister, LocalDirectoryLister
from termdesk.files.shell import ExternalShell

__all__ = [
    "CopyResult",
    "DirectoryEntry",
    "DirectoryLister",
    "ExternalShell",
    "FileCopier",
    "LocalDirectoryLister",
]
