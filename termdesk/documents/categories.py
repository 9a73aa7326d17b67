"""File-extension to document category mapping."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath


class DocumentCategory(str, Enum):
    PDF = "pdf"
    WORD = "word"
    SPREADSHEET = "spreadsheet"
    SLIDES = "slides"
    DELIMITED = "csv"
    IMAGE = "image"
    MARKUP = "html"
    TEXT = "text"


_EXTENSION_MAP: dict[str, DocumentCategory] = {
    "pdf": DocumentCategory.PDF,
    "doc": DocumentCategory.WORD,
    "docx": DocumentCategory.WORD,
    "xls": DocumentCategory.SPREADSHEET,
    "xlsx": DocumentCategory.SPREADSHEET,
    "ppt": DocumentCategory.SLIDES,
    "pptx": DocumentCategory.SLIDES,
    "csv": DocumentCategory.DELIMITED,
    "png": DocumentCategory.IMAGE,
    "jpg": DocumentCategory.IMAGE,
    "jpeg": DocumentCategory.IMAGE,
    "gif": DocumentCategory.IMAGE,
    "svg": DocumentCategory.IMAGE,
    "webp": DocumentCategory.IMAGE,
    "html": DocumentCategory.MARKUP,
    "htm": DocumentCategory.MARKUP,
}


def file_extension(path: str) -> str:
    return PurePath(path).suffix.lstrip(".").lower()


def category_for(path: str) -> DocumentCategory:
    """Pick the renderer category purely from the file extension."""
    return _EXTENSION_MAP.get(file_extension(path), DocumentCategory.TEXT)
