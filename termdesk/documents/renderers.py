"""Per-category document renderers.

Each renderer takes a path and returns a :class:`Document` whose ``data``
holds structured content for the viewer, or raises :class:`ConversionError`.
"""

from __future__ import annotations

import base64
import csv
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from termdesk.documents.categories import DocumentCategory, category_for
from termdesk.errors import ConversionError

Renderer = Callable[[Path], dict[str, Any]]


@dataclass
class Document:
    """Rendered file content for one file tab."""

    category: DocumentCategory
    name: str
    path: str
    data: dict[str, Any] = field(default_factory=dict)


def _try_import_docx():
    try:
        import docx
        return docx
    except ImportError:
        return None


def _try_import_openpyxl():
    try:
        import openpyxl
        return openpyxl
    except ImportError:
        return None


def _try_import_pptx():
    try:
        import pptx
        return pptx
    except ImportError:
        return None


def _render_pdf(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(str(path))
    return {"url": path.resolve().as_uri(), "size": path.stat().st_size}


def _render_word(path: Path) -> dict[str, Any]:
    docx = _try_import_docx()
    if docx is None:
        raise ConversionError("python-docx is not installed", str(path))
    doc = docx.Document(str(path))
    blocks: list[dict[str, Any]] = []
    for para in doc.paragraphs:
        style = (para.style.name or "").lower() if para.style else ""
        if style.startswith("heading"):
            level = style.rsplit(" ", 1)[-1]
            blocks.append({"type": "heading", "level": int(level) if level.isdigit() else 1, "text": para.text})
        else:
            blocks.append({"type": "paragraph", "text": para.text})
    for table in doc.tables:
        rows = [[cell.text.strip() for cell in row.cells] for row in table.rows]
        blocks.append({"type": "table", "rows": rows})
    return {"blocks": blocks}


def _render_spreadsheet(path: Path) -> dict[str, Any]:
    openpyxl = _try_import_openpyxl()
    if openpyxl is None:
        raise ConversionError("openpyxl is not installed", str(path))
    wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
    try:
        sheets: dict[str, list[list[Any]]] = {}
        for ws in wb.worksheets:
            sheets[ws.title] = [list(row) for row in ws.iter_rows(values_only=True)]
        return {"sheet_names": list(sheets), "sheets": sheets}
    finally:
        wb.close()


def _render_slides(path: Path) -> dict[str, Any]:
    pptx = _try_import_pptx()
    if pptx is None:
        raise ConversionError("python-pptx is not installed", str(path))
    prs = pptx.Presentation(str(path))
    slides: list[dict[str, Any]] = []
    for idx, slide in enumerate(prs.slides, 1):
        title = ""
        texts: list[str] = []
        for shape in slide.shapes:
            if not shape.has_text_frame:
                continue
            text = shape.text_frame.text.strip()
            if not text:
                continue
            if shape == slide.shapes.title:
                title = text
            else:
                texts.append(text)
        slides.append({"index": idx, "title": title, "text": texts})
    return {"slides": slides}


def _render_csv(path: Path) -> dict[str, Any]:
    with open(path, newline="", encoding="utf-8") as f:
        rows = [row for row in csv.reader(f)]
    return {"rows": rows}


def _render_image(path: Path) -> dict[str, Any]:
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    raw = path.read_bytes()
    encoded = base64.b64encode(raw).decode("ascii")
    return {"mime": mime, "size": len(raw), "data_url": f"data:{mime};base64,{encoded}"}


def _render_markup(path: Path) -> dict[str, Any]:
    return {"html": path.read_text(encoding="utf-8"), "base_url": path.resolve().parent.as_uri() + "/"}


def _render_text(path: Path) -> dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return {"content": content, "size": path.stat().st_size}


RENDERERS: dict[DocumentCategory, Renderer] = {
    DocumentCategory.PDF: _render_pdf,
    DocumentCategory.WORD: _render_word,
    DocumentCategory.SPREADSHEET: _render_spreadsheet,
    DocumentCategory.SLIDES: _render_slides,
    DocumentCategory.DELIMITED: _render_csv,
    DocumentCategory.IMAGE: _render_image,
    DocumentCategory.MARKUP: _render_markup,
    DocumentCategory.TEXT: _render_text,
}


class DocumentRenderer:
    """Dispatches a file to the renderer of its extension category."""

    def __init__(self, renderers: dict[DocumentCategory, Renderer] | None = None) -> None:
        self._renderers = dict(RENDERERS)
        if renderers:
            self._renderers.update(renderers)

    def render(self, path: str) -> Document:
        category = category_for(path)
        target = Path(path)
        try:
            data = self._renderers[category](target)
        except ConversionError:
            raise
        except UnicodeDecodeError as exc:
            raise ConversionError(f"Cannot decode {target.name} as UTF-8 text", path) from exc
        except Exception as exc:
            # openpyxl, python-docx and python-pptx raise library-specific errors
            raise ConversionError(f"{type(exc).__name__}: {exc}", path) from exc
        logger.debug(f"[render] {category.value} {target.name}")
        return Document(category=category, name=target.name, path=path, data=data)
