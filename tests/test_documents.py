"""Tests for extension categories and document renderers."""

import pytest

from termdesk.documents.categories import DocumentCategory, category_for, file_extension
from termdesk.documents.renderers import DocumentRenderer
from termdesk.errors import ConversionError


@pytest.mark.parametrize(
    "name,category",
    [
        ("report.PDF", DocumentCategory.PDF),
        ("notes.docx", DocumentCategory.WORD),
        ("data.xlsx", DocumentCategory.SPREADSHEET),
        ("deck.pptx", DocumentCategory.SLIDES),
        ("table.csv", DocumentCategory.DELIMITED),
        ("logo.svg", DocumentCategory.IMAGE),
        ("index.htm", DocumentCategory.MARKUP),
        ("main.py", DocumentCategory.TEXT),
        ("Makefile", DocumentCategory.TEXT),
    ],
)
def test_category_for(name, category):
    assert category_for(name) is category


def test_file_extension_lowercases():
    assert file_extension("/a/B.TXT") == "txt"
    assert file_extension("/a/noext") == ""


class TestDocumentRenderer:
    def test_text(self, tmp_path):
        path = tmp_path / "hello.py"
        path.write_text("print('hi')\n", encoding="utf-8")
        doc = DocumentRenderer().render(str(path))
        assert doc.category is DocumentCategory.TEXT
        assert doc.name == "hello.py"
        assert doc.data["content"] == "print('hi')\n"

    def test_csv_rows(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text('a,b\n1,"x,y"\n', encoding="utf-8")
        doc = DocumentRenderer().render(str(path))
        assert doc.data["rows"] == [["a", "b"], ["1", "x,y"]]

    def test_image_data_url(self, tmp_path):
        path = tmp_path / "dot.png"
        path.write_bytes(b"\x89PNG\r\n")
        doc = DocumentRenderer().render(str(path))
        assert doc.data["mime"] == "image/png"
        assert doc.data["data_url"].startswith("data:image/png;base64,")

    def test_binary_text_raises_conversion_error(self, tmp_path):
        path = tmp_path / "blob.bin"
        path.write_bytes(b"\xff\xfe\x00\x81")
        with pytest.raises(ConversionError) as info:
            DocumentRenderer().render(str(path))
        assert info.value.path == str(path)

    def test_malformed_spreadsheet_raises_conversion_error(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a zip archive")
        with pytest.raises(ConversionError):
            DocumentRenderer().render(str(path))

    def test_missing_file_raises_conversion_error(self, tmp_path):
        with pytest.raises(ConversionError):
            DocumentRenderer().render(str(tmp_path / "gone.txt"))

    def test_spreadsheet_sheets(self, tmp_path):
        openpyxl = pytest.importorskip("openpyxl")
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Data"
        ws.append(["name", "qty"])
        ws.append(["apple", 3])
        path = tmp_path / "book.xlsx"
        wb.save(path)
        doc = DocumentRenderer().render(str(path))
        assert doc.data["sheet_names"] == ["Data"]
        assert doc.data["sheets"]["Data"] == [["name", "qty"], ["apple", 3]]

    def test_word_headings_and_paragraphs(self, tmp_path):
        docx = pytest.importorskip("docx")
        document = docx.Document()
        document.add_heading("Title", level=1)
        document.add_paragraph("Body text")
        path = tmp_path / "doc.docx"
        document.save(path)
        blocks = DocumentRenderer().render(str(path)).data["blocks"]
        assert {"type": "heading", "level": 1, "text": "Title"} in blocks
        assert {"type": "paragraph", "text": "Body text"} in blocks

    def test_override_renderer(self, tmp_path):
        renderer = DocumentRenderer({DocumentCategory.PDF: lambda p: {"pages": 3}})
        doc = renderer.render(str(tmp_path / "x.pdf"))
        assert doc.data == {"pages": 3}
