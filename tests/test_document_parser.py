"""
Tests for document parsing.

Every format either yields structured metadata or degrades to raw content;
parse_document never raises.
"""

import json

import pytest

from parseai.modules.documents import parser
from parseai.modules.documents.parser import (
    PDF_FAILED_CONTENT,
    UNREADABLE_CONTENT,
    extract_data_for_chart,
    kind_for,
    parse_document,
)
from parseai.modules.documents.schemas import DocumentKind, DocumentMetadata
from parseai.observability import get_metrics_store


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics_store().reset()
    yield
    get_metrics_store().reset()


class TestKindDispatch:
    """Extension / MIME dispatch."""

    def test_known_extensions(self):
        assert kind_for("sales.CSV") == DocumentKind.CSV
        assert kind_for("data.json") == DocumentKind.JSON
        assert kind_for("report.pdf") == DocumentKind.PDF
        assert kind_for("notes.txt") == DocumentKind.TEXT

    def test_unknown_extension_is_text(self):
        assert kind_for("README.md") == DocumentKind.TEXT
        assert kind_for("export.xlsx", "application/pdf") == DocumentKind.TEXT

    def test_mime_used_without_extension(self):
        assert kind_for("upload", "application/json; charset=utf-8") == DocumentKind.JSON
        assert kind_for("upload") == DocumentKind.TEXT


class TestCsv:
    """CSV parsing."""

    def test_headers_rows_and_preview(self, tmp_path):
        path = tmp_path / "sales.csv"
        lines = ["month, revenue"] + [f"m{i}, {i * 10}" for i in range(12)] + ["", ""]
        path.write_text("\n".join(lines), encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.metadata.type == "csv"
        assert parsed.metadata.headers == ["month", "revenue"]
        assert parsed.metadata.columns == 2
        assert parsed.metadata.row_count == 12
        assert len(parsed.metadata.preview) == 10
        assert parsed.metadata.preview[0] == {"month": "m0", "revenue": "0"}
        assert parsed.content == path.read_text(encoding="utf-8")

    def test_ragged_csv_falls_back_to_raw_content(self, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_text("a,b,c\n1,2\n3,4,5,6\n", encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.content == "a,b,c\n1,2\n3,4,5,6\n"
        assert parsed.metadata.type == "csv"
        assert parsed.metadata.headers is None
        assert parsed.metadata.row_count is None

        errors = get_metrics_store().get_summary()["stages"]["parse_document"]["errors"]
        assert errors["CSV_PARSE_FAILED"] == 1


class TestJson:
    """JSON parsing."""

    def test_array(self, tmp_path):
        rows = [{"id": i} for i in range(15)]
        path = tmp_path / "rows.json"
        path.write_text(json.dumps(rows), encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.metadata.type == "json"
        assert parsed.metadata.row_count == 15
        assert parsed.metadata.preview == rows[:10]

    def test_object(self, tmp_path):
        path = tmp_path / "one.json"
        path.write_text('{"name": "widget", "price": 3}', encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.metadata.row_count == 1
        assert parsed.metadata.preview == [{"name": "widget", "price": 3}]

    def test_deeply_nested_json_keeps_raw_content(self, tmp_path):
        content = "[" * 100_000 + "]" * 100_000
        path = tmp_path / "deep.json"
        path.write_text(content, encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.content == content
        assert parsed.metadata == DocumentMetadata(type="json")

    def test_invalid_json_keeps_raw_content(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.content == "{not json"
        assert parsed.metadata == DocumentMetadata(type="json")


class TestPdf:
    """PDF parsing."""

    def test_extraction_failure_returns_placeholder(self, tmp_path, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("damaged xref table")

        monkeypatch.setattr(parser.pdfplumber, "open", boom)
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF-1.4 garbage")

        parsed = parse_document(path)

        assert parsed.content == PDF_FAILED_CONTENT
        assert parsed.metadata.type == "pdf"

    def test_pages_joined(self, tmp_path, monkeypatch):
        class FakePage:
            def __init__(self, text):
                self._text = text

            def extract_text(self):
                return self._text

        class FakePdf:
            pages = [FakePage("page one"), FakePage(None), FakePage("page three")]

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

        monkeypatch.setattr(parser.pdfplumber, "open", lambda path: FakePdf())
        path = tmp_path / "doc.pdf"
        path.write_bytes(b"%PDF-1.4")

        parsed = parse_document(path)

        assert parsed.content == "page one\n\npage three"
        assert parsed.metadata.row_count == 3


class TestText:
    """Plain text and unknown formats."""

    def test_txt_line_count(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("one\ntwo\nthree", encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.content == "one\ntwo\nthree"
        assert parsed.metadata.type == "text"
        assert parsed.metadata.row_count == 3

    def test_markdown_read_as_text(self, tmp_path):
        path = tmp_path / "README.md"
        path.write_text("# Title\n\nBody", encoding="utf-8")

        parsed = parse_document(path)

        assert parsed.content == "# Title\n\nBody"
        assert parsed.metadata.type == "text"

    def test_missing_file_does_not_raise(self, tmp_path):
        parsed = parse_document(tmp_path / "gone.csv")

        assert parsed.content == UNREADABLE_CONTENT
        assert parsed.metadata.type == "csv"


class TestExtractDataForChart:
    """Chartable rows from parsed documents."""

    def test_prefers_preview(self):
        metadata = DocumentMetadata(type="csv", preview=[{"a": "1"}])
        assert extract_data_for_chart("ignored", metadata) == [{"a": "1"}]

    def test_reads_comma_lines_when_no_preview(self):
        content = "region,sales\nEU,10\nUS,2.5\nAPAC"
        data = extract_data_for_chart(content, {"type": "text"})

        assert data == [
            {"region": "EU", "sales": 10},
            {"region": "US", "sales": 2.5},
            {"region": "APAC", "sales": None},
        ]

    def test_single_line_has_no_data(self):
        assert extract_data_for_chart("just a header", None) is None
