"""
Parse AI Documents - Parser.

Turns an uploaded file into a ParsedDocument. Dispatch is a closed mapping
from DocumentKind to a handler; unknown extensions are read as plain text.

The parser never raises: every failure degrades to raw content or a fixed
placeholder so that an upload is never blocked by an unparsable file.
"""

import csv
import io
import json
import logging
import time
from pathlib import Path
from typing import Callable

import pdfplumber

from parseai.core.values import coerce_number
from parseai.modules.documents.schemas import DocumentKind, DocumentMetadata, ParsedDocument
from parseai.observability import get_metrics_store

logger = logging.getLogger(__name__)

PREVIEW_ROWS = 10

PDF_FAILED_CONTENT = (
    "PDF content extraction failed. The document has been uploaded but text content is not available."
)
UNREADABLE_CONTENT = "Document content could not be read."

_EXTENSION_KINDS: dict[str, DocumentKind] = {
    ".csv": DocumentKind.CSV,
    ".json": DocumentKind.JSON,
    ".pdf": DocumentKind.PDF,
    ".txt": DocumentKind.TEXT,
}

# Only consulted when the file name carries no extension
_MIME_KINDS: dict[str, DocumentKind] = {
    "text/csv": DocumentKind.CSV,
    "application/csv": DocumentKind.CSV,
    "text/comma-separated-values": DocumentKind.CSV,
    "application/json": DocumentKind.JSON,
    "application/pdf": DocumentKind.PDF,
    "application/x-pdf": DocumentKind.PDF,
    "text/plain": DocumentKind.TEXT,
}


class CsvRecordLengthError(ValueError):
    """A CSV record has a different number of fields than the header."""


def kind_for(file_path: str | Path, mime_type: str | None = None) -> DocumentKind:
    """Resolve the document kind from the extension (or MIME type when there is none)."""
    ext = Path(file_path).suffix.lower()
    if ext:
        return _EXTENSION_KINDS.get(ext, DocumentKind.TEXT)
    if mime_type:
        return _MIME_KINDS.get(mime_type.split(";")[0].strip().lower(), DocumentKind.TEXT)
    return DocumentKind.TEXT


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


# =============================================================================
# Per-format handlers
# =============================================================================


def _parse_csv(path: Path) -> ParsedDocument:
    try:
        content = _read_text(path)
        rows = [
            [cell.strip() for cell in row]
            for row in csv.reader(io.StringIO(content))
            if row and any(cell.strip() for cell in row)
        ]

        headers = rows[0] if rows else []
        records = []
        for line_no, row in enumerate(rows[1:], start=2):
            if len(row) != len(headers):
                raise CsvRecordLengthError(
                    f"record {line_no} has {len(row)} fields, expected {len(headers)}"
                )
            records.append(dict(zip(headers, row)))

        return ParsedDocument(
            content=content,
            metadata=DocumentMetadata(
                type="csv",
                headers=headers,
                row_count=len(records),
                columns=len(headers),
                preview=records[:PREVIEW_ROWS],
            ),
        )
    except (csv.Error, CsvRecordLengthError, UnicodeError) as e:
        logger.warning(f"[DOCS] Error parsing CSV {path.name}: {e}")
        get_metrics_store().record_stage_error("parse_document", "CSV_PARSE_FAILED")
        return ParsedDocument(content=_read_text(path), metadata=DocumentMetadata(type="csv"))


def _parse_json(path: Path) -> ParsedDocument:
    content = _read_text(path)
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning(f"[DOCS] Error parsing JSON {path.name}: {e}")
        get_metrics_store().record_stage_error("parse_document", "JSON_PARSE_FAILED")
        return ParsedDocument(content=content, metadata=DocumentMetadata(type="json"))

    if isinstance(data, list):
        preview = data[:PREVIEW_ROWS]
        row_count = len(data)
    elif isinstance(data, dict):
        preview = [data]
        row_count = 1
    else:
        preview = []
        row_count = 1

    return ParsedDocument(
        content=content,
        metadata=DocumentMetadata(type="json", row_count=row_count, preview=preview),
    )


def _parse_pdf(path: Path) -> ParsedDocument:
    try:
        with pdfplumber.open(path) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
            page_count = len(pdf.pages)
    except Exception as e:
        logger.error(f"[DOCS] Error parsing PDF {path.name}: {e}")
        get_metrics_store().record_stage_error("parse_document", "PDF_EXTRACTION_FAILED")
        return ParsedDocument(content=PDF_FAILED_CONTENT, metadata=DocumentMetadata(type="pdf"))

    return ParsedDocument(
        content="\n".join(pages),
        metadata=DocumentMetadata(type="pdf", row_count=page_count),
    )


def _parse_text(path: Path) -> ParsedDocument:
    content = _read_text(path)
    return ParsedDocument(
        content=content,
        metadata=DocumentMetadata(type="text", row_count=len(content.split("\n"))),
    )


_PARSERS: dict[DocumentKind, Callable[[Path], ParsedDocument]] = {
    DocumentKind.CSV: _parse_csv,
    DocumentKind.JSON: _parse_json,
    DocumentKind.PDF: _parse_pdf,
    DocumentKind.TEXT: _parse_text,
}


# =============================================================================
# Public API
# =============================================================================


def parse_document(file_path: str | Path, mime_type: str | None = None) -> ParsedDocument:
    """
    Parse an uploaded file into normalized text and metadata.

    Args:
        file_path: Path to the stored upload
        mime_type: Declared MIME type (used only when the path has no extension)

    Returns:
        ParsedDocument. Never raises.
    """
    path = Path(file_path)
    kind = kind_for(path, mime_type)
    started = time.perf_counter()

    logger.info(f"[DOCS] Parsing {path.name} as {kind.value}")
    try:
        parsed = _PARSERS[kind](path)
    except OSError as e:
        logger.error(f"[DOCS] Failed to read {path}: {e}")
        get_metrics_store().record_stage_error("parse_document", "READ_FAILED")
        parsed = ParsedDocument(content=UNREADABLE_CONTENT, metadata=DocumentMetadata(type=kind.value))

    get_metrics_store().record_stage_latency("parse_document", (time.perf_counter() - started) * 1000)
    return parsed


def extract_data_for_chart(content: str, metadata: DocumentMetadata | dict | None) -> list[dict] | None:
    """
    Pull chartable rows out of a parsed document.

    Uses the stored preview when there is one, otherwise reads the content as
    comma-separated lines (header + first 10 rows).
    """
    preview = metadata.get("preview") if isinstance(metadata, dict) else getattr(metadata, "preview", None)
    if isinstance(preview, list) and preview:
        return preview

    lines = [line for line in (content or "").split("\n") if line.strip()]
    if len(lines) < 2:
        return None

    headers = [h.strip() for h in lines[0].split(",")]
    data = []
    for line in lines[1 : PREVIEW_ROWS + 1]:
        values = [v.strip() for v in line.split(",")]
        row = {}
        for i, header in enumerate(headers):
            value = values[i] if i < len(values) else None
            row[header] = coerce_number(value) if value is not None else None
        data.append(row)
    return data
