"""Parse AI Documents Module - File parsing into normalized text."""

from parseai.modules.documents.parser import extract_data_for_chart, parse_document
from parseai.modules.documents.schemas import DocumentKind, DocumentMetadata, ParsedDocument

__all__ = ["parse_document", "extract_data_for_chart", "DocumentKind", "DocumentMetadata", "ParsedDocument"]
