"""
Parse AI Documents - Schemas.

Pydantic models for document parsing.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from parseai.schemas import CamelModel


class DocumentKind(str, Enum):
    """Closed set of document formats the parser understands."""

    CSV = "csv"
    JSON = "json"
    PDF = "pdf"
    TEXT = "text"


# =============================================================================
# Parsed Document
# =============================================================================


class DocumentMetadata(CamelModel):
    """Format-specific metadata extracted during parsing."""

    model_config = ConfigDict(frozen=True)

    type: str
    headers: list[str] | None = None
    row_count: int | None = None
    columns: int | None = None
    preview: list[Any] | None = None


class ParsedDocument(CamelModel):
    """Normalized text plus metadata for one uploaded file."""

    model_config = ConfigDict(frozen=True)

    content: str
    metadata: DocumentMetadata


# =============================================================================
# Request / Response Schemas
# =============================================================================


class DocumentAnalyzeRequest(BaseModel):
    """Request a short upload-time analysis of already parsed content."""

    name: str = Field(..., min_length=1)
    content: str = ""


class DocumentAnalyzeResponse(BaseModel):
    """Short analysis text."""

    analysis: str
