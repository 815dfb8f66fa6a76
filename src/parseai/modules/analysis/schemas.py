"""
Parse AI Analysis - Schemas.

Pydantic models for conversational analysis.
"""

from typing import Any, Literal

from pydantic import Field

from parseai.modules.charts.schemas import ChartSuggestion
from parseai.schemas import CamelModel


class DocumentInput(CamelModel):
    """A document attached to the conversation."""

    name: str
    content: str = ""
    type: str = "text"


class HistoryMessage(CamelModel):
    """One prior chat turn."""

    role: str
    content: str


class AnalysisContext(CamelModel):
    """Transient input to the analysis engine, built fresh per message."""

    documents: list[DocumentInput] = Field(default_factory=list)
    previous_messages: list[HistoryMessage] = Field(default_factory=list)


class AnalysisResponse(CamelModel):
    """Assistant reply plus an optional chart proposal."""

    text: str
    chart: ChartSuggestion | None = None


class SniffResult(CamelModel):
    """Outcome of looking for pasted CSV/JSON in a message."""

    has_data: bool = False
    data_type: Literal["json", "csv"] | None = None
    parsed_data: list[Any] | None = None


# =============================================================================
# Request Schemas
# =============================================================================


class AnalysisRequest(AnalysisContext):
    """Chat message plus the context the caller has already authorized."""

    message: str = Field(..., min_length=1)
    newest_first: bool = Field(
        default=False,
        description="Set when previousMessages are ordered newest first",
    )
