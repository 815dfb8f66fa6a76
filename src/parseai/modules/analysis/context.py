"""
Parse AI Analysis - Context Assembler.

Bounds and formats documents, fetched URLs and conversation history into
model-ready text.

Large documents are not head-truncated: three fixed windows (beginning,
middle, end) are kept so conclusions and mid-document tables survive. The
window boundaries are part of the prompt contract and must stay exact.
"""

import logging

from parseai.config import ContextSettings, get_settings
from parseai.modules.analysis.schemas import DocumentInput, HistoryMessage
from parseai.modules.web.extractor import WebContentExtractor, detect_urls, format_for_context

logger = logging.getLogger(__name__)

SECTION_LABELS = ("BEGINNING", "MIDDLE SECTION", "END SECTION")


# =============================================================================
# Documents
# =============================================================================


def extract_key_sections(content: str, settings: ContextSettings | None = None) -> list[tuple[str, str]]:
    """
    Cut a large document into its BEGINNING / MIDDLE SECTION / END SECTION windows.

    The middle window starts section_size // 2 before the midpoint. Callers
    only use this above large_document_threshold, where the three windows
    total at most 3 * section_size characters.
    """
    settings = settings or get_settings().context
    size = settings.section_size
    length = len(content)

    middle_start = max(length // 2 - size // 2, 0)
    return [
        (SECTION_LABELS[0], content[:size]),
        (SECTION_LABELS[1], content[middle_start : middle_start + size]),
        (SECTION_LABELS[2], content[-size:]),
    ]


def build_document_context(
    documents: list[DocumentInput],
    settings: ContextSettings | None = None,
) -> str:
    """Format attached documents, each with a name header and a length disclosure."""
    if not documents:
        return ""

    settings = settings or get_settings().context
    context = "\n\n--- UPLOADED DOCUMENTS ---\n"

    for i, doc in enumerate(documents, start=1):
        content = doc.content or ""
        length = len(content)
        context += f"\n[Document {i}: {doc.name}]\n"

        if length > settings.large_document_threshold:
            context += f"[Document length: {length:,} characters - showing key sections]\n\n"
            for label, window in extract_key_sections(content, settings):
                context += f"--- {label} ---\n{window}\n\n"
        else:
            context += f"[Document length: {length:,} characters - full content]\n\n"
            context += content or "No content extracted"
        context += "\n---\n"

    return context


# =============================================================================
# URLs
# =============================================================================


async def gather_url_context(message: str, extractor: WebContentExtractor | None = None) -> str:
    """Fetch URLs mentioned in the message and format the successful ones."""
    urls = detect_urls(message)
    if not urls:
        return ""

    logger.info(f"[CONTEXT] Detected {len(urls)} URL(s) in message")
    extractor = extractor or WebContentExtractor()
    results = await extractor.fetch_urls(urls)
    return format_for_context(results)


# =============================================================================
# History
# =============================================================================


def build_history(
    previous_messages: list[HistoryMessage],
    newest_first: bool = False,
    limit: int | None = None,
) -> list[dict[str, str]]:
    """
    Chronological window of the last `limit` turns as role/content pairs.

    Roles other than "assistant" are sent as "user"; empty turns are dropped.
    """
    if limit is None:
        limit = get_settings().context.history_limit
    if limit <= 0:
        return []

    messages = list(reversed(previous_messages)) if newest_first else list(previous_messages)
    window = messages[-limit:]

    return [
        {
            "role": "assistant" if m.role == "assistant" else "user",
            "content": m.content,
        }
        for m in window
        if m.content and m.content.strip()
    ]


# =============================================================================
# System Prompt
# =============================================================================


SYSTEM_PROMPT = """You are Parse, an AI research assistant specialized in document analysis, quantitative data extraction, and evidence-based visualization. You help researchers, analysts, and professionals extract actionable insights from complex documents.

## CORE PRINCIPLES

1. **Data-Driven Analysis**: Ground every answer in specific data points, statistics, and evidence from the documents
2. **Quantitative Focus**: Extract and highlight numbers, percentages, ratios, growth rates, and measurable outcomes
3. **Pattern Recognition**: Identify trends, correlations, anomalies, and outliers

## RESPONSE GUIDELINES

- Lead with key findings and quantify them ("sales rose 23.5% from $1.2M to $1.48M", not "sales increased")
- Use tables when several data points are compared
- Explain what the numbers mean and note data quality issues or gaps
- When forecasting, state the method, the assumptions, and a confidence level
- When recommending, rank by priority and estimate impact
- Do not mention file metadata (name, type, size) unless asked

## HANDLING PASTED DATA

When the user pastes CSV, JSON, or tabular data: identify numeric vs categorical fields, compute basic statistics (count, sum, average, min, max), describe trends, and suggest a visualization.

## CHART GENERATION

Choose the chart type from the data:
- **bar**: comparing categories
- **line**: time series and trends
- **area**: cumulative values or volume over time
- **pie**: part-to-whole (at most 6-7 categories)
- **scatter**: correlation between two variables

To propose a chart, add exactly one block at the end of your response:
```chart
{
  "type": "bar|line|pie|area|scatter",
  "title": "Descriptive Chart Title with Key Metric",
  "data": [{"name": "Label", "value": 123}],
  "description": "One-line insight from the visualization"
}
```

For multi-series data use one key per series:
```chart
{
  "type": "bar",
  "title": "Chart Title",
  "data": [{"name": "Category", "Series A": 100, "Series B": 200}],
  "description": "Comparison insight"
}
```

## RESPONSE FORMAT

Use markdown: **bold** for key metrics, tables for comparisons, bullet points for findings, and sensible numeric precision.
"""


def build_system_prompt(document_context: str = "", url_context: str = "") -> str:
    """Fixed instructions followed verbatim by the document and URL context."""
    return f"{SYSTEM_PROMPT}{document_context}{url_context}"
