"""
Parse AI Analysis - Heuristic Responder.

Deterministic, keyword-driven fallback used whenever no model is reachable.

Policy is an ordered list of (predicate, handler) rules evaluated top to
bottom; the first predicate that matches answers the message:

1. pasted CSV/JSON data      -> chart built from that data
2. URLs in the message       -> list the URLs, explain fetching needs a model
3. chart keywords            -> fixed sample chart (demo mode)
4. no documents attached     -> onboarding message
5. summary keywords          -> extractive pseudo-summary of the first document
6. anything else             -> capability list naming the documents

No randomness: identical inputs always give identical output.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable

from parseai.core.values import is_number, to_float
from parseai.modules.analysis.schemas import AnalysisContext, AnalysisResponse, SniffResult
from parseai.modules.analysis.sniffer import sniff_tabular_data
from parseai.modules.charts.schemas import ChartSuggestion
from parseai.modules.web.extractor import detect_urls

CHART_KEYWORDS = ("chart", "graph", "plot", "visualize", "visualization", "show me")
SUMMARY_KEYWORDS = (
    "summarize",
    "summary",
    "summarise",
    "overview",
    "main points",
    "key points",
    "what is this about",
    "tell me about",
)
IMPORTANCE_INDICATORS = (
    "conclude",
    "result",
    "finding",
    "show",
    "demonstrate",
    "significant",
    "important",
    "key",
    "main",
    "primary",
    "total",
    "percent",
    "%",
    "increase",
    "decrease",
    "growth",
)

MAX_CHART_ROWS = 20
MIN_SENTENCE_LENGTH = 30
MAX_SENTENCE_LENGTH = 500
MIN_SUMMARY_CONTENT = 100
MAX_SUMMARY_SENTENCES = 5
KEY_POINT_PREVIEW = 150

SENTENCE_SPLIT = re.compile(r"[.!?]+")
HEADER_LIKE = re.compile(r"^[A-Z\s]+$")

DEMO_NOTE = "**Note:** Running in demo mode. Add `GEMINI_API_KEY` to enable full AI analysis."

SAMPLE_PIE = [
    {"name": "Category A", "value": 4000},
    {"name": "Category B", "value": 3000},
    {"name": "Category C", "value": 2000},
    {"name": "Category D", "value": 1500},
    {"name": "Category E", "value": 1000},
]
SAMPLE_TIME_SERIES = [
    {"name": "Jan", "value": 4000},
    {"name": "Feb", "value": 3000},
    {"name": "Mar", "value": 5000},
    {"name": "Apr", "value": 4500},
    {"name": "May", "value": 6000},
    {"name": "Jun", "value": 5500},
]
SAMPLE_CATEGORIES = [
    {"name": "New York", "value": 2800000, "secondary": 1500000},
    {"name": "London", "value": 3100000, "secondary": 1800000},
    {"name": "Tokyo", "value": 4200000, "secondary": 2800000},
    {"name": "Paris", "value": 2100000, "secondary": 1200000},
    {"name": "Berlin", "value": 1600000, "secondary": 950000},
]

ONBOARDING_TEXT = """Hello! I'm Parse, your AI research assistant.

**Note:** I'm running in demo mode. To enable full AI capabilities, add your `GEMINI_API_KEY` to the backend `.env` file.

To get started:
1. **Upload documents** - PDF, CSV, JSON or text files
2. **Paste data** - Paste CSV, JSON, or tabular data directly
3. **Ask questions** - I'll analyze your data
4. **Request charts** - Say "create a bar chart" or "show me a pie chart"

**Example - paste data like this:**
```
Month,Sales,Profit
Jan,4000,1200
Feb,3000,900
Mar,5000,1800
```

What would you like to explore?"""


@dataclass
class Turn:
    """Everything the rules look at, computed once per message."""

    message: str
    context: AnalysisContext
    lower: str = ""
    sniff: SniffResult = field(default_factory=SniffResult)
    urls: list[str] = field(default_factory=list)

    @classmethod
    def from_message(cls, message: str, context: AnalysisContext) -> "Turn":
        return cls(
            message=message,
            context=context,
            lower=message.lower(),
            sniff=sniff_tabular_data(message),
            urls=detect_urls(message),
        )

    def mentions(self, keywords: tuple[str, ...]) -> bool:
        return any(keyword in self.lower for keyword in keywords)


def chart_type_from_keywords(lower_message: str) -> str:
    """line / pie / area when named in the message, else bar."""
    if "line" in lower_message:
        return "line"
    if "pie" in lower_message:
        return "pie"
    if "area" in lower_message:
        return "area"
    return "bar"


# =============================================================================
# Chart from pasted data
# =============================================================================


def normalize_chart_rows(parsed_data: list[Any]) -> tuple[list[dict[str, Any]], list[str]]:
    """
    Reshape pasted records into {name, <series>...} rows.

    The name is the first string field (or the first field); series are the
    numeric fields. A lone series is also exposed as "value". Without numeric
    fields the first non-name field is coerced to a number (0 on failure).

    Returns:
        (chart rows capped at MAX_CHART_ROWS, field names of the first record)
    """
    records = [item if isinstance(item, dict) else {"value": item} for item in parsed_data]
    first = records[0]
    keys = list(first.keys())
    if not keys:
        return [{"name": "Item"} for _ in records[:MAX_CHART_ROWS]], keys

    name_key = next((k for k in keys if isinstance(first[k], str)), keys[0])
    value_keys = [k for k in keys if is_number(first[k])]
    other_key = next((k for k in keys if k != name_key), None)

    rows = []
    for item in records[:MAX_CHART_ROWS]:
        label = item.get(name_key)
        row: dict[str, Any] = {"name": str(label) if label not in (None, "") else "Item"}
        if value_keys:
            for key in value_keys:
                row[key] = item.get(key)
            if len(value_keys) == 1:
                row["value"] = item.get(value_keys[0])
        elif other_key is not None:
            row["value"] = to_float(item.get(other_key))
        rows.append(row)

    return rows, keys


def respond_with_data_chart(turn: Turn) -> AnalysisResponse:
    parsed = turn.sniff.parsed_data or []
    data_type = (turn.sniff.data_type or "").upper()
    chart_type = chart_type_from_keywords(turn.lower)
    rows, keys = normalize_chart_rows(parsed)
    fields = ", ".join(str(k) for k in keys)

    intro = (
        f"I've created a {chart_type} chart from your data:"
        if turn.mentions(CHART_KEYWORDS)
        else "Here's a visualization of your data:"
    )
    text = f"""I've detected and analyzed your pasted data!

**Data Summary:**
- Format: {data_type}
- Rows: {len(parsed)}
- Fields: {fields}

{intro}

{DEMO_NOTE}"""

    return AnalysisResponse(
        text=text,
        chart=ChartSuggestion(
            type=chart_type,
            title="Data Visualization",
            data=rows,
            description=f"Detected {len(parsed)} rows of {data_type} data with fields: {fields}",
        ),
    )


# =============================================================================
# URLs, samples, onboarding
# =============================================================================


def respond_with_url_notice(turn: Turn) -> AnalysisResponse:
    listing = "\n".join(f"- {url}" for url in turn.urls)
    text = f"""I detected {len(turn.urls)} URL(s) in your message:
{listing}

**Note:** Running in demo mode. Add `GEMINI_API_KEY` to enable full URL analysis capabilities including:
- Full article content extraction
- Key insights and summary
- Data extraction from web pages

With the API configured, I can fetch and analyze the content from these URLs automatically."""
    return AnalysisResponse(text=text)


def sample_chart_data(chart_type: str) -> list[dict[str, Any]]:
    if chart_type == "pie":
        data = SAMPLE_PIE
    elif chart_type in ("line", "area"):
        data = SAMPLE_TIME_SERIES
    else:
        data = SAMPLE_CATEGORIES
    return [dict(row) for row in data]


def respond_with_sample_chart(turn: Turn) -> AnalysisResponse:
    chart_type = chart_type_from_keywords(turn.lower)
    text = f"""I've created a {chart_type} chart based on the available data.

**Note:** This is running in demo mode without a language model. To enable real AI analysis, add your `GEMINI_API_KEY` to the backend `.env` file.

**Sample Data Visualization:**
The chart below shows sample data for demonstration purposes."""

    return AnalysisResponse(
        text=text,
        chart=ChartSuggestion(
            type=chart_type,
            title=f"Sample {chart_type.capitalize()} Chart",
            data=sample_chart_data(chart_type),
            description=f"Sample {chart_type} chart for demonstration",
        ),
    )


def respond_with_onboarding(turn: Turn) -> AnalysisResponse:
    return AnalysisResponse(text=ONBOARDING_TEXT)


# =============================================================================
# Extractive summary
# =============================================================================


def candidate_sentences(content: str) -> list[str]:
    """Sentences of reasonable length that are not all-caps headers."""
    sentences = (s.strip() for s in SENTENCE_SPLIT.split(content))
    return [
        s
        for s in sentences
        if MIN_SENTENCE_LENGTH < len(s) < MAX_SENTENCE_LENGTH and not HEADER_LIKE.match(s)
    ]


def select_summary_sentences(content: str) -> tuple[list[str], list[str]]:
    """
    Pick summary sentences from document text.

    Returns:
        (summary: first two sentences + up to three "important" ones,
         de-duplicated, at most five; important: the important ones)
    """
    sentences = candidate_sentences(content)
    important = [
        s for s in sentences if any(indicator in s.lower() for indicator in IMPORTANCE_INDICATORS)
    ][:3]
    opening = sentences[:2]
    summary = list(dict.fromkeys(opening + important))[:MAX_SUMMARY_SENTENCES]
    return summary, important


def respond_with_summary(turn: Turn) -> AnalysisResponse:
    content = turn.context.documents[0].content or ""

    if len(content) > MIN_SUMMARY_CONTENT:
        summary, important = select_summary_sentences(content)
        if summary:
            if important:
                key_points = "\n".join(
                    f"- {s[:KEY_POINT_PREVIEW]}{'...' if len(s) > KEY_POINT_PREVIEW else ''}"
                    for s in important
                )
            else:
                key_points = "- Content analysis requires AI capabilities for deeper insights."

            return AnalysisResponse(
                text=f"""**Summary:**

{'. '.join(summary)}.

**Key Points Identified:**
{key_points}

**Note:** Running in demo mode. Add `GEMINI_API_KEY` for comprehensive AI-powered analysis with deeper insights, pattern recognition, and data extraction."""
            )

    return AnalysisResponse(
        text="""This document has been uploaded but contains limited extractable text content.

**Note:** Running in demo mode. Add `GEMINI_API_KEY` to enable full AI analysis capabilities including:
- Deep content analysis and summarization
- Key insight extraction
- Pattern and trend identification
- Data visualization suggestions"""
    )


def respond_with_capabilities(turn: Turn) -> AnalysisResponse:
    documents = turn.context.documents
    names = "\n".join(f"- {doc.name}" for doc in documents)
    return AnalysisResponse(
        text=f"""I have {len(documents)} document(s) ready for analysis:
{names}

{DEMO_NOTE}

I can help you:
- **Summarize** - "Summarize the main findings"
- **Visualize** - "Create a bar chart of the data"
- **Extract** - "What are the key metrics?"
- **Compare** - "Compare the values across categories"

What would you like to know?"""
    )


# =============================================================================
# Responder
# =============================================================================


Rule = tuple[str, Callable[[Turn], bool], Callable[[Turn], AnalysisResponse]]

RULES: list[Rule] = [
    ("pasted_data", lambda t: t.sniff.has_data and bool(t.sniff.parsed_data), respond_with_data_chart),
    ("urls", lambda t: bool(t.urls), respond_with_url_notice),
    ("chart_request", lambda t: t.mentions(CHART_KEYWORDS), respond_with_sample_chart),
    ("no_documents", lambda t: not t.context.documents, respond_with_onboarding),
    ("summary", lambda t: t.mentions(SUMMARY_KEYWORDS), respond_with_summary),
    ("capabilities", lambda t: True, respond_with_capabilities),
]


class HeuristicResponder:
    """Rule-based stand-in for the language model."""

    def __init__(self, rules: list[Rule] | None = None):
        self.rules = rules or RULES

    def match(self, turn: Turn) -> str:
        """Name of the rule that answers this turn."""
        for name, predicate, _ in self.rules:
            if predicate(turn):
                return name
        raise LookupError("no heuristic rule matched")

    def respond(self, user_message: str, context: AnalysisContext) -> AnalysisResponse:
        turn = Turn.from_message(user_message, context)
        for _, predicate, handler in self.rules:
            if predicate(turn):
                return handler(turn)
        raise LookupError("no heuristic rule matched")
