"""
Parse AI Analysis - Tabular Data Sniffer.

Distinguishes pasted CSV/JSON from ordinary prose in a chat message.
Strategies are tried in order (JSON array, JSON object, delimited text);
malformed JSON simply falls through to the next one.
"""

import json
import re

from parseai.core.values import coerce_number
from parseai.modules.analysis.schemas import SniffResult

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*?\]")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*?\}")

# Rows may differ from the header by this many fields (short trailing field)
FIELD_COUNT_TOLERANCE = 1


def _sniff_json_array(text: str) -> list | None:
    match = JSON_ARRAY_PATTERN.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except (json.JSONDecodeError, RecursionError):
        return None
    if isinstance(parsed, list) and parsed:
        return parsed
    return None


def _sniff_json_object(text: str) -> list | None:
    match = JSON_OBJECT_PATTERN.search(text)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except (json.JSONDecodeError, RecursionError):
        return None
    if isinstance(parsed, dict):
        return [parsed]
    return None


def _sniff_delimited(text: str) -> list[dict] | None:
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) < 2:
        return None

    delimiter = "\t" if "\t" in lines[0] else ","
    header_fields = len(lines[0].split(delimiter))
    if header_fields < 2:
        return None

    if any(abs(len(line.split(delimiter)) - header_fields) > FIELD_COUNT_TOLERANCE for line in lines):
        return None

    headers = [h.strip() for h in lines[0].split(delimiter)]
    rows = []
    for line in lines[1:]:
        values = [v.strip() for v in line.split(delimiter)]
        rows.append(
            {
                header: coerce_number(values[i]) if i < len(values) else None
                for i, header in enumerate(headers)
            }
        )
    return rows or None


def sniff_tabular_data(text: str) -> SniffResult:
    """
    Detect pasted tabular data in a message.

    Returns:
        SniffResult with has_data=False when nothing tabular was found
    """
    text = text or ""

    parsed = _sniff_json_array(text)
    if parsed is not None:
        return SniffResult(has_data=True, data_type="json", parsed_data=parsed)

    parsed = _sniff_json_object(text)
    if parsed is not None:
        return SniffResult(has_data=True, data_type="json", parsed_data=parsed)

    rows = _sniff_delimited(text)
    if rows is not None:
        return SniffResult(has_data=True, data_type="csv", parsed_data=rows)

    return SniffResult()
