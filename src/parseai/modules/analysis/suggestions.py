"""
Parse AI Analysis - Chart Suggestion Extractor.

Pulls the first ```chart fenced block out of model text. Only that block is
removed; a block that fails to validate leaves the text untouched.
"""

import json
import logging
import re

from pydantic import ValidationError

from parseai.modules.charts.schemas import ChartSuggestion

logger = logging.getLogger(__name__)

CHART_BLOCK_PATTERN = re.compile(r"```chart\s*([\s\S]*?)\s*```")


def extract_chart_suggestion(text: str) -> tuple[str, ChartSuggestion | None]:
    """
    Split model output into display text and an optional chart.

    Returns:
        (text without the chart block, chart) on success,
        (original text, None) when there is no block or it is malformed
    """
    match = CHART_BLOCK_PATTERN.search(text)
    if not match:
        return text, None

    try:
        chart = ChartSuggestion.model_validate(json.loads(match.group(1)))
    except (json.JSONDecodeError, RecursionError, ValidationError) as e:
        logger.warning(f"[CHART] Discarding malformed chart block: {e}")
        return text, None

    cleaned = (text[: match.start()] + text[match.end() :]).strip()
    return cleaned, chart
