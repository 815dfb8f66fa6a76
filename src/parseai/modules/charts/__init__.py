"""Parse AI Charts Module - Chart config inference."""

from parseai.modules.charts.schemas import ChartConfig, ChartSuggestion
from parseai.modules.charts.service import ChartsService

__all__ = ["ChartsService", "ChartConfig", "ChartSuggestion"]
