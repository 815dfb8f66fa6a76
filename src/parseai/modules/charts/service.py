"""
Parse AI Charts - Service.

Infers chart render parameters from arbitrary tabular data. Pure functions of
their input: nothing is persisted here.
"""

import copy
from typing import Any

from parseai.core.values import is_number
from parseai.modules.charts.schemas import (
    ChartBranding,
    ChartConfig,
    ChartOptions,
    ChartType,
)


DEFAULT_COLORS = [
    "#f97066",  # coral
    "#47d4c1",  # teal
    "#3b82f6",  # blue
    "#a3e635",  # lime
    "#f472b6",  # pink
    "#fbbf24",  # amber
    "#a78bfa",  # purple
    "#34d399",  # emerald
]
DEFAULT_BACKGROUND = "dark"
DEFAULT_FONT = "Inter"
DEFAULT_TITLE = "Chart"

TIME_KEYS = {"date", "time", "month", "year", "week", "day"}
PIE_MAX_ROWS = 6

SAMPLE_DATA: dict[str, list[dict[str, Any]]] = {
    "bar": [
        {"name": "New York", "value": 2800000, "category": "A"},
        {"name": "Paris", "value": 2100000, "category": "A"},
        {"name": "Milan", "value": 980000, "category": "B"},
        {"name": "Barcelona", "value": 750000, "category": "B"},
        {"name": "Tokyo", "value": 4200000, "category": "A"},
    ],
    "line": [
        {"month": "Jan", "value": 4000, "previous": 3500},
        {"month": "Feb", "value": 3000, "previous": 2800},
        {"month": "Mar", "value": 5000, "previous": 4200},
        {"month": "Apr", "value": 4500, "previous": 4000},
        {"month": "May", "value": 6000, "previous": 5200},
        {"month": "Jun", "value": 5500, "previous": 5000},
    ],
    "pie": [
        {"name": "Category A", "value": 400},
        {"name": "Category B", "value": 300},
        {"name": "Category C", "value": 200},
        {"name": "Category D", "value": 100},
    ],
    "area": [
        {"date": "Week 1", "desktop": 4000, "mobile": 2400},
        {"date": "Week 2", "desktop": 3000, "mobile": 1398},
        {"date": "Week 3", "desktop": 2000, "mobile": 9800},
        {"date": "Week 4", "desktop": 2780, "mobile": 3908},
        {"date": "Week 5", "desktop": 1890, "mobile": 4800},
        {"date": "Week 6", "desktop": 2390, "mobile": 3800},
    ],
}


def _numeric_keys(row: dict[str, Any]) -> list[str]:
    return [k for k, v in row.items() if is_number(v)]


class ChartsService:
    """Service for chart configuration."""

    def generate_chart_config(
        self,
        chart_type: ChartType,
        data: list[dict[str, Any]],
        options: ChartOptions | None = None,
    ) -> ChartConfig:
        """
        Build a render config from data.

        The x axis is the first string-valued key of the first row (falling
        back to its first key); the y axes are all numeric-valued keys.
        Caller options override the defaults.
        """
        options = options or ChartOptions()
        first_row = data[0] if data else {}
        keys = list(first_row.keys())

        x_axis_key = next((k for k in keys if isinstance(first_row[k], str)), keys[0] if keys else None)

        return ChartConfig(
            type=chart_type,
            title=options.title or DEFAULT_TITLE,
            data=data,
            colors=options.colors or list(DEFAULT_COLORS),
            background=options.background or DEFAULT_BACKGROUND,
            font_family=options.font_family or DEFAULT_FONT,
            show_legend=options.show_legend is not False,
            show_grid=options.show_grid is not False,
            x_axis_key=x_axis_key,
            y_axis_keys=_numeric_keys(first_row),
        )

    def apply_branding(self, config: ChartConfig, branding: ChartBranding) -> ChartConfig:
        """Override colors, font and background with workspace branding."""
        return config.model_copy(
            update={
                "colors": branding.colors or config.colors,
                "font_family": branding.font_family or config.font_family,
                "background": branding.background or config.background,
            }
        )

    def get_sample_data(self, chart_type: ChartType) -> list[dict[str, Any]]:
        """Fixed illustrative dataset for a chart type ([] for scatter)."""
        return copy.deepcopy(SAMPLE_DATA.get(chart_type, []))

    def detect_chart_type(self, data: list[dict[str, Any]]) -> ChartType:
        """Best-guess chart type from the shape of the data."""
        if not data:
            return "bar"

        first_row = data[0]
        numeric_keys = _numeric_keys(first_row)

        if any(str(k).lower() in TIME_KEYS for k in first_row):
            return "area" if len(numeric_keys) > 1 else "line"

        if len(numeric_keys) == 1 and len(data) <= PIE_MAX_ROWS:
            return "pie"

        return "bar"
