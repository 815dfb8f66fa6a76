"""
Parse AI Charts - Schemas.

Pydantic models for chart proposals and chart configuration.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from parseai.schemas import CamelModel


ChartType = Literal["bar", "line", "pie", "area", "scatter"]
ChartBackground = Literal["light", "dark", "transparent"]

CHART_TYPES: tuple[str, ...] = ("bar", "line", "pie", "area", "scatter")


# =============================================================================
# Chart Suggestion
# =============================================================================


class ChartSuggestion(BaseModel):
    """A typed proposal for a visualization (model-emitted or heuristic)."""

    type: ChartType
    title: str = "Chart"
    data: list[dict[str, Any]] = Field(default_factory=list)
    description: str = ""


# =============================================================================
# Chart Config
# =============================================================================


class ChartOptions(CamelModel):
    """Caller overrides merged over the chart defaults."""

    title: str | None = None
    colors: list[str] | None = None
    background: ChartBackground | None = None
    font_family: str | None = None
    show_legend: bool | None = None
    show_grid: bool | None = None


class ChartBranding(CamelModel):
    """Workspace branding applied on top of a generated config."""

    colors: list[str] | None = None
    font_family: str | None = None
    background: ChartBackground | None = None


class ChartConfig(CamelModel):
    """Render parameters derived from chart data (regenerable, never stored verbatim)."""

    type: ChartType
    title: str
    data: list[dict[str, Any]]
    colors: list[str] | None = None
    background: ChartBackground | None = None
    font_family: str | None = None
    show_legend: bool | None = None
    show_grid: bool | None = None
    x_axis_key: str | None = None
    y_axis_keys: list[str] | None = None


# =============================================================================
# Request Schemas
# =============================================================================


class ChartConfigRequest(ChartOptions):
    """Generate a chart config. Missing type is detected, missing data uses the sample."""

    type: ChartType | None = None
    data: list[dict[str, Any]] | None = None
    branding: ChartBranding | None = None


class ChartDetectRequest(BaseModel):
    """Detect the best chart type for a dataset."""

    data: list[dict[str, Any]] = Field(default_factory=list)


class ChartDetectResponse(BaseModel):
    """Detected chart type."""

    type: ChartType
