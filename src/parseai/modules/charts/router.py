"""
Parse AI Charts - Router.

API endpoints for chart configuration.
"""

from fastapi import APIRouter, Depends

from parseai.deps import get_charts_service, require_charts
from parseai.modules.charts.schemas import (
    ChartConfig,
    ChartConfigRequest,
    ChartDetectRequest,
    ChartDetectResponse,
    ChartOptions,
    ChartType,
)
from parseai.modules.charts.service import ChartsService
from parseai.schemas import ErrorResponse

router = APIRouter(
    prefix="/charts",
    tags=["charts"],
    dependencies=[require_charts],
    responses={503: {"model": ErrorResponse}},
)


@router.post("/config", response_model=ChartConfig)
async def generate_config(
    request: ChartConfigRequest,
    service: ChartsService = Depends(get_charts_service),
):
    """
    Generate a chart config.

    Without a type, one is detected from the data; without data, the sample
    dataset for the type is used.
    """
    chart_type = request.type or service.detect_chart_type(request.data or [])
    data = request.data if request.data is not None else service.get_sample_data(chart_type)
    options = ChartOptions.model_validate(request.model_dump(include=set(ChartOptions.model_fields)))

    config = service.generate_chart_config(chart_type, data, options)
    if request.branding:
        config = service.apply_branding(config, request.branding)
    return config


@router.get("/samples/{chart_type}")
async def get_sample(
    chart_type: ChartType,
    service: ChartsService = Depends(get_charts_service),
):
    """Fixed illustrative dataset for a chart type."""
    return {"type": chart_type, "data": service.get_sample_data(chart_type)}


@router.post("/detect", response_model=ChartDetectResponse)
async def detect(
    request: ChartDetectRequest,
    service: ChartsService = Depends(get_charts_service),
):
    """Best-guess chart type for a dataset."""
    return ChartDetectResponse(type=service.detect_chart_type(request.data))
