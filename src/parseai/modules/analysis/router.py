"""
Parse AI Analysis - Router.

API endpoint for conversational analysis.
"""

from fastapi import APIRouter, Depends

from parseai.deps import get_analysis_engine, require_analysis
from parseai.modules.analysis.engine import AnalysisEngine
from parseai.modules.analysis.schemas import AnalysisRequest, AnalysisResponse
from parseai.schemas import ErrorResponse

router = APIRouter(
    prefix="/analysis",
    tags=["analysis"],
    dependencies=[require_analysis],
    responses={503: {"model": ErrorResponse}},
)


@router.post("/respond", response_model=AnalysisResponse)
async def respond(
    request: AnalysisRequest,
    engine: AnalysisEngine = Depends(get_analysis_engine),
):
    """
    Answer a chat message about the attached documents.

    Uses the model when configured, the heuristic responder otherwise.
    The caller stores the message and any chart it chooses to keep.
    """
    return await engine.generate_response(request.message, request, newest_first=request.newest_first)
