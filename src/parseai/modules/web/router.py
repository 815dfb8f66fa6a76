"""
Parse AI Web - Router.

API endpoint for fetching URL content.
"""

from fastapi import APIRouter, Depends

from parseai.deps import get_extractor, require_web
from parseai.exceptions import ValidationException
from parseai.modules.web.extractor import WebContentExtractor
from parseai.modules.web.schemas import FetchRequest, FetchResponse
from parseai.schemas import ErrorResponse

router = APIRouter(
    prefix="/web",
    tags=["web"],
    dependencies=[require_web],
    responses={503: {"model": ErrorResponse}},
)


@router.post("/fetch", response_model=FetchResponse, responses={400: {"model": ErrorResponse}})
async def fetch(
    request: FetchRequest,
    extractor: WebContentExtractor = Depends(get_extractor),
):
    """
    Fetch the first unique URLs and extract readable content.

    Per-URL failures are reported in the results, not as HTTP errors.
    """
    urls = [url.strip() for url in request.urls if url.strip()]
    if not urls:
        raise ValidationException("At least one non-empty URL is required", errors=[{"field": "urls"}])

    results = await extractor.fetch_urls(urls)
    return FetchResponse(results=results)
