"""
Parse AI Web - Schemas.

Pydantic models for URL fetching and content extraction.
"""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from parseai.schemas import CamelModel


FetchErrorCode = Literal[
    "INVALID_URL",
    "TIMEOUT",
    "HTTP_ERROR",
    "UNSUPPORTED_CONTENT_TYPE",
    "FETCH_FAILED",
]


class FetchedContent(CamelModel):
    """Readable text and metadata extracted from one URL.

    Failures are values, not exceptions: success=False always carries an
    empty content string and a human-readable error.
    """

    url: str
    title: str = ""
    content: str = ""
    description: str | None = None
    author: str | None = None
    published_date: str | None = None
    site_name: str | None = None
    word_count: int = 0
    success: bool
    error: str | None = None
    error_code: FetchErrorCode | None = None

    @model_validator(mode="after")
    def _failure_has_no_content(self) -> "FetchedContent":
        if not self.success:
            if self.content:
                raise ValueError("failed fetch must not carry content")
            if not self.error:
                raise ValueError("failed fetch must carry an error message")
        return self

    @classmethod
    def failure(cls, url: str, code: FetchErrorCode, message: str) -> "FetchedContent":
        return cls(url=url, success=False, error=message, error_code=code)


# =============================================================================
# Request / Response Schemas
# =============================================================================


class FetchRequest(BaseModel):
    """Fetch one or more URLs (only the first unique ones are fetched)."""

    urls: list[str] = Field(..., min_length=1)


class FetchResponse(BaseModel):
    """Fetch results in request order."""

    results: list[FetchedContent]
