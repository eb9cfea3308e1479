"""
Pydantic schemas for the pagesearch API.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Bounds stay loose here; the query normalizer rejects bad values with a 400
IntParam = Optional[Union[int, str]]


class SearchPayload(BaseModel):
    """Search request payload."""
    query: str = Field(default="", examples=["cat"])
    limit: IntParam = Field(default=None, examples=[100])
    page: IntParam = Field(default=1, examples=[1])
    page_size: IntParam = Field(default=None, examples=[10])


class SearchResult(BaseModel):
    """Single search result."""
    url: str
    title: str
    preview: str = Field(default="", description="Excerpt around the first match")


class SearchEnvelope(BaseModel):
    """Decoded search response with results and metadata."""
    query: str
    page: int
    page_size: int
    count: int
    total: int
    execution_time_ms: float
    pages: List[int]
    results: List[SearchResult]


class WireSearchResponse(BaseModel):
    """
    Body of GET /search, consumed by the browser page.

    Titles and previews are percent-encoded with '+' for spaces.
    """
    model_config = ConfigDict(populate_by_name=True)

    results: List[SearchResult]
    total: int
    page: int
    page_results: int = Field(..., alias="pageResults")
    pages: List[int]
