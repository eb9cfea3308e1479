"""
Request-scoped domain types shared by the search pipeline.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    """A validated query, produced by the normalizer."""
    model_config = ConfigDict(frozen=True)

    term: str = Field(..., min_length=1)
    max_results: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)
    page: int = Field(default=1, ge=1)


class Document(BaseModel):
    """A single decoded search result."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    preview: str


class SearchResponse(BaseModel):
    """One page of results plus the size of the full result set."""
    term: str
    page: int
    page_size: int
    total: int
    results: List[Document] = Field(default_factory=list)
    pages: List[int] = Field(default_factory=list)
