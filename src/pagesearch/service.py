"""
Search pipeline: Query Normalizer -> Result Fetcher -> Pager.
"""
import logging
from typing import Optional

from pagesearch.config import Settings, get_settings
from pagesearch.errors import EmptyResult
from pagesearch.fetcher import HttpBackend, IndexBackend, ResultFetcher, SearchBackend
from pagesearch.models import SearchRequest, SearchResponse
from pagesearch.pager import page_numbers, paginate, total_pages
from pagesearch.query import normalize_query
from pagesearch.ranker.engine import Ranker

logger = logging.getLogger(__name__)


def create_backend(settings: Settings) -> SearchBackend:
    """HTTP collaborator when backend_url is set, the local index otherwise."""
    if settings.backend_url:
        logger.info("Using remote search backend at %s", settings.backend_url)
        return HttpBackend(settings.backend_url, timeout=settings.backend_timeout)

    logger.info("Using local search index at %s", settings.index_path)
    ranker = Ranker(
        index_path=settings.index_path,
        pagerank_weight=settings.pagerank_weight,
        preview_length=settings.preview_length,
    )
    return IndexBackend(ranker)


class SearchService:
    """Stateless across requests; every call owns its documents."""

    def __init__(self, backend: SearchBackend, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.backend = backend
        self.fetcher = ResultFetcher(backend, timeout=self.settings.backend_timeout)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SearchService":
        settings = settings or get_settings()
        return cls(create_backend(settings), settings)

    async def search(self, term, max_results=None, page_size=None, page=1) -> SearchResponse:
        """
        Run the whole pipeline for raw parameters.

        Raises:
            InvalidQuery: bad parameters (the backend is not contacted)
            BackendUnavailable: the backend failed; safe to retry
        """
        request = normalize_query(term, max_results, page_size, page, settings=self.settings)
        return await self.execute(request)

    async def execute(self, request: SearchRequest) -> SearchResponse:
        """Fetch and page an already validated request."""
        try:
            documents = await self.fetcher.fetch(request)
        except EmptyResult:
            documents = []

        pages = total_pages(len(documents), request.page_size)
        return SearchResponse(
            term=request.term,
            page=request.page,
            page_size=request.page_size,
            total=len(documents),
            results=paginate(documents, request.page, request.page_size),
            pages=page_numbers(request.page, pages, self.settings.page_window),
        )

    async def aclose(self):
        await self.backend.aclose()
