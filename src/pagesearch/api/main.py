"""
pagesearch API - FastAPI application.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional
from urllib.parse import quote_plus

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pagesearch.api.schemas import SearchEnvelope, SearchPayload, SearchResult, WireSearchResponse
from pagesearch.config import get_settings
from pagesearch.errors import BackendUnavailable, InvalidQuery
from pagesearch.service import SearchService

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the search service on startup, release it on shutdown."""
    logger.info("🚀 Starting pagesearch API...")
    if getattr(app.state, "service", None) is None:
        app.state.service = SearchService.from_settings(settings)
        logger.info("✅ Search service ready")

    yield

    logger.info("🛑 Shutting down pagesearch API")
    await app.state.service.aclose()
    app.state.service = None


app = FastAPI(
    title="pagesearch API",
    description="Paginated search over a ranked document index",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidQuery)
async def invalid_query_handler(request: Request, exc: InvalidQuery):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(BackendUnavailable)
async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
    logger.warning("Search backend unavailable: %s", exc)
    return JSONResponse(status_code=503, content={"detail": "Search backend unavailable"})


def get_service(request: Request) -> SearchService:
    service: Optional[SearchService] = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Search engine not ready")
    return service


async def execute_search(service: SearchService, query: str, limit, page, page_size) -> SearchEnvelope:
    """Core search logic shared by GET and POST endpoints."""
    start_time = time.perf_counter()

    response = await service.search(query, max_results=limit, page_size=page_size, page=page)

    execution_time_ms = (time.perf_counter() - start_time) * 1000
    return SearchEnvelope(
        query=response.term,
        page=response.page,
        page_size=response.page_size,
        count=len(response.results),
        total=response.total,
        execution_time_ms=round(execution_time_ms, 2),
        pages=response.pages,
        results=[SearchResult(**doc.model_dump()) for doc in response.results],
    )


@app.get("/search", response_model=WireSearchResponse)
async def search_wire(
    query: str = "",
    max_results: Optional[str] = Query(default=None, alias="max"),
    page_results: Optional[str] = Query(default=None, alias="pageResults"),
    page: Optional[str] = None,
    service: SearchService = Depends(get_service),
):
    """Search endpoint for the browser page; fields are percent-encoded.

    Numeric parameters arrive as raw strings so that the query normalizer
    reports malformed values as a 400.
    """
    response = await service.search(query, max_results=max_results, page_size=page_results, page=page)
    return WireSearchResponse(
        results=[
            SearchResult(url=doc.url, title=quote_plus(doc.title), preview=quote_plus(doc.preview))
            for doc in response.results
        ],
        total=response.total,
        page=response.page,
        page_results=response.page_size,
        pages=response.pages,
    )


@app.post("/api/v1/search", response_model=SearchEnvelope)
async def search_post(payload: SearchPayload, service: SearchService = Depends(get_service)):
    """Search endpoint (POST) - for programmatic use."""
    return await execute_search(service, payload.query, payload.limit, payload.page, payload.page_size)


@app.get("/api/v1/search", response_model=SearchEnvelope)
async def search_get(
    q: str = "",
    limit: Optional[str] = None,
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    service: SearchService = Depends(get_service),
):
    """Search endpoint (GET) - browser friendly, decoded fields."""
    return await execute_search(service, q, limit, page, page_size)


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "online",
        "engine_ready": getattr(request.app.state, "service", None) is not None
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
