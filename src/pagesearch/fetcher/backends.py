"""
Ranking/index collaborators the Result Fetcher can query.

Both return raw wire records: dicts with url, title and preview, where
title and preview are percent-encoded with '+' for spaces.
"""
import asyncio
import logging
from typing import List, Optional, Protocol

import httpx

from pagesearch.errors import BackendUnavailable
from pagesearch.ranker.engine import Ranker

logger = logging.getLogger(__name__)


class SearchBackend(Protocol):
    """Resolves a term to a ranked list of encoded records."""

    async def search(self, term: str, limit: int) -> List[dict]:
        ...

    async def aclose(self) -> None:
        ...


class HttpBackend:
    """Remote collaborator speaking GET /search?query=&max=&pageResults=&page=."""

    def __init__(self, base_url: str, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def search(self, term: str, limit: int) -> List[dict]:
        # Ask for everything on one page; paging happens locally.
        params = {"query": term, "max": limit, "pageResults": limit, "page": 1}
        try:
            resp = await self._client.get("/search", params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise BackendUnavailable(f"Backend answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"Backend unreachable: {e}") from e
        except ValueError as e:
            raise BackendUnavailable("Backend returned malformed JSON") from e

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise BackendUnavailable("Backend response has no results list")
        return results

    async def aclose(self) -> None:
        await self._client.aclose()


class IndexBackend:
    """In-process collaborator backed by the BM25 Ranker."""

    def __init__(self, ranker: Ranker):
        self.ranker = ranker

    async def search(self, term: str, limit: int) -> List[dict]:
        if not self.ranker.ready:
            raise BackendUnavailable("Search index not loaded")
        # Scoring is CPU bound; keep it off the event loop.
        return await asyncio.to_thread(self.ranker.search, term, limit)

    async def aclose(self) -> None:
        return None
