"""
Result Fetcher - runs a validated request against the collaborator and
decodes what comes back.
"""
import asyncio
import logging
from typing import List
from urllib.parse import unquote

from pydantic import ValidationError

from pagesearch.errors import BackendUnavailable, EmptyResult
from pagesearch.fetcher.backends import SearchBackend
from pagesearch.models import Document, SearchRequest

logger = logging.getLogger(__name__)


def decode_field(value: str) -> str:
    """Percent-decode, then turn every literal '+' into a space."""
    return unquote(value).replace('+', ' ')


def decode_document(record: dict) -> Document:
    """Build a Document from a wire record, decoding title and preview."""
    if not isinstance(record, dict):
        raise BackendUnavailable(f"Malformed result record: {record!r}")
    try:
        return Document(
            url=record["url"],
            title=decode_field(record.get("title") or ""),
            preview=decode_field(record.get("preview") or ""),
        )
    except (KeyError, TypeError, AttributeError, ValidationError) as e:
        raise BackendUnavailable(f"Malformed result record: {record!r}") from e


class ResultFetcher:
    """Fetches up to max_results decoded documents for a request."""

    def __init__(self, backend: SearchBackend, timeout: float = 10.0):
        self.backend = backend
        self.timeout = timeout

    async def fetch(self, request: SearchRequest) -> List[Document]:
        """
        Query the collaborator for ``request.term``.

        Returns:
            Decoded documents in ranking order, at most request.max_results

        Raises:
            BackendUnavailable: collaborator failed, timed out or sent garbage
            EmptyResult: nothing matched
        """
        try:
            records = await asyncio.wait_for(
                self.backend.search(request.term, request.max_results),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Backend timed out after %.1fs for %r", self.timeout, request.term)
            raise BackendUnavailable(f"Backend timed out after {self.timeout}s") from e
        except BackendUnavailable as e:
            logger.warning("Backend unavailable for %r: %s", request.term, e)
            raise

        documents = [decode_document(r) for r in records[:request.max_results]]
        if not documents:
            logger.debug("No results for %r", request.term)
            raise EmptyResult(request.term)
        return documents
