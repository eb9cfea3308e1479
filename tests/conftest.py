"""
Pytest configuration and shared fixtures for pagesearch tests.
"""
import asyncio
import json
import pickle
from typing import List, Optional

import pytest

from pagesearch.config import Settings
from pagesearch.ranker.engine import Ranker
from pagesearch.scripts.build_index import build_payload


class FakeBackend:
    """Collaborator double returning canned wire records."""

    def __init__(self, records: Optional[List[dict]] = None, error: Optional[Exception] = None, delay: float = 0.0):
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls = []
        self.closed = False

    async def search(self, term: str, limit: int) -> List[dict]:
        self.calls.append((term, limit))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.records)

    async def aclose(self) -> None:
        self.closed = True


def make_records(count: int) -> List[dict]:
    """Encoded records as the collaborator sends them, in ranking order."""
    return [
        {
            "url": f"https://example.com/cats/{i}",
            "title": f"Cat+page+{i}",
            "preview": f"About+cats+%23{i}",
        }
        for i in range(count)
    ]


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with explicit bounds, independent of the environment."""
    return Settings(
        index_path=str(tmp_path / "bm25_matrix.pkl"),
        backend_url=None,
        backend_timeout=1.0,
        default_max_results=100,
        max_results_limit=100,
        default_page_size=10,
        page_size_limit=50,
        max_term_length=256,
        page_window=10,
        preview_length=100,
        pagerank_weight=1.0,
    )


@pytest.fixture
def corpus_records() -> List[dict]:
    return [
        {
            "url": "https://pets.example/cat-care",
            "title": "Cat Care Basics",
            "content": "Feeding and grooming your cat. A healthy cat needs fresh water.",
            "pagerank": 0.2,
        },
        {
            "url": "https://pets.example/dog-training",
            "title": "Dog Training",
            "content": "Dogs learn quickly. The family cat may watch the lessons.",
            "pagerank": 0.5,
        },
        {
            "url": "https://pets.example/birds",
            "title": "Bird Watching",
            "content": "Birds are everywhere in spring.",
            "pagerank": 0.9,
        },
    ]


@pytest.fixture
def corpus_file(tmp_path, corpus_records) -> str:
    path = tmp_path / "corpus.jsonl"
    path.write_text("\n".join(json.dumps(r) for r in corpus_records) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def make_ranker(tmp_path):
    """Build an index from documents and return a Ranker over it."""
    counter = {"n": 0}

    def _make(documents: List[dict], pagerank_weight: float = 1.0, preview_length: int = 100) -> Ranker:
        counter["n"] += 1
        path = tmp_path / f"index_{counter['n']}.pkl"
        docs = [
            {
                "url": d["url"],
                "title": d.get("title", ""),
                "content": d.get("content", ""),
                "pagerank": d.get("pagerank", 0.0),
            }
            for d in documents
        ]
        with open(path, "wb") as f:
            pickle.dump(build_payload(docs), f)
        return Ranker(index_path=str(path), pagerank_weight=pagerank_weight, preview_length=preview_length)

    return _make
