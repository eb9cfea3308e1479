"""
Ranker Engine - BM25 plus PageRank over the in-memory index.
Serves as the ranking/index collaborator behind the Result Fetcher.
"""
import logging
from typing import Iterable, List
from urllib.parse import quote_plus

from pagesearch.cleaner.parser import Parser
from pagesearch.ranker.bm25_numpy import NumPyBM25Engine

logger = logging.getLogger(__name__)


def make_preview(content: str, phrases: Iterable[str], length: int = 100) -> str:
    """
    Cut a preview of ``length`` chars out of ``content``.

    Starts at the first occurrence of the first phrase found (matched
    case-insensitively), or at the beginning of the content when none is.
    """
    if not content:
        return ""
    lowered = content.lower()
    start = 0
    for phrase in phrases:
        if not phrase:
            continue
        index = lowered.find(phrase.lower())
        if index != -1:
            start = index
            break
    return content[start:start + length]


def longest_run(query_tokens: List[str], doc_tokens: List[str]) -> int:
    """
    Length of the longest stretch of consecutive query tokens that also
    appears, in the same order and uninterrupted, in ``doc_tokens``.
    """
    for length in range(min(len(query_tokens), len(doc_tokens)), 0, -1):
        grams = set(zip(*(doc_tokens[i:] for i in range(length))))
        for start in range(len(query_tokens) - length + 1):
            if tuple(query_tokens[start:start + length]) in grams:
                return length
    return 0


class Ranker:
    """Lexical search engine: BM25 score boosted by PageRank."""

    # BM25 parameters
    BM25_K1 = 1.2
    BM25_B = 0.75

    def __init__(
        self,
        index_path: str,
        pagerank_weight: float = 1.0,
        preview_length: int = 100,
    ):
        self.pagerank_weight = pagerank_weight
        self.preview_length = preview_length
        self.bm25_engine = NumPyBM25Engine(index_path=index_path, k1=self.BM25_K1, b=self.BM25_B)
        if not self.bm25_engine.load():
            logger.warning("BM25 matrix index not found at %s. Run: pagesearch build-index <corpus>", index_path)

        # Queries must be tokenized exactly like the indexed documents
        self.parser = Parser(self.bm25_engine.stopwords)

    @property
    def ready(self) -> bool:
        return self.bm25_engine.term_matrix is not None

    @property
    def total_docs(self) -> int:
        return self.bm25_engine.num_docs

    def search(self, query: str, k: int = 10) -> List[dict]:
        """
        Rank documents for a query.

        Documents holding the longest uninterrupted run of query words come
        first. Within a run length, documents whose title holds the whole
        query come next, the rest follow by BM25 + pagerank_weight * PageRank.
        Later documents that repeat an earlier URL or title are skipped.

        Args:
            query: Search query
            k: Number of results to return

        Returns:
            List of result dicts with url, score and percent-encoded
            title and preview
        """
        tokens = self.parser.tokenize(query)
        if not tokens:
            return []

        matches = self.bm25_engine.search(tokens)
        if not matches:
            return []

        normalized_query = self.parser.normalize(query)
        documents = self.bm25_engine.documents

        scored = []
        for col, bm25_score in matches:
            doc = documents[col]
            score = bm25_score + self.pagerank_weight * doc.get('pagerank', 0.0)
            title_tokens = self.parser.tokenize(doc['title'])
            title_match = longest_run(tokens, title_tokens) == len(tokens)
            if len(tokens) == 1:
                # Every BM25 hit contains the single token
                run = 1
            else:
                run = max(
                    longest_run(tokens, title_tokens),
                    longest_run(tokens, self.parser.tokenize(doc['content'])),
                )
            scored.append((run, title_match, score, col))

        # Stable sort keeps BM25 order among exact ties
        scored.sort(key=lambda item: item[:3], reverse=True)

        return self._fetch_results(scored, [normalized_query] + tokens, k)

    def _fetch_results(self, scored: list, phrases: List[str], k: int) -> List[dict]:
        """Build encoded result records, skipping repeated URLs and titles."""
        documents = self.bm25_engine.documents
        seen_urls = set()
        seen_titles = set()
        results = []

        for _, _, score, col in scored:
            doc = documents[col]
            if doc['url'] in seen_urls or doc['title'] in seen_titles:
                continue
            seen_urls.add(doc['url'])
            if doc['title']:
                seen_titles.add(doc['title'])

            preview = make_preview(doc['content'], phrases, self.preview_length)
            results.append({
                'url': doc['url'],
                'title': quote_plus(doc['title']),
                'preview': quote_plus(preview),
                'score': round(score, 4),
            })
            if len(results) >= k:
                break

        return results
