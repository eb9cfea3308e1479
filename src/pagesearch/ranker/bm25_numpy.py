"""
In-Memory BM25 Engine using SciPy Sparse Matrices.

The index is a pickled payload compiled by scripts/build_index.py:
a CSR term-document matrix plus vocabulary, IDF, document lengths and
document metadata.
"""
import logging
import os
import pickle
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class NumPyBM25Engine:
    """In-memory sparse matrix BM25 engine."""

    def __init__(self, index_path: str = "data/bm25_matrix.pkl", k1: float = 1.2, b: float = 0.75):
        self.k1 = k1
        self.b = b
        self.index_path = index_path

        # State
        self.term_matrix = None      # shape: (vocab_size, num_docs)
        self.vocab = None            # dict: token -> matrix row_index
        self.vocab_idf = None        # array mapping row_index -> idf value
        self.doc_lens = None         # array of document lengths
        self.documents = None        # list of document dicts, by column index
        self.stopwords = None        # stop words the index was tokenized with
        self.avgdl = 0.0

    @property
    def num_docs(self) -> int:
        return len(self.documents) if self.documents is not None else 0

    def load(self) -> bool:
        """Load the matrix index from disk. Returns False if not found."""
        if not os.path.exists(self.index_path):
            return False

        with open(self.index_path, 'rb') as f:
            data = pickle.load(f)
        self.load_payload(data)
        return True

    def load_payload(self, data: dict):
        """Adopt an in-memory payload as built by build_payload()."""
        self.term_matrix = data['term_matrix']
        self.vocab = data['vocab']
        self.vocab_idf = data['vocab_idf']
        self.doc_lens = data['doc_lens']
        self.documents = data['documents']
        self.avgdl = data['avgdl']
        self.stopwords = data.get('stopwords')
        logger.info("Loaded BM25 index: %d documents, %d terms", self.num_docs, len(self.vocab))

    def search(self, tokens: List[str], k: Optional[int] = None) -> List[Tuple[int, float]]:
        """
        Execute BM25 search using vectorized numpy operations.

        Args:
            tokens: Query tokens, already normalized
            k: Return top-k results (all matches when None)

        Returns:
            List of (column_index, score) tuples, sorted by score descending
        """
        if self.term_matrix is None:
            return []

        # 1. Map query tokens to matrix rows, dropping unknown ones
        query_rows = []
        for token in tokens:
            row_idx = self.vocab.get(token)
            if row_idx is not None and row_idx not in query_rows:
                query_rows.append(row_idx)

        if not query_rows:
            return []

        # 2. Slice matrix rows for the query terms: (num_query_terms, num_docs)
        dense_freq = self.term_matrix[query_rows, :].toarray()

        # 3. BM25: IDF * ((freq * (k1 + 1)) / (freq + k1 * (1 - b + b * L/avgdl)))
        doc_norm = 1 - self.b + self.b * (self.doc_lens / self.avgdl)
        numerator = dense_freq * (self.k1 + 1)
        denominator = dense_freq + (self.k1 * doc_norm)
        idf_vec = self.vocab_idf[query_rows].reshape(-1, 1)

        final_scores = (idf_vec * (numerator / denominator)).sum(axis=0)

        # 4. Top-K selection; argpartition keeps large corpora at O(n + k log k)
        if k is None or k >= len(final_scores):
            top_indices = np.argsort(-final_scores, kind='stable')
        else:
            top_k_indices = np.argpartition(final_scores, -k)[-k:]
            top_indices = top_k_indices[np.argsort(-final_scores[top_k_indices], kind='stable')]

        # 5. Drop zero-score docs
        results = []
        for idx in top_indices:
            score = float(final_scores[idx])
            if score > 0:
                results.append((int(idx), score))

        return results
