"""
Build In-Memory BM25 Index from a JSONL corpus.
Compiles the documents into a NumPy CSR sparse matrix.

Usage:
    pagesearch build-index corpus.jsonl

Each corpus line is a JSON object:
    {"url": "...", "title": "...", "content": "...", "pagerank": 0.0}
"html" may replace title/content; it is cleaned with the HTML Parser.

This runs once per corpus and generates:
    data/bm25_matrix.pkl
"""
import json
import logging
import os
import pickle
from collections import Counter
from typing import Iterable, List, Optional

import numpy as np
from scipy.sparse import csr_matrix

from pagesearch.cleaner.parser import Parser, load_stopwords
from pagesearch.config import INDEX_PATH

logger = logging.getLogger(__name__)


class CorpusError(ValueError):
    """The corpus file cannot be turned into an index."""


def load_corpus(path: str, parser: Optional[Parser] = None) -> List[dict]:
    """
    Read a JSONL corpus into document dicts (url, title, content, pagerank).

    Blank lines are skipped. A line that is not a JSON object, or that has no
    url, is a CorpusError naming the line.
    """
    parser = parser or Parser()
    documents = []

    with open(path, encoding='utf-8') as f:
        for line_no, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise CorpusError(f"{path}:{line_no}: invalid JSON ({e.msg})") from e
            if not isinstance(record, dict) or not record.get('url'):
                raise CorpusError(f"{path}:{line_no}: record needs a url")

            title = record.get('title') or ''
            content = record.get('content') or ''
            if record.get('html'):
                parsed = parser.parse(record['html'])
                title = title or parsed['title']
                content = content or parsed['clean_text']

            documents.append({
                'url': record['url'],
                'title': Parser.collapse(title),
                'content': Parser.collapse(content),
                'pagerank': float(record.get('pagerank') or 0.0),
            })

    logger.info("Loaded %d documents from %s", len(documents), path)
    return documents


def build_payload(documents: List[dict], stopwords: Optional[Iterable[str]] = None) -> dict:
    """
    Compile documents into the payload NumPyBM25Engine loads.

    Title and content are both indexed.
    """
    if not documents:
        raise CorpusError("No documents to index")

    parser = Parser(stopwords)

    # 1. Term frequencies per document
    doc_terms = []
    for doc in documents:
        tokens = parser.tokenize(f"{doc['title']} {doc['content']}")
        doc_terms.append(Counter(tokens))

    doc_lens = np.array([sum(c.values()) for c in doc_terms], dtype=np.float32)
    total_docs = len(documents)
    avgdl = float(doc_lens.mean()) or 1.0

    # 2. Vocabulary (sorted for a reproducible layout) and document frequency
    doc_freq = Counter()
    for counts in doc_terms:
        doc_freq.update(counts.keys())
    vocab = {token: row for row, token in enumerate(sorted(doc_freq))}

    # IDF = log( (N - df + 0.5) / (df + 0.5) + 1 )
    vocab_idf = np.array(
        [np.log((total_docs - doc_freq[t] + 0.5) / (doc_freq[t] + 0.5) + 1) for t in sorted(doc_freq)],
        dtype=np.float32,
    )

    # 3. Sparse matrix: (vocab_size, num_docs), CSR for row slicing
    rows, cols, data = [], [], []
    for col, counts in enumerate(doc_terms):
        for token, freq in counts.items():
            rows.append(vocab[token])
            cols.append(col)
            data.append(freq)

    term_matrix = csr_matrix(
        (np.array(data, dtype=np.float32), (rows, cols)),
        shape=(len(vocab), total_docs),
    )

    logger.info(
        "Compiled index: %d documents, %d terms, %d non-zero entries",
        total_docs, len(vocab), term_matrix.nnz,
    )

    return {
        'term_matrix': term_matrix,
        'vocab': vocab,
        'vocab_idf': vocab_idf,
        'doc_lens': doc_lens,
        'documents': documents,
        'avgdl': avgdl,
        'stopwords': sorted(parser.stopwords),
    }


def build_index(corpus_path: str, output_path: str = INDEX_PATH, stopwords_path: Optional[str] = None) -> dict:
    """Build and save the BM25 matrix index. Returns summary stats."""
    stopwords = load_stopwords(stopwords_path)
    documents = load_corpus(corpus_path)
    payload = build_payload(documents, stopwords)

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_path, 'wb') as f:
        pickle.dump(payload, f)

    size_mb = os.path.getsize(output_path) / 1024 / 1024
    logger.info("Saved index to %s (%.2f MB)", output_path, size_mb)

    return {
        'documents': len(documents),
        'terms': len(payload['vocab']),
        'entries': int(payload['term_matrix'].nnz),
        'avgdl': payload['avgdl'],
        'size_mb': size_mb,
        'path': output_path,
    }
