from pagesearch.ranker.bm25_numpy import NumPyBM25Engine
from pagesearch.ranker.engine import Ranker, make_preview

__all__ = ["NumPyBM25Engine", "Ranker", "make_preview"]
