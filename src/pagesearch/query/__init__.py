from pagesearch.query.normalizer import normalize_query

__all__ = ["normalize_query"]
