from pagesearch.fetcher.backends import HttpBackend, IndexBackend, SearchBackend
from pagesearch.fetcher.fetcher import ResultFetcher, decode_document, decode_field

__all__ = [
    "HttpBackend",
    "IndexBackend",
    "ResultFetcher",
    "SearchBackend",
    "decode_document",
    "decode_field",
]
