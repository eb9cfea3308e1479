"""
Search pipeline signals.

InvalidQuery and BackendUnavailable are errors. EmptyResult is not: it
marks a valid zero-length answer and sits outside the SearchError tree so
that ``except SearchError`` never swallows it by accident.
"""


class SearchError(Exception):
    """Base class for search pipeline failures."""


class InvalidQuery(SearchError):
    """Bad input. Raised locally, the collaborator is never contacted."""


class BackendUnavailable(SearchError):
    """The ranking/index collaborator could not answer. Retryable."""


class EmptyResult(Exception):
    """No document matched the term."""

    def __init__(self, term: str):
        super().__init__(f"No results for {term!r}")
        self.term = term
