"""Exception hierarchy for the in-memory search stack."""

from __future__ import annotations


class SearchError(ValueError):
    """Base class for recoverable indexing and query failures."""


class IndexBuildError(SearchError):
    """Raised when a document cannot be added to an index."""


class QueryParseError(SearchError):
    """Raised when a query string uses malformed syntax."""

    def __init__(self, message: str, *, start: int | None = None, end: int | None = None) -> None:
        super().__init__(message)
        self.start = start
        self.end = end


class QueryError(SearchError):
    """Raised when a parsed query cannot be executed against an index."""
