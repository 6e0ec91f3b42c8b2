"""Domain layer: documents and search outcomes."""

from ja_search_repro.domain.model import DocumentStore
from ja_search_repro.domain.search import SearchHit, SearchOutcome


__all__ = [
    "DocumentStore",
    "SearchHit",
    "SearchOutcome",
]
