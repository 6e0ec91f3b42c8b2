"""Domain models for search results.

Value objects are immutable (frozen) pydantic models. A ``SearchOutcome`` is
produced for every query, including failed ones: failures are carried in
``error`` next to an empty result list rather than raised.
"""

from pydantic import BaseModel, ConfigDict, Field


def _pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


class SearchHit(BaseModel):
    """A single ranked document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    score: float
    matched_terms: list[str] = Field(default_factory=list)


class SearchOutcome(BaseModel):
    """Everything the UI needs to render one query.

    ``is_filtered`` is False for blank queries: the caller shows the indexed
    document count instead of a result list, and no search ran.
    """

    model_config = ConfigDict(frozen=True)

    query: str
    tokens: list[str] = Field(default_factory=list)
    results: list[SearchHit] = Field(default_factory=list)
    total_documents: int = 0
    is_filtered: bool = True
    error: str | None = None
    duration_ms: float = 0.0

    @classmethod
    def unfiltered(cls, query: str, total_documents: int) -> "SearchOutcome":
        return cls(query=query, total_documents=total_documents, is_filtered=False)

    @classmethod
    def failed(cls, query: str, error: str, total_documents: int = 0) -> "SearchOutcome":
        return cls(query=query, total_documents=total_documents, error=error)

    @property
    def result_count(self) -> int:
        return len(self.results)

    @property
    def document_ids(self) -> list[str]:
        return [hit.document_id for hit in self.results]

    def summary(self) -> str:
        """Status line: matched count for a query, indexed count otherwise."""
        if self.error:
            return _pluralize(0, "result")
        if not self.is_filtered:
            return f"{_pluralize(self.total_documents, 'document')} indexed"
        return f"{_pluralize(self.result_count, 'document')} matched"
