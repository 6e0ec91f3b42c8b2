"""Index session - one searchable index derived from a document mapping.

The session is the deep module the UI and CLI talk to. It hides the schema,
analyzers, index building and query evaluation behind three calls:

* ``rebuild(documents)`` - replace the index when the mapping changes,
* ``search(query)`` - tokenize and rank, never raising,
* ``tokenize(text)`` - raw tokenizer output for display.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import time

from ja_search_repro.config import Settings
from ja_search_repro.domain.search import SearchHit, SearchOutcome
from ja_search_repro.search.analyzers import Analyzer, raw_tokenizer
from ja_search_repro.search.engine import QueryEngine
from ja_search_repro.search.errors import SearchError
from ja_search_repro.search.index import InMemoryIndex, build_index
from ja_search_repro.search.query import QueryParser, Wildcard
from ja_search_repro.search.schema import Schema, create_document_schema


logger = logging.getLogger(__name__)


class IndexSession:
    """Own the current index and answer queries against it.

    The index is rebuilt from scratch whenever ``rebuild`` receives a mapping
    object other than the one it was last built from. A failed build leaves
    the session unavailable: ``build_error`` is set and every query returns an
    empty outcome carrying that error until a later rebuild succeeds.
    """

    def __init__(self, settings: Settings | None = None, *, schema: Schema | None = None) -> None:
        self.settings = settings or Settings()
        self.schema = schema or create_document_schema(
            self.settings.search_tokenizer,
            **self.settings.analyzer_options(),
        )
        self.analyzers: dict[str, Analyzer] = self.schema.build_analyzers()
        self.search_analyzers = self.schema.build_search_analyzers(self.analyzers)
        self.body_field = self.schema.searchable_field_names[0]
        default_wildcard = Wildcard.TRAILING if self.settings.uses_trailing_wildcard() else Wildcard.NONE
        self._parser = QueryParser(self.schema, self.search_analyzers, default_wildcard=default_wildcard)
        self._engine = QueryEngine()
        self._documents: Mapping[str, str] = {}
        self._index: InMemoryIndex | None = None
        self.build_error: str | None = None
        self.rebuild_count = 0
        self._build(self._documents)

    @property
    def index(self) -> InMemoryIndex | None:
        return self._index

    @property
    def is_available(self) -> bool:
        return self._index is not None

    @property
    def document_count(self) -> int:
        return len(self._documents)

    @property
    def documents(self) -> Mapping[str, str]:
        return self._documents

    def rebuild(self, documents: Mapping[str, str]) -> bool:
        """Build a fresh index when ``documents`` is a new mapping object.

        Returns True when a build was attempted (successful or not).
        """

        if documents is self._documents:
            return False
        self._documents = documents
        self._build(documents)
        return True

    def _build(self, documents: Mapping[str, str]) -> None:
        start = time.perf_counter()
        self._index = None
        self.rebuild_count += 1
        try:
            self._index = build_index(
                self.schema,
                documents,
                analyzers=self.analyzers,
                k1=self.settings.bm25_k1,
                b=self.settings.bm25_b,
            )
        except SearchError as exc:
            self.build_error = str(exc)
            logger.warning("Index build failed: %s", exc, extra={"documents": len(documents)})
            return
        except Exception as exc:
            self.build_error = f"{type(exc).__name__}: {exc}"
            logger.exception("Unexpected error while building index", extra={"documents": len(documents)})
            return

        self.build_error = None
        logger.info(
            "Rebuilt index with %d documents in %.1fms",
            self._index.doc_count,
            (time.perf_counter() - start) * 1000,
            extra={"tokenizer": self.settings.search_tokenizer, "index_id": self._index.index_id},
        )

    def search(self, query: str) -> SearchOutcome:
        """Run ``query`` against the current index.

        Blank queries do not search; they return an unfiltered outcome with
        the indexed document count. Failures come back as an outcome with no
        results and an error message.
        """

        if not query.strip():
            return SearchOutcome.unfiltered(query, self.document_count)

        if self._index is None:
            return SearchOutcome.failed(
                query,
                f"Index unavailable: {self.build_error or 'not built'}",
                total_documents=self.document_count,
            )

        start = time.perf_counter()
        try:
            parsed = self._parser.parse(query.strip())
            ranked = self._engine.search(self._index, parsed, limit=self.settings.max_results)
        except SearchError as exc:
            logger.warning("Search failed for %r: %s", query, exc)
            return SearchOutcome.failed(query, str(exc), total_documents=self.document_count)
        except Exception as exc:
            logger.exception("Unexpected error while searching for %r", query)
            return SearchOutcome.failed(query, f"{type(exc).__name__}: {exc}", total_documents=self.document_count)

        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug("Query %r matched %d documents in %.1fms", query, len(ranked), duration_ms)
        return SearchOutcome(
            query=query,
            tokens=parsed.terms,
            results=[
                SearchHit(
                    document_id=entry.doc_id,
                    score=entry.score,
                    matched_terms=sorted({term for terms in entry.matched_terms.values() for term in terms}),
                )
                for entry in ranked
            ],
            total_documents=self.document_count,
            duration_ms=duration_ms,
        )

    def tokenize(self, text: str) -> list[str]:
        """Token strings the body tokenizer produces for ``text``, before any filter.

        Returns ``[]`` on failure.
        """

        try:
            tokens = raw_tokenizer(self.analyzers[self.body_field])(text)
            return [token.text for token in tokens if token.text]
        except Exception:
            logger.exception("Failed to tokenize text for display")
            return []
