"""In-memory inverted index built from schema-aware documents.

``IndexBuilder`` accepts documents one by one and produces an immutable
``InMemoryIndex``. There is no incremental update path: when the document set
changes, callers build a new index from scratch and drop the old one.

The index keeps, per searchable field:

* postings: term -> documents and token positions,
* document lengths (token counts) for BM25 normalization,
* precomputed BM25 document vectors,
* a sorted vocabulary for prefix (trailing wildcard) expansion.
"""

from __future__ import annotations

from bisect import bisect_left
from collections import defaultdict
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
import logging
from typing import Any
from uuid import uuid4

from ja_search_repro.search.analyzers import Analyzer, Token
from ja_search_repro.search.errors import IndexBuildError
from ja_search_repro.search.schema import Schema, SchemaField
from ja_search_repro.search.stats import (
    DEFAULT_B,
    DEFAULT_K1,
    compute_field_length_stats,
    term_weight,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Posting:
    """Occurrences of one term in one document field."""

    doc_id: str
    positions: tuple[int, ...]

    @property
    def frequency(self) -> int:
        return len(self.positions)


@dataclass(frozen=True)
class InMemoryIndex:
    """Immutable searchable index produced by :class:`IndexBuilder`."""

    schema: Schema
    postings: dict[str, dict[str, list[Posting]]]
    stored_fields: dict[str, dict[str, Any]]
    field_lengths: dict[str, dict[str, int]]
    document_vectors: dict[str, dict[str, dict[str, float]]]
    vocabulary: dict[str, tuple[str, ...]]
    index_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def doc_count(self) -> int:
        return len(self.stored_fields)

    @property
    def document_ids(self) -> tuple[str, ...]:
        """Document references in insertion order."""
        return tuple(self.stored_fields)

    def get_document(self, doc_id: str) -> dict[str, Any] | None:
        return self.stored_fields.get(doc_id)

    def get_postings(self, field_name: str, term: str) -> list[Posting]:
        return self.postings.get(field_name, {}).get(term, [])

    def get_field_postings(self, field_name: str) -> Mapping[str, list[Posting]]:
        return self.postings.get(field_name, {})

    def terms(self, field_name: str) -> tuple[str, ...]:
        return self.vocabulary.get(field_name, ())

    def expand_prefix(self, field_name: str, prefix: str) -> list[str]:
        """Return vocabulary terms starting with ``prefix``, in sorted order."""

        vocabulary = self.terms(field_name)
        start = bisect_left(vocabulary, prefix)
        matches: list[str] = []
        for term in vocabulary[start:]:
            if not term.startswith(prefix):
                break
            matches.append(term)
        return matches

    def expand_suffix(self, field_name: str, suffix: str) -> list[str]:
        return [term for term in self.terms(field_name) if term.endswith(suffix)]

    def expand_infix(self, field_name: str, fragment: str) -> list[str]:
        return [term for term in self.terms(field_name) if fragment in term]


class IndexBuilder:
    """Builds an :class:`InMemoryIndex` from schema-aware documents."""

    def __init__(
        self,
        schema: Schema,
        *,
        analyzers: Mapping[str, Analyzer] | None = None,
        k1: float = DEFAULT_K1,
        b: float = DEFAULT_B,
    ) -> None:
        self.schema = schema
        self.k1 = k1
        self.b = b
        self._analyzers: dict[str, Analyzer] = dict(analyzers) if analyzers is not None else schema.build_analyzers()
        self._postings: MutableMapping[str, MutableMapping[str, MutableMapping[str, list[int]]]] = defaultdict(
            lambda: defaultdict(lambda: defaultdict(list))
        )
        self._field_lengths: MutableMapping[str, dict[str, int]] = defaultdict(dict)
        self._stored_fields: dict[str, dict[str, Any]] = {}

    def add(self, document: Mapping[str, Any]) -> str:
        """Analyze and register one document; returns its reference."""

        doc_key = self._normalize_ref(document)
        if doc_key in self._stored_fields:
            msg = f"Duplicate document for reference field '{self.schema.ref_field}': {doc_key}"
            raise IndexBuildError(msg)

        stored: dict[str, Any] = {}
        analyzed: dict[str, list[Token]] = {}
        for schema_field in self.schema.fields:
            value = document.get(schema_field.name)
            if schema_field.name == self.schema.ref_field:
                stored[schema_field.name] = doc_key
                continue
            self._validate_value(doc_key, schema_field, value)
            if schema_field.stored and value is not None:
                stored[schema_field.name] = value
            if schema_field.indexed:
                analyzed[schema_field.name] = self._analyze(doc_key, schema_field, value)

        # Nothing is recorded until every field analyzed cleanly.
        for field_name, tokens in analyzed.items():
            self._field_lengths[field_name][doc_key] = len(tokens)
            for token in tokens:
                self._postings[field_name][token.text][doc_key].append(token.position)

        self._stored_fields[doc_key] = stored
        return doc_key

    def build(self) -> InMemoryIndex:
        total_docs = len(self._stored_fields)
        length_stats = compute_field_length_stats(self._field_lengths)

        postings: dict[str, dict[str, list[Posting]]] = {}
        document_vectors: dict[str, dict[str, dict[str, float]]] = {}
        vocabulary: dict[str, tuple[str, ...]] = {}

        for field_name in self.schema.searchable_field_names:
            terms = self._postings.get(field_name, {})
            doc_lengths = self._field_lengths.get(field_name, {})
            stats = length_stats.get(field_name)
            avg_length = stats.average_length if stats else 0.0
            boost = self.schema.get_boost(field_name)

            field_postings: dict[str, list[Posting]] = {}
            vectors: dict[str, dict[str, float]] = defaultdict(dict)
            for term, doc_map in terms.items():
                field_postings[term] = [
                    Posting(doc_id=doc_id, positions=tuple(positions)) for doc_id, positions in doc_map.items()
                ]
                doc_freq = len(doc_map)
                for doc_id, positions in doc_map.items():
                    vectors[doc_id][term] = term_weight(
                        len(positions),
                        doc_freq,
                        total_docs,
                        doc_lengths.get(doc_id, len(positions)),
                        avg_length,
                        k1=self.k1,
                        b=self.b,
                        boost=boost,
                    )

            postings[field_name] = field_postings
            document_vectors[field_name] = dict(vectors)
            vocabulary[field_name] = tuple(sorted(field_postings))

        index = InMemoryIndex(
            schema=self.schema,
            postings=postings,
            stored_fields=dict(self._stored_fields),
            field_lengths={name: dict(lengths) for name, lengths in self._field_lengths.items()},
            document_vectors=document_vectors,
            vocabulary=vocabulary,
        )
        logger.debug(
            "Built index %s with %d documents and %d terms",
            index.index_id,
            index.doc_count,
            sum(len(terms) for terms in vocabulary.values()),
        )
        return index

    def _normalize_ref(self, document: Mapping[str, Any]) -> str:
        ref_field = self.schema.ref_field
        if ref_field not in document:
            msg = f"Document missing reference field '{ref_field}'"
            raise IndexBuildError(msg)
        value = document[ref_field]
        if value is None or (isinstance(value, str) and not value.strip()):
            msg = f"Reference field '{ref_field}' cannot be empty"
            raise IndexBuildError(msg)
        return str(value)

    def _validate_value(self, doc_key: str, schema_field: SchemaField, value: Any) -> None:
        if value is not None and not isinstance(value, str):
            msg = f"Field '{schema_field.name}' of document '{doc_key}' must be text, got {type(value).__name__}"
            raise IndexBuildError(msg)

    def _analyze(self, doc_key: str, schema_field: SchemaField, value: str | None) -> list[Token]:
        if not value:
            return []
        analyzer = self._analyzers.get(schema_field.name)
        if analyzer is None:
            analyzer = schema_field.build_analyzer()
            self._analyzers[schema_field.name] = analyzer
        try:
            return [token for token in analyzer(value) if token.text]
        except Exception as exc:
            msg = f"Failed to analyze field '{schema_field.name}' of document '{doc_key}': {exc}"
            raise IndexBuildError(msg) from exc


def build_index(
    schema: Schema,
    documents: Mapping[str, str],
    *,
    analyzers: Mapping[str, Analyzer] | None = None,
    k1: float = DEFAULT_K1,
    b: float = DEFAULT_B,
) -> InMemoryIndex:
    """Build a fresh index from a reference -> body mapping.

    Every body is registered under the schema's first searchable field.
    """

    searchable = schema.searchable_field_names
    if not searchable:
        msg = f"Schema '{schema.name}' has no searchable fields"
        raise IndexBuildError(msg)
    body_field = searchable[0]

    builder = IndexBuilder(schema, analyzers=analyzers, k1=k1, b=b)
    for ref, body in documents.items():
        builder.add({schema.ref_field: ref, body_field: body})
    return builder.build()
