"""Score parsed queries against an in-memory index."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field
import heapq

from ja_search_repro.search.errors import QueryError
from ja_search_repro.search.fuzzy import expand_edit_distance
from ja_search_repro.search.index import InMemoryIndex
from ja_search_repro.search.query import Clause, Presence, Query, Wildcard
from ja_search_repro.search.stats import magnitude


@dataclass(frozen=True)
class RankedDocument:
    """Represents a scored document produced by the query engine."""

    doc_id: str
    score: float
    matched_terms: Mapping[str, tuple[str, ...]] = field(default_factory=dict)


class QueryEngine:
    """Evaluate clause presence and rank documents by vector similarity.

    Every clause is expanded to the index terms it matches (exact, wildcard or
    edit distance). Matched terms add the clause boost to a per-field query
    vector; a document's score is the dot product of that vector with the
    document's precomputed BM25 vector, divided by the query vector length,
    summed over fields.
    """

    def expand_clause(self, index: InMemoryIndex, clause: Clause, field_name: str) -> list[str]:
        """Return the index terms ``clause`` matches in ``field_name``."""

        term = clause.term
        if clause.wildcard == Wildcard.LEADING | Wildcard.TRAILING:
            expanded = index.expand_infix(field_name, term)
        elif clause.wildcard & Wildcard.TRAILING:
            expanded = index.expand_prefix(field_name, term)
        elif clause.wildcard & Wildcard.LEADING:
            expanded = index.expand_suffix(field_name, term)
        elif term in index.get_field_postings(field_name):
            expanded = [term]
        else:
            expanded = []

        if clause.edit_distance > 0:
            for candidate in expand_edit_distance(term, index.terms(field_name), clause.edit_distance):
                if candidate not in expanded:
                    expanded.append(candidate)
        return expanded

    def search(self, index: InMemoryIndex, query: Query, *, limit: int | None = None) -> list[RankedDocument]:
        """Return ranked documents, best first.

        Raises:
            QueryError: a clause targets a field the index does not search.
        """

        searchable = set(index.schema.searchable_field_names)
        query_vectors: dict[str, dict[str, float]] = defaultdict(lambda: defaultdict(float))
        matched: dict[str, dict[str, set[str]]] = defaultdict(lambda: defaultdict(set))
        required: set[str] | None = None
        prohibited: set[str] = set()
        candidates: set[str] = set()

        for clause in query.clauses:
            clause_docs: set[str] = set()
            for field_name in clause.fields:
                if field_name not in searchable:
                    msg = f"Field '{field_name}' is not searchable in index '{index.schema.name}'"
                    raise QueryError(msg)
                for term in self.expand_clause(index, clause, field_name):
                    postings = index.get_postings(field_name, term)
                    if not postings:
                        continue
                    if clause.presence is not Presence.PROHIBITED:
                        query_vectors[field_name][term] += clause.boost
                    for posting in postings:
                        clause_docs.add(posting.doc_id)
                        if clause.presence is not Presence.PROHIBITED:
                            matched[posting.doc_id][field_name].add(term)

            if clause.presence is Presence.PROHIBITED:
                prohibited |= clause_docs
                continue
            if clause.presence is Presence.REQUIRED:
                required = clause_docs if required is None else required & clause_docs
            candidates |= clause_docs

        if query.is_negated():
            candidates = set(index.document_ids)
        if required is not None:
            candidates &= required
        candidates -= prohibited

        ranked = [
            RankedDocument(
                doc_id=doc_id,
                score=self._score(index, doc_id, query_vectors),
                matched_terms={name: tuple(sorted(terms)) for name, terms in matched.get(doc_id, {}).items()},
            )
            for doc_id in index.document_ids
            if doc_id in candidates
        ]

        if limit is not None:
            if limit <= 0:
                return []
            if limit < len(ranked):
                return heapq.nlargest(limit, ranked, key=lambda entry: entry.score)
        ranked.sort(key=lambda entry: entry.score, reverse=True)
        return ranked

    def _score(self, index: InMemoryIndex, doc_id: str, query_vectors: Mapping[str, Mapping[str, float]]) -> float:
        score = 0.0
        for field_name, query_vector in query_vectors.items():
            document_vector = index.document_vectors.get(field_name, {}).get(doc_id)
            if not document_vector:
                continue
            query_magnitude = magnitude(query_vector.values())
            if query_magnitude == 0:
                continue
            dot = sum(weight * document_vector.get(term, 0.0) for term, weight in query_vector.items())
            score += dot / query_magnitude
        return score
