"""Statistical helpers for BM25 term weighting.

Weights are computed once per index build: every (field, document, term)
triple gets ``idf * bm25`` rounded to three decimals, and queries compare a
query vector against those document vectors.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import math


DEFAULT_K1 = 1.2
DEFAULT_B = 0.75
WEIGHT_PRECISION = 3


@dataclass(frozen=True)
class FieldLengthStats:
    """Aggregated token counts for one field."""

    field: str
    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


def compute_field_length_stats(field_lengths: Mapping[str, Mapping[str, int]]) -> dict[str, FieldLengthStats]:
    """Return aggregate stats for each field given per-document lengths."""

    return {
        field_name: FieldLengthStats(
            field=field_name,
            total_terms=sum(max(length, 0) for length in lengths.values()),
            document_count=len(lengths),
        )
        for field_name, lengths in field_lengths.items()
    }


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Inverse document frequency, ``log(1 + |(N - df + 0.5) / (df + 0.5)|)``.

    Always positive for a term present in at least one document, even when it
    appears in every document of a tiny corpus.
    """

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    ratio = (total_docs - doc_freq + 0.5) / (doc_freq + 0.5)
    return math.log(1 + abs(ratio))


def bm25(tf: int, doc_length: int, avg_doc_length: float, *, k1: float = DEFAULT_K1, b: float = DEFAULT_B) -> float:
    """Compute the BM25 term weight without IDF."""

    if tf <= 0:
        return 0.0
    normalized_length = doc_length / avg_doc_length if avg_doc_length > 0 else 1.0
    denominator = k1 * (1 - b + b * normalized_length) + tf
    return ((k1 + 1) * tf) / denominator


def term_weight(
    tf: int,
    doc_freq: int,
    total_docs: int,
    doc_length: int,
    avg_doc_length: float,
    *,
    k1: float = DEFAULT_K1,
    b: float = DEFAULT_B,
    boost: float = 1.0,
) -> float:
    """Rounded ``idf * bm25 * boost`` stored in document vectors."""

    weight = calculate_idf(doc_freq, total_docs) * bm25(tf, doc_length, avg_doc_length, k1=k1, b=b) * boost
    return round(weight, WEIGHT_PRECISION)


def magnitude(weights: Iterable[float]) -> float:
    """Euclidean length of a sparse vector's values."""

    return math.sqrt(sum(weight * weight for weight in weights))
