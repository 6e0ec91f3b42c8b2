"""Unit tests for BM25 weighting helpers."""

import math

import pytest

from ja_search_repro.search.stats import (
    bm25,
    calculate_idf,
    compute_field_length_stats,
    magnitude,
    term_weight,
)


@pytest.mark.unit
class TestCalculateIdf:
    def test_single_document_corpus_is_positive(self):
        assert calculate_idf(1, 1) == pytest.approx(math.log(1 + 0.5 / 1.5))
        assert calculate_idf(1, 1) > 0

    def test_rarer_terms_weigh_more(self):
        assert calculate_idf(1, 10) > calculate_idf(5, 10) > calculate_idf(10, 10)

    @pytest.mark.parametrize(("doc_freq", "total_docs"), [(0, 10), (1, 0), (-1, 5)])
    def test_degenerate_inputs(self, doc_freq, total_docs):
        assert calculate_idf(doc_freq, total_docs) == 0.0


@pytest.mark.unit
class TestBm25:
    def test_zero_frequency(self):
        assert bm25(0, 10, 5.0) == 0.0

    def test_average_length_document(self):
        # (k1 + 1) * tf / (k1 + tf) when the document has average length
        assert bm25(1, 4, 4.0) == pytest.approx(2.2 / 2.2)

    def test_missing_average_treated_as_average(self):
        assert bm25(2, 7, 0.0) == pytest.approx(bm25(2, 3, 3.0))

    def test_longer_documents_score_lower(self):
        assert bm25(1, 2, 4.0) > bm25(1, 8, 4.0)

    def test_frequency_saturates(self):
        assert bm25(10, 4, 4.0) < 2.2


@pytest.mark.unit
class TestTermWeight:
    def test_rounded_to_three_decimals(self):
        weight = term_weight(2, 1, 3, 5, 4.0)

        assert weight == round(weight, 3)
        assert weight == round(calculate_idf(1, 3) * bm25(2, 5, 4.0), 3)

    def test_boost_scales_weight(self):
        assert term_weight(1, 1, 2, 3, 3.0, boost=2.0) == pytest.approx(2 * term_weight(1, 1, 2, 3, 3.0), abs=2e-3)


@pytest.mark.unit
class TestFieldLengthStats:
    def test_average_length(self):
        stats = compute_field_length_stats({"body": {"Document 1": 2, "Document 2": 4}})

        assert stats["body"].total_terms == 6
        assert stats["body"].average_length == 3.0

    def test_empty_field(self):
        assert compute_field_length_stats({"body": {}})["body"].average_length == 0.0


@pytest.mark.unit
def test_magnitude():
    assert magnitude([3.0, 4.0]) == 5.0
    assert magnitude([]) == 0.0
