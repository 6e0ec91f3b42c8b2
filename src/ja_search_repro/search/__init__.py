"""
In-memory search indexing and query package.

This package provides a pure-Python search stack:
- patterns: Unicode property escape support for regex patterns
- analyzers: Tokenizers and filters (n-gram, Japanese segmenter, standard)
- schema: Reference and text field definitions
- stats: BM25 term weighting
- index: Full-rebuild in-memory inverted index
- query: Query clauses and query-string parsing
- engine: Clause evaluation and ranking
"""
