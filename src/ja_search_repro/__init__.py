"""ja-search-repro - Japanese full-text search playground.

Index short Japanese strings, query them with a configurable tokenizer and
see which tokens the index and the query produced.
"""

__version__ = "0.1.0"
