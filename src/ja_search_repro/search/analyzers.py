"""Analyzer utilities for the in-memory search stack.

Analyzers follow a composable tokenizer/filter design: a tokenizer turns raw
text into a token stream and filters transform or drop tokens. Named analyzer
factories are kept in a small registry so an index session can be configured
with a tokenizer strategy by name instead of mutating shared state.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field, replace
import re
from typing import Any, Protocol

from tinysegmenter import TinySegmenter

from ja_search_repro.search.patterns import compile_pattern


@dataclass
class Token:
    """Represents a token emitted by analyzers.

    ``start_char``/``end_char`` are offsets into the normalized source text,
    ``end_char`` being exclusive. ``position`` is the token's source index.
    """

    text: str
    position: int
    start_char: int
    end_char: int
    boost: float = 1.0
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def end_offset(self) -> int:
        """Inclusive end offset of the token."""
        return self.end_char - 1

    def copy_with(self, **updates: Any) -> Token:
        updates.setdefault("attributes", dict(self.attributes))
        return replace(self, **updates)

    def __str__(self) -> str:
        return self.text


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class Segmenter(Protocol):
    """Anything exposing TinySegmenter's ``tokenize`` call."""

    def tokenize(self, text: str) -> list[str]:  # pragma: no cover - interface definition
        ...


class RegexTokenizer:
    """Regex-based tokenizer that yields word tokens."""

    def __init__(self, pattern: str = r"[\w']+", flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[Token]:
        for position, match in enumerate(self.pattern.finditer(text)):
            yield Token(
                text=match.group(0),
                position=position,
                start_char=match.start(),
                end_char=match.end(),
            )


class NGramTokenizer:
    """Emit every contiguous substring between ``min_size`` and ``max_size`` characters.

    Input is lower-cased and stripped first. Grams are ordered by size, then by
    start offset, and each token's ``position`` is its start offset. The token
    count grows with ``len(text) * max_size``; that growth is what gives
    substring queries their recall, so it is not pruned here.

    Never raises: ``None``, non-string or blank input yields nothing.
    """

    def __init__(self, min_size: int = 1, max_size: int = 15) -> None:
        self.min_size = max(1, min_size)
        self.max_size = max_size

    def __call__(self, text: str | None) -> Iterator[Token]:
        if not isinstance(text, str):
            return
        normalized = text.lower().strip()
        length = len(normalized)
        effective_max = min(self.max_size, length)
        for size in range(self.min_size, effective_max + 1):
            for start in range(length - size + 1):
                yield Token(
                    text=normalized[start : start + size],
                    position=start,
                    start_char=start,
                    end_char=start + size,
                )


class SegmenterTokenizer:
    """Delegate word segmentation to TinySegmenter.

    The text is lower-cased and stripped before segmentation, blank segments
    are dropped and offsets are tracked against the normalized text. Non-string
    input yields nothing.
    """

    def __init__(self, segmenter: Segmenter | None = None) -> None:
        self.segmenter = segmenter if segmenter is not None else TinySegmenter()

    def __call__(self, text: str | None) -> Iterator[Token]:
        if not isinstance(text, str):
            return
        normalized = text.lower().strip()
        if not normalized:
            return
        cursor = 0
        position = 0
        for segment in self.segmenter.tokenize(normalized):
            stripped = segment.strip()
            found = normalized.find(segment, cursor)
            start = found if found >= 0 else cursor
            cursor = start + len(segment)
            if not stripped:
                continue
            start += len(segment) - len(segment.lstrip())
            yield Token(
                text=stripped,
                position=position,
                start_char=start,
                end_char=start + len(stripped),
            )
            position += 1


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            lowered = token.text.lower()
            yield token if lowered == token.text else token.copy_with(text=lowered)


class TrimFilter:
    """Strip leading and trailing characters outside a word-character class.

    Tokens that are trimmed down to nothing are dropped.
    """

    def __init__(self, word_characters: str) -> None:
        self.word_characters = word_characters
        self._leading = compile_pattern(f"^[^{word_characters}]+")
        self._trailing = compile_pattern(f"[^{word_characters}]+$")

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            leading = self._leading.match(token.text)
            head = leading.end() if leading else 0
            if head == len(token.text):
                continue
            trailing = self._trailing.search(token.text, head)
            tail = trailing.start() if trailing else len(token.text)
            if head == 0 and tail == len(token.text):
                yield token
                continue
            yield token.copy_with(
                text=token.text[head:tail],
                start_char=token.start_char + head,
                end_char=token.start_char + tail,
            )


DEFAULT_STOPWORDS = [
    "a",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "but",
    "by",
    "for",
    "if",
    "in",
    "into",
    "is",
    "it",
    "no",
    "not",
    "of",
    "on",
    "or",
    "such",
    "that",
    "the",
    "their",
    "then",
    "there",
    "these",
    "they",
    "this",
    "to",
    "was",
    "will",
    "with",
]

JAPANESE_STOPWORDS = (
    "これ それ あれ この その あの ここ そこ あそこ こちら どこ だれ なに なん 何 私 貴方 貴方方 "
    "我々 私達 あの人 あのかた 彼女 彼 です あります おります います は が の に を で え から まで "
    "より も どの と し それで しかし"
).split()

# Characters that may appear at either end of a Japanese token.
JAPANESE_WORD_CHARACTERS = r"一二三四五六七八九十百千万億兆\p{Han}々〆ヵヶ\p{Hiragana}\p{Katakana}ーﾞ\p{Latin}\p{Nd}"

# English suffixes in match order; the stem must keep at least two characters.
_SUFFIX_RULES: tuple[tuple[str, str], ...] = (
    ("ization", "ize"),
    ("ational", "ate"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("iveness", "ive"),
    ("tional", "tion"),
    ("biliti", "ble"),
    ("entli", "ent"),
    ("izer", "ize"),
    ("ator", "ate"),
    ("ation", "ate"),
    ("ness", ""),
    ("ment", ""),
    ("ingly", ""),
    ("edly", ""),
    ("ing", ""),
    ("ed", ""),
    ("ly", ""),
    ("es", ""),
    ("s", ""),
)


def light_stem(word: str) -> str:
    """Lower-case ``word`` and rewrite its first matching English suffix."""
    lower = word.lower()
    for suffix, replacement in _SUFFIX_RULES:
        if len(lower) - len(suffix) >= 2 and lower.endswith(suffix):
            return lower[: -len(suffix)] + replacement
    return lower


class StopFilter:
    """Drop tokens found in a stop word list (compared lower-cased)."""

    def __init__(self, stopwords: Sequence[str] | None = None) -> None:
        words = DEFAULT_STOPWORDS if stopwords is None else stopwords
        self.stopwords = frozenset(word.lower() for word in words)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        return (token for token in tokens if token.text.lower() not in self.stopwords)


class StemFilter:
    """Replace each token's text with ``stemmer(text)``."""

    def __init__(self, stemmer: Callable[[str], str] = light_stem) -> None:
        self.stemmer = stemmer

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = self.stemmer(token.text)
            yield token if stemmed == token.text else token.copy_with(text=stemmed)


class AnalyzerPipeline:
    """A tokenizer followed by token filters, applied in order.

    Positions are renumbered after filtering unless ``renumber`` is False,
    which keeps tokenizer-assigned positions such as n-gram start offsets.

    ``search_filters`` are the filters query text goes through. Index-only
    steps (trimming, stop words) are left out so a query term like a
    particle still reaches the index as a prefix. ``None`` reuses ``filters``.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        filters: Sequence[TokenFilter] | None = None,
        *,
        search_filters: Sequence[TokenFilter] | None = None,
        renumber: bool = True,
    ) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])
        self.search_filters = self.filters if search_filters is None else list(search_filters)
        self.renumber = renumber

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        if self.renumber:
            for position, token in enumerate(tokens):
                token.position = position
        return tokens

    def for_search(self) -> Analyzer:
        if self.search_filters is self.filters:
            return self
        return AnalyzerPipeline(self.tokenizer, self.search_filters, renumber=self.renumber)


class KeywordAnalyzer:
    """The whole value as one token; used for document references."""

    def __call__(self, text: str) -> list[Token]:
        if not text:
            return []
        return [Token(text=text, position=0, start_char=0, end_char=len(text))]


class StandardAnalyzer(AnalyzerPipeline):
    """Regex words, lowercased, stopwords removed and optionally stemmed.

    Queries are lowercased and stemmed but keep their stopwords.
    """

    def __init__(self, *, stopwords: Sequence[str] | None = None, apply_stemming: bool = True) -> None:
        stemming: list[TokenFilter] = [StemFilter()] if apply_stemming else []
        super().__init__(
            RegexTokenizer(),
            [LowercaseFilter(), StopFilter(stopwords), *stemming],
            search_filters=[LowercaseFilter(), *stemming],
        )


class JapaneseAnalyzer(AnalyzerPipeline):
    """Segmenter-backed analyzer for Japanese text.

    Segments with TinySegmenter, trims non-word characters from token edges and
    removes Japanese stopwords. Japanese has no stemming step, so queries get
    the segmenter output unchanged.
    """

    def __init__(self, *, segmenter: Segmenter | None = None, stopwords: Sequence[str] | None = None) -> None:
        super().__init__(
            SegmenterTokenizer(segmenter),
            [
                TrimFilter(JAPANESE_WORD_CHARACTERS),
                StopFilter(JAPANESE_STOPWORDS if stopwords is None else stopwords),
            ],
            search_filters=[],
        )


class NGramAnalyzer(AnalyzerPipeline):
    """:class:`NGramTokenizer` output as-is, positions left at start offsets."""

    def __init__(self, *, min_size: int = 1, max_size: int = 15) -> None:
        super().__init__(NGramTokenizer(min_size=min_size, max_size=max_size), renumber=False)


def search_analyzer(analyzer: Analyzer) -> Analyzer:
    """Return the query-side counterpart of ``analyzer``.

    Analyzers without a ``for_search`` method treat queries like documents.
    """

    for_search = getattr(analyzer, "for_search", None)
    return for_search() if for_search is not None else analyzer


def raw_tokenizer(analyzer: Analyzer) -> Callable[[str], Iterable[Token]]:
    """The tokenizer stage of ``analyzer``, or the analyzer itself when it has none."""

    return getattr(analyzer, "tokenizer", analyzer)


AnalyzerFactory = Callable[..., Analyzer]

_ANALYZER_FACTORIES: dict[str, AnalyzerFactory] = {
    "default": StandardAnalyzer,
    "standard": StandardAnalyzer,
    "japanese": JapaneseAnalyzer,
    "ngram": NGramAnalyzer,
    "keyword": KeywordAnalyzer,
}


def available_analyzers() -> list[str]:
    return sorted(_ANALYZER_FACTORIES)


def register_analyzer(name: str, factory: AnalyzerFactory) -> None:
    """Install an analyzer factory under ``name``, replacing any previous one."""

    _ANALYZER_FACTORIES[name.lower()] = factory


def get_analyzer(name: str | None, **options: Any) -> Analyzer:
    """Return analyzer by name, defaulting to the standard analyzer.

    Keyword options are forwarded to the factory (e.g. n-gram sizes).
    """

    if name is None:
        return _ANALYZER_FACTORIES["default"](**options)
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {available_analyzers()}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized](**options)
