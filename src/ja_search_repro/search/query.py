"""Query clauses and the query-string parser.

A :class:`Query` is a list of :class:`Clause` objects. Each clause names one
term plus how it should match: which fields, wildcard mode, edit distance,
boost and presence. Queries can be assembled directly with
:meth:`Query.term` or parsed from a user string with :class:`QueryParser`.

Query string syntax (whitespace separates clauses)::

    東京          optional term
    +東京         required term
    -大阪         prohibited term
    body:東京     term restricted to a field
    東*           trailing wildcard (``*京`` leading, ``*京*`` both)
    東京都~1      edit distance
    東京^10       boost
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, IntFlag
import re

from ja_search_repro.search.analyzers import Analyzer
from ja_search_repro.search.errors import QueryParseError
from ja_search_repro.search.schema import Schema


class Wildcard(IntFlag):
    """Wildcard placement for a clause term."""

    NONE = 0
    LEADING = 1
    TRAILING = 2


class Presence(str, Enum):
    """How a clause constrains the matching document set."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    PROHIBITED = "prohibited"


@dataclass(frozen=True)
class Clause:
    """One term lookup within a query."""

    term: str
    fields: tuple[str, ...] = ()
    boost: float = 1.0
    wildcard: Wildcard = Wildcard.NONE
    edit_distance: int = 0
    presence: Presence = Presence.OPTIONAL


@dataclass
class Query:
    """Collection of clauses evaluated against every field in ``all_fields``."""

    all_fields: tuple[str, ...]
    clauses: list[Clause] = field(default_factory=list)

    def term(
        self,
        term: str,
        *,
        fields: Sequence[str] | None = None,
        boost: float = 1.0,
        wildcard: Wildcard = Wildcard.NONE,
        edit_distance: int = 0,
        presence: Presence = Presence.OPTIONAL,
    ) -> Query:
        """Append a clause and return the query for chaining."""

        self.clauses.append(
            Clause(
                term=term,
                fields=tuple(fields) if fields else self.all_fields,
                boost=boost,
                wildcard=wildcard,
                edit_distance=edit_distance,
                presence=presence,
            )
        )
        return self

    def is_negated(self) -> bool:
        """True when every clause is prohibited."""
        return bool(self.clauses) and all(clause.presence is Presence.PROHIBITED for clause in self.clauses)

    @property
    def terms(self) -> list[str]:
        """Clause terms in order, without duplicates."""
        seen: set[str] = set()
        ordered: list[str] = []
        for clause in self.clauses:
            if clause.term not in seen:
                seen.add(clause.term)
                ordered.append(clause.term)
        return ordered


_MODIFIER = re.compile(r"([~^])([^~^]*)")


@dataclass(frozen=True)
class _Expression:
    term: str
    fields: tuple[str, ...]
    presence: Presence
    wildcard: Wildcard | None
    edit_distance: int
    boost: float


class QueryParser:
    """Parse query strings into :class:`Query` objects.

    Clause terms without an explicit wildcard are run through the query-side
    analyzer of each target field (see :meth:`Schema.build_search_analyzers`),
    producing one clause per resulting token. Those clauses get
    ``default_wildcard``. Terms with an explicit ``*`` are only lower-cased
    so the prefix or suffix survives analysis.
    """

    def __init__(
        self,
        schema: Schema,
        analyzers: Mapping[str, Analyzer] | None = None,
        *,
        default_wildcard: Wildcard = Wildcard.NONE,
    ) -> None:
        self.schema = schema
        self.all_fields = schema.searchable_field_names
        self.analyzers = dict(analyzers) if analyzers is not None else schema.build_search_analyzers()
        self.default_wildcard = default_wildcard

    def parse(self, text: str) -> Query:
        query = Query(all_fields=self.all_fields)
        for match in re.finditer(r"\S+", text):
            expression = self._parse_expression(match.group(0), match.start(), match.end())
            self._add_clauses(query, expression)
        return query

    def _parse_expression(self, raw: str, start: int, end: int) -> _Expression:
        presence = Presence.OPTIONAL
        body = raw
        if body[0] in "+-":
            presence = Presence.REQUIRED if body[0] == "+" else Presence.PROHIBITED
            body = body[1:]
            if not body:
                raise QueryParseError(f"expected a term after presence modifier '{raw}'", start=start, end=end)

        fields = self.all_fields
        if ":" in body:
            field_name, _, body = body.partition(":")
            if field_name not in self.all_fields:
                possible = ", ".join(self.all_fields)
                msg = f"unrecognised field '{field_name}', possible fields: {possible}"
                raise QueryParseError(msg, start=start, end=end)
            if not body:
                raise QueryParseError(f"expected a term after field '{field_name}'", start=start, end=end)
            fields = (field_name,)

        term, edit_distance, boost = self._parse_modifiers(body, start, end)

        wildcard: Wildcard | None = None
        if term.startswith("*") or term.endswith("*"):
            wildcard = Wildcard.NONE
            if term.startswith("*"):
                wildcard |= Wildcard.LEADING
            if term.endswith("*"):
                wildcard |= Wildcard.TRAILING
            term = term.strip("*")
            if not term:
                raise QueryParseError(f"wildcard '{raw}' must wrap a term", start=start, end=end)

        return _Expression(
            term=term,
            fields=fields,
            presence=presence,
            wildcard=wildcard,
            edit_distance=edit_distance,
            boost=boost,
        )

    def _parse_modifiers(self, body: str, start: int, end: int) -> tuple[str, int, float]:
        cut = min((idx for idx in (body.find("~"), body.find("^")) if idx >= 0), default=len(body))
        term, modifiers = body[:cut], body[cut:]
        if not term:
            raise QueryParseError(f"expected a term before modifier '{modifiers}'", start=start, end=end)

        edit_distance = 0
        boost = 1.0
        for modifier in _MODIFIER.finditer(modifiers):
            kind, value = modifier.group(1), modifier.group(2)
            if kind == "~":
                if not value.isdigit():
                    raise QueryParseError(f"edit distance must be numeric, got '{value}'", start=start, end=end)
                edit_distance = int(value)
            else:
                try:
                    boost = float(value)
                except ValueError:
                    raise QueryParseError(f"boost must be numeric, got '{value}'", start=start, end=end) from None
                if boost <= 0:
                    raise QueryParseError(f"boost must be positive, got '{value}'", start=start, end=end)
        return term, edit_distance, boost

    def _add_clauses(self, query: Query, expression: _Expression) -> None:
        if expression.wildcard is not None:
            query.term(
                expression.term.lower(),
                fields=expression.fields,
                boost=expression.boost,
                wildcard=expression.wildcard,
                edit_distance=expression.edit_distance,
                presence=expression.presence,
            )
            return

        for field_name in expression.fields:
            analyzer = self.analyzers[field_name]
            seen: set[str] = set()
            for token in analyzer(expression.term):
                if not token.text or token.text in seen:
                    continue
                seen.add(token.text)
                query.term(
                    token.text,
                    fields=(field_name,),
                    boost=expression.boost,
                    wildcard=self.default_wildcard,
                    edit_distance=expression.edit_distance,
                    presence=expression.presence,
                )
