"""
Schema definition for search indexing.

A schema names the reference field that identifies each document and the
fields that get analyzed and indexed. Supported field kinds:
- TextField: analyzed text, searchable
- KeywordField: stored as-is; used for the document reference

Each field can have:
- stored: Whether the raw value is kept alongside the index
- indexed: Whether the field is searchable
- boost: Field-level boost applied to term weights
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ja_search_repro.search.analyzers import Analyzer, KeywordAnalyzer, get_analyzer, search_analyzer


class FieldType(str, Enum):
    """Types of fields supported in the schema."""

    TEXT = "text"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class SchemaField(ABC):
    """Base class for all schema fields."""

    name: str
    stored: bool = True
    indexed: bool = True
    boost: float = 1.0

    @property
    @abstractmethod
    def field_type(self) -> FieldType:
        """Return the field type."""

    @abstractmethod
    def build_analyzer(self) -> Analyzer:
        """Return a fresh analyzer for this field."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type.value,
            "stored": self.stored,
            "indexed": self.indexed,
            "boost": self.boost,
        }


@dataclass(frozen=True)
class TextField(SchemaField):
    """
    Analyzed text field for full-text search.

    Args:
        name: Field name (e.g., "body")
        analyzer_name: Registered analyzer to use (default: None = standard)
        analyzer_options: Keyword options forwarded to the analyzer factory
    """

    analyzer_name: str | None = None
    analyzer_options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def field_type(self) -> FieldType:
        return FieldType.TEXT

    def build_analyzer(self) -> Analyzer:
        return get_analyzer(self.analyzer_name, **dict(self.analyzer_options))

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.analyzer_name:
            data["analyzer_name"] = self.analyzer_name
        if self.analyzer_options:
            data["analyzer_options"] = dict(self.analyzer_options)
        return data


@dataclass(frozen=True)
class KeywordField(SchemaField):
    """Exact-match field whose whole value is a single term."""

    @property
    def field_type(self) -> FieldType:
        return FieldType.KEYWORD

    def build_analyzer(self) -> Analyzer:
        return KeywordAnalyzer()


@dataclass
class Schema:
    """
    Schema definition for a search index.

    Example:
        schema = Schema(
            fields=[
                KeywordField("name", indexed=False),
                TextField("body", analyzer_name="japanese"),
            ],
            ref_field="name",
        )
    """

    fields: list[SchemaField]
    ref_field: str = "name"
    name: str = "default"

    def __post_init__(self) -> None:
        self._field_map: dict[str, SchemaField] = {}
        for schema_field in self.fields:
            if schema_field.name in self._field_map:
                msg = f"Duplicate field '{schema_field.name}' in schema"
                raise ValueError(msg)
            self._field_map[schema_field.name] = schema_field

        if self.ref_field not in self._field_map:
            msg = f"Reference field '{self.ref_field}' not found in schema"
            raise ValueError(msg)

    def __getitem__(self, name: str) -> SchemaField:
        return self._field_map[name]

    def __contains__(self, name: str) -> bool:
        return name in self._field_map

    def __iter__(self) -> Iterator[SchemaField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    @property
    def searchable_fields(self) -> list[SchemaField]:
        """Indexed fields other than the reference field, in declaration order."""
        return [f for f in self.fields if f.indexed and f.name != self.ref_field]

    @property
    def searchable_field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.searchable_fields)

    def get_boost(self, field_name: str) -> float:
        if field_name in self._field_map:
            return self._field_map[field_name].boost
        return 1.0

    def build_analyzers(self) -> dict[str, Analyzer]:
        """Resolve one analyzer per searchable field."""
        return {f.name: f.build_analyzer() for f in self.searchable_fields}

    def build_search_analyzers(self, analyzers: Mapping[str, Analyzer] | None = None) -> dict[str, Analyzer]:
        """Query-side analyzers, derived from ``analyzers`` or freshly built ones."""
        source = analyzers if analyzers is not None else self.build_analyzers()
        return {name: search_analyzer(analyzer) for name, analyzer in source.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "ref_field": self.ref_field,
            "fields": [f.to_dict() for f in self.fields],
        }


def create_document_schema(analyzer_name: str = "japanese", **analyzer_options: Any) -> Schema:
    """
    Create the two-field schema used by the demo.

    Fields:
    - name: document identifier ("Document N"), stored, not searchable
    - body: document text, analyzed with ``analyzer_name``
    """
    return Schema(
        name="documents",
        ref_field="name",
        fields=[
            KeywordField("name", indexed=False),
            TextField("body", analyzer_name=analyzer_name, analyzer_options=analyzer_options),
        ],
    )
