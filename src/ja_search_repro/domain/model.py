"""Domain model - the document store.

Documents live only in process memory. The store is immutable: adding or
removing a document returns a new store, and that new reference is what tells
an index session to rebuild.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Self


DOCUMENT_ID_PREFIX = "Document"


class DocumentStore(Mapping[str, str]):
    """Immutable mapping of document identifier to body.

    Identifiers are assigned as ``"Document N"`` from a counter that never
    goes backwards, so removing a document cannot cause a later one to reuse
    its identifier.
    """

    __slots__ = ("_documents", "_next_number")

    def __init__(self, documents: Mapping[str, str] | None = None, *, next_number: int | None = None) -> None:
        self._documents: Mapping[str, str] = MappingProxyType(dict(documents or {}))
        self._next_number = next_number if next_number is not None else len(self._documents) + 1

    @classmethod
    def empty(cls) -> Self:
        return cls()

    def __getitem__(self, identifier: str) -> str:
        return self._documents[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def __repr__(self) -> str:
        return f"DocumentStore({dict(self._documents)!r})"

    @property
    def next_identifier(self) -> str:
        return f"{DOCUMENT_ID_PREFIX} {self._next_number}"

    def add(self, body: str) -> Self:
        """Return a new store with ``body`` appended under the next identifier."""
        documents = dict(self._documents)
        documents[self.next_identifier] = body
        return type(self)(documents, next_number=self._next_number + 1)

    def remove(self, identifier: str) -> Self:
        """Return a new store without ``identifier``.

        Raises:
            KeyError: identifier is not in the store
        """
        if identifier not in self._documents:
            raise KeyError(identifier)
        documents = {key: value for key, value in self._documents.items() if key != identifier}
        return type(self)(documents, next_number=self._next_number)
