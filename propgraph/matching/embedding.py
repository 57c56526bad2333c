"""Embeddings: immutable rows binding query variables to element ids.

An embedding holds one entry per column. Vertex and edge columns hold a
single id; a path column holds a tuple alternating edge and vertex ids
(``(e1, v1, e2)`` for a path of length two, ``()`` for length zero).
Property values required by predicates are cached next to the ids.
``EmbeddingMetaData`` maps variables and ``(variable, key)`` pairs to
columns and is computed once per plan node.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable


class EntryType(str, Enum):
    """Type of an embedding column."""

    VERTEX = "vertex"
    EDGE = "edge"
    PATH = "path"


@dataclass(frozen=True)
class EmbeddingMetaData:
    """Column layout shared by all embeddings of a plan node."""

    entries: tuple[tuple[str, EntryType], ...] = ()
    properties: tuple[tuple[str, str], ...] = ()

    @property
    def variables(self) -> list[str]:
        return [variable for variable, _ in self.entries]

    def has_variable(self, variable: str) -> bool:
        return any(v == variable for v, _ in self.entries)

    def column(self, variable: str) -> int:
        """Get the column index of a variable.

        Raises:
            KeyError: If the variable is not part of the layout.
        """
        for index, (v, _) in enumerate(self.entries):
            if v == variable:
                return index
        raise KeyError(variable)

    def entry_type(self, variable: str) -> EntryType:
        return self.entries[self.column(variable)][1]

    def property_column(self, variable: str, key: str) -> int | None:
        """Get the column of a cached property, or None if not cached."""
        try:
            return self.properties.index((variable, key))
        except ValueError:
            return None

    def columns_of(self, entry_type: EntryType) -> list[int]:
        return [i for i, (_, t) in enumerate(self.entries) if t == entry_type]

    def with_entry(self, variable: str, entry_type: EntryType) -> "EmbeddingMetaData":
        return EmbeddingMetaData(self.entries + ((variable, entry_type),), self.properties)

    def with_properties(self, variable: str, keys: Iterable[str]) -> "EmbeddingMetaData":
        added = tuple((variable, key) for key in keys)
        return EmbeddingMetaData(self.entries, self.properties + added)

    def merge(self, other: "EmbeddingMetaData") -> "EmbeddingMetaData":
        """Layout of a join: this layout followed by the other's new columns."""
        entries = self.entries + tuple(
            entry for entry in other.entries if not self.has_variable(entry[0])
        )
        properties = self.properties + tuple(
            prop for prop in other.properties if prop not in self.properties
        )
        return EmbeddingMetaData(entries, properties)

    def project(self, variables: Iterable[str]) -> "EmbeddingMetaData":
        """Layout narrowed to ``variables``, without cached properties."""
        return EmbeddingMetaData(tuple((v, self.entry_type(v)) for v in variables))


@dataclass(frozen=True)
class Embedding:
    """One (partial) match: id entries plus cached property values."""

    ids: tuple[Any, ...] = ()
    properties: tuple[Any, ...] = ()

    def extend(self, entry: Any, properties: Iterable[Any] = ()) -> "Embedding":
        """Return a new embedding with one more column."""
        return Embedding(self.ids + (entry,), self.properties + tuple(properties))

    def merge(
        self, other: "Embedding", columns: Iterable[int], property_columns: Iterable[int]
    ) -> "Embedding":
        """Append the given columns and property columns of ``other``."""
        return Embedding(
            self.ids + tuple(other.ids[i] for i in columns),
            self.properties + tuple(other.properties[i] for i in property_columns),
        )

    def project(self, columns: Iterable[int]) -> "Embedding":
        return Embedding(tuple(self.ids[i] for i in columns))

    def vertex_ids(self, metadata: EmbeddingMetaData) -> list[str]:
        """Ids of all bound vertices, including inner vertices of paths."""
        ids = [self.ids[i] for i in metadata.columns_of(EntryType.VERTEX)]
        for i in metadata.columns_of(EntryType.PATH):
            ids.extend(self.ids[i][1::2])
        return ids

    def edge_ids(self, metadata: EmbeddingMetaData) -> list[str]:
        """Ids of all bound edges, including the edges of paths."""
        ids = [self.ids[i] for i in metadata.columns_of(EntryType.EDGE)]
        for i in metadata.columns_of(EntryType.PATH):
            ids.extend(self.ids[i][0::2])
        return ids

    def to_mapping(self, metadata: EmbeddingMetaData) -> dict[str, Any]:
        """Map each variable to its bound id (or path tuple)."""
        return {variable: self.ids[i] for i, (variable, _) in enumerate(metadata.entries)}
