"""Element variants of the property graph model."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def new_id() -> str:
    """Generate a fresh element identifier."""
    return uuid.uuid4().hex


class ElementKind(str, Enum):
    """Kinds of graph elements."""

    GRAPH_HEAD = "graph_head"
    VERTEX = "vertex"
    EDGE = "edge"


@dataclass(frozen=True)
class GraphHead:
    """The head of a logical graph: identifier, label and properties."""

    id: str
    label: str = ""
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    kind = ElementKind.GRAPH_HEAD


@dataclass(frozen=True)
class Vertex:
    """A labeled vertex with properties."""

    id: str
    label: str = ""
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    kind = ElementKind.VERTEX


@dataclass(frozen=True)
class Edge:
    """A labeled, directed edge between two vertices."""

    id: str
    source_id: str
    target_id: str
    label: str = ""
    properties: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    kind = ElementKind.EDGE

    def reversed(self) -> "Edge":
        """Return a copy of this edge pointing the other way."""
        return Edge(
            id=self.id,
            source_id=self.target_id,
            target_id=self.source_id,
            label=self.label,
            properties=dict(self.properties),
        )


Element = GraphHead | Vertex | Edge
