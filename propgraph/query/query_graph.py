"""The query graph built from a pattern string."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import networkx as nx

from .errors import DuplicateVariableError, UnresolvedVariableError, UnsupportedPatternError
from .predicates import CNF


class Direction(str, Enum):
    """Direction of a query edge relative to its source variable."""

    OUTGOING = "outgoing"
    UNDIRECTED = "undirected"


@dataclass(frozen=True)
class QueryVertex:
    """A vertex of the query graph."""

    variable: str
    label: str | None = None
    anonymous: bool = False


@dataclass(frozen=True)
class QueryEdge:
    """An edge of the query graph.

    ``lower``/``upper`` are the path length bounds of a variable-length edge;
    both are ``None`` for a plain edge.
    """

    variable: str
    source: str
    target: str
    label: str | None = None
    direction: Direction = Direction.OUTGOING
    lower: int | None = None
    upper: int | None = None
    anonymous: bool = False

    @property
    def is_variable_length(self) -> bool:
        return self.upper is not None

    @property
    def is_loop(self) -> bool:
        return self.source == self.target

    def other(self, variable: str) -> str:
        """Get the endpoint opposite to ``variable``."""
        return self.target if variable == self.source else self.source


@dataclass(frozen=True)
class QueryGraph:
    """An immutable query graph: vertices, edges and a CNF predicate.

    Vertices and edges keep declaration order, which is also the column order
    of the final embeddings.
    """

    vertices: tuple[QueryVertex, ...]
    edges: tuple[QueryEdge, ...] = ()
    predicates: CNF = field(default_factory=CNF)

    def __post_init__(self):
        seen: set[str] = set()
        for element in (*self.vertices, *self.edges):
            if element.variable in seen:
                raise DuplicateVariableError(f"Variable '{element.variable}' declared twice")
            seen.add(element.variable)

        vertex_variables = {v.variable for v in self.vertices}
        for edge in self.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in vertex_variables:
                    raise UnresolvedVariableError(
                        f"Edge '{edge.variable}' references undeclared vertex '{endpoint}'",
                        endpoint,
                    )

        unresolved = sorted(self.predicates.variables - seen)
        if unresolved:
            raise UnresolvedVariableError(
                f"Predicate references undeclared variable '{unresolved[0]}'", unresolved[0]
            )

        path_variables = {e.variable for e in self.edges if e.is_variable_length}
        for ref in self.predicates.property_refs:
            if ref.variable in path_variables:
                raise UnsupportedPatternError(
                    f"Property access on variable-length edge '{ref.variable}' is not supported"
                )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    @property
    def variables(self) -> list[str]:
        """All variables, vertices first, in declaration order."""
        return [v.variable for v in self.vertices] + [e.variable for e in self.edges]

    @property
    def vertex_variables(self) -> list[str]:
        return [v.variable for v in self.vertices]

    @property
    def edge_variables(self) -> list[str]:
        return [e.variable for e in self.edges]

    def get_vertex(self, variable: str) -> QueryVertex:
        for vertex in self.vertices:
            if vertex.variable == variable:
                return vertex
        raise UnresolvedVariableError(f"Unknown vertex variable '{variable}'", variable)

    def get_edge(self, variable: str) -> QueryEdge:
        for edge in self.edges:
            if edge.variable == variable:
                return edge
        raise UnresolvedVariableError(f"Unknown edge variable '{variable}'", variable)

    def predicates_for(self, variables: Iterable[str]) -> CNF:
        """Get the clauses that only reference the given variables."""
        return self.predicates.restricted_to(variables)

    def required_properties(self, variable: str) -> tuple[str, ...]:
        """Property keys of ``variable`` referenced anywhere in the predicates."""
        keys = {ref.key for ref in self.predicates.property_refs if ref.variable == variable}
        return tuple(sorted(keys))

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def to_networkx(self) -> nx.MultiGraph:
        """Get the undirected structure of the query graph."""
        graph = nx.MultiGraph()
        graph.add_nodes_from(self.vertex_variables)
        for edge in self.edges:
            graph.add_edge(edge.source, edge.target, key=edge.variable)
        return graph

    def connected_components(self) -> list[set[str]]:
        """Get the vertex variables of each connected component."""
        components = nx.connected_components(self.to_networkx())
        return sorted((set(c) for c in components), key=lambda c: min(c))

    def is_connected(self) -> bool:
        return len(self.connected_components()) <= 1

    def __str__(self) -> str:
        parts = []
        for edge in self.edges:
            label = f":{edge.label}" if edge.label else ""
            bounds = f"*{edge.lower}..{edge.upper}" if edge.is_variable_length else ""
            arrow = "->" if edge.direction == Direction.OUTGOING else "-"
            parts.append(f"({edge.source})-[{edge.variable}{label}{bounds}]{arrow}({edge.target})")
        connected = {v for e in self.edges for v in (e.source, e.target)}
        for vertex in self.vertices:
            if vertex.variable not in connected:
                label = f":{vertex.label}" if vertex.label else ""
                parts.append(f"({vertex.variable}{label})")
        text = "MATCH " + ", ".join(parts)
        if self.predicates:
            text += f" WHERE {self.predicates}"
        return text
