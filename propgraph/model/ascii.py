"""Loader for graphs written in a GDL-like ASCII notation.

Example::

    g1:Community{area="Leipzig"}[
        (alice:Person{name="Alice"})-[:knows{since=2014}]->(bob:Person{name="Bob"});
        (bob)-[:knows]->(alice)
    ];
    (carol:Person)-[:knows]->(alice)

A variable denotes the same element everywhere in the document, so an element
may belong to several graphs. Elements without a variable are always new.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..query.errors import QuerySyntaxError
from ..query.grammar import DOCUMENT_GRAMMAR, parse_with
from ..query.transformer import (
    ElementTransformer,
    NodePattern,
    PathPattern,
    RelationshipPattern,
    identifier,
)
from .elements import Edge, GraphHead, Vertex, new_id
from .errors import GraphFormatError, GraphLoadError
from .graph import GraphCollection, PropertyGraph


@dataclass(frozen=True)
class GraphPattern:
    """A ``var:Label{props}[...]`` block and the paths inside it."""

    variable: str | None = None
    label: str = ""
    properties: dict[str, Any] = field(default_factory=dict)
    position: int | None = None
    paths: tuple[PathPattern, ...] = ()


class DocumentTransformer(ElementTransformer):
    """Turns a ``gdl.lark`` parse tree into graph and path patterns."""

    def start(self, items):
        return items

    def graph(self, items):
        variable, label, properties, *paths = items
        return GraphPattern(
            variable=identifier(variable) if variable is not None else None,
            label=identifier(label) if label is not None else "",
            properties=properties or {},
            position=variable.start_pos if variable is not None else None,
            paths=tuple(paths),
        )

    def edge_body(self, items):
        variable, label, properties = items
        return RelationshipPattern(
            variable=identifier(variable) if variable is not None else None,
            label=identifier(label) if label is not None else None,
            properties=properties or {},
            position=variable.start_pos if variable is not None else None,
        )


_TRANSFORMER = DocumentTransformer()


class _GraphSpec:
    """Membership of a named graph, in insertion order."""

    def __init__(self, head: GraphHead):
        self.head = head
        self.vertex_ids: dict[str, None] = {}
        self.edge_ids: dict[str, None] = {}


class AsciiGraphLoader:
    """Parses the ASCII notation and gives access to graphs and elements."""

    def __init__(self):
        self._vertices: dict[str, Vertex] = {}
        self._edges: dict[str, Edge] = {}
        self._graphs: dict[str, _GraphSpec] = {}
        self._vertex_variables: dict[str, str] = {}
        self._edge_variables: dict[str, str] = {}
        self._database_head = GraphHead(id=new_id())

    @classmethod
    def from_string(cls, text: str) -> "AsciiGraphLoader":
        """Parse a document.

        Raises:
            GraphFormatError: If the text is malformed or inconsistent.
        """
        loader = cls()
        loader.append(text)
        return loader

    def append(self, text: str) -> None:
        """Parse another document into this loader, sharing its variables."""
        try:
            items = parse_with(DOCUMENT_GRAMMAR, _TRANSFORMER, text)
        except QuerySyntaxError as e:
            raise GraphFormatError(str(e), e.position) from e

        for item in items:
            if isinstance(item, GraphPattern):
                spec = self._declare_graph(item)
                for path in item.paths:
                    self._declare_path(path, spec)
            else:
                self._declare_path(item, None)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def graph_variables(self) -> list[str]:
        return list(self._graphs)

    def get_graph_head_by_variable(self, variable: str) -> GraphHead:
        return self._graph_spec(variable).head

    def get_vertex_by_variable(self, variable: str) -> Vertex:
        if variable not in self._vertex_variables:
            raise GraphFormatError(f"Unknown vertex variable '{variable}'")
        return self._vertices[self._vertex_variables[variable]]

    def get_edge_by_variable(self, variable: str) -> Edge:
        if variable not in self._edge_variables:
            raise GraphFormatError(f"Unknown edge variable '{variable}'")
        return self._edges[self._edge_variables[variable]]

    def get_logical_graph_by_variable(self, variable: str) -> PropertyGraph:
        """Get the named graph with exactly the elements declared inside it."""
        spec = self._graph_spec(variable)
        return PropertyGraph.from_elements(
            (self._vertices[i] for i in spec.vertex_ids),
            (self._edges[i] for i in spec.edge_ids),
            head=spec.head,
        )

    def get_graph_collection_by_variables(self, *variables: str) -> GraphCollection:
        """Get a collection of named graphs, in the given order."""
        return GraphCollection(self.get_logical_graph_by_variable(v) for v in variables)

    def get_database_graph(self) -> PropertyGraph:
        """Get a graph containing every element of the document."""
        return PropertyGraph.from_elements(
            self._vertices.values(), self._edges.values(), head=self._database_head
        )

    def variables_by_id(self) -> dict[str, str]:
        """Map the ids of named vertices, edges and graphs to their variables."""
        names = {spec.head.id: variable for variable, spec in self._graphs.items()}
        names.update({i: v for v, i in self._vertex_variables.items()})
        names.update({i: v for v, i in self._edge_variables.items()})
        return names

    def _graph_spec(self, variable: str) -> _GraphSpec:
        if variable not in self._graphs:
            raise GraphFormatError(f"Unknown graph variable '{variable}'")
        return self._graphs[variable]

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _declare_graph(self, pattern: GraphPattern) -> _GraphSpec:
        variable = pattern.variable
        existing = self._graphs.get(variable) if variable is not None else None
        if existing is None:
            spec = _GraphSpec(
                GraphHead(id=new_id(), label=pattern.label, properties=pattern.properties)
            )
            self._graphs[variable if variable is not None else f"__g{len(self._graphs)}"] = spec
            return spec

        if (pattern.label and pattern.label != existing.head.label) or (
            pattern.properties and pattern.properties != existing.head.properties
        ):
            raise GraphFormatError(f"Graph '{variable}' redeclared differently", pattern.position)
        return existing

    def _declare_path(self, path: PathPattern, graph: _GraphSpec | None) -> None:
        left = self._declare_vertex(path.start, graph)
        for relationship, node in path.steps:
            right = self._declare_vertex(node, graph)
            source, target = (right, left) if relationship.incoming else (left, right)
            edge = self._declare_edge(relationship, source, target)
            if graph is not None:
                graph.edge_ids[edge.id] = None
            left = right

    def _declare_vertex(self, node: NodePattern, graph: _GraphSpec | None) -> Vertex:
        vertex = self._vertex(node.variable, node.label or "", node.properties, node.position)
        if graph is not None:
            graph.vertex_ids[vertex.id] = None
        return vertex

    def _vertex(
        self, variable: str | None, label: str, properties: dict[str, Any], position: int | None
    ) -> Vertex:
        if variable is not None and variable in self._edge_variables:
            raise GraphFormatError(f"Variable '{variable}' is already an edge", position)

        if variable is not None and variable in self._vertex_variables:
            vertex = self._vertices[self._vertex_variables[variable]]
            if (label and label != vertex.label) or (
                properties and properties != vertex.properties
            ):
                raise GraphFormatError(f"Vertex '{variable}' redeclared differently", position)
            return vertex

        vertex = Vertex(id=new_id(), label=label, properties=properties)
        self._vertices[vertex.id] = vertex
        if variable is not None:
            self._vertex_variables[variable] = vertex.id
        return vertex

    def _declare_edge(
        self, relationship: RelationshipPattern, source: Vertex, target: Vertex
    ) -> Edge:
        variable, position = relationship.variable, relationship.position
        label = relationship.label or ""
        properties = relationship.properties

        if variable is not None and variable in self._vertex_variables:
            raise GraphFormatError(f"Variable '{variable}' is already a vertex", position)

        if variable is not None and variable in self._edge_variables:
            edge = self._edges[self._edge_variables[variable]]
            if (edge.source_id, edge.target_id) != (source.id, target.id):
                raise GraphFormatError(f"Edge '{variable}' redeclared with other endpoints", position)
            if (label and label != edge.label) or (properties and properties != edge.properties):
                raise GraphFormatError(f"Edge '{variable}' redeclared differently", position)
            return edge

        edge = Edge(
            id=new_id(),
            source_id=source.id,
            target_id=target.id,
            label=label,
            properties=properties,
        )
        self._edges[edge.id] = edge
        if variable is not None:
            self._edge_variables[variable] = edge.id
        return edge


def load_graphs(path: str | Path) -> AsciiGraphLoader:
    """Load an ASCII graph document from a file.

    Args:
        path: Path to the document.

    Returns:
        A loader holding the parsed graphs.

    Raises:
        GraphLoadError: If the file cannot be read.
        GraphFormatError: If the content is malformed.
    """
    path = Path(path)

    if not path.exists():
        raise GraphLoadError(f"File not found: {path}", str(path))

    if not path.is_file():
        raise GraphLoadError(f"Not a file: {path}", str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise GraphLoadError(f"Cannot read file: {e}", str(path)) from e

    return AsciiGraphLoader.from_string(text)
