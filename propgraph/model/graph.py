"""PropertyGraph wrapper around networkx and graph collections."""

from typing import Any, Iterable, Iterator

import networkx as nx

from ..substrate import LocalCollection
from .elements import Edge, GraphHead, Vertex, new_id
from .errors import GraphFormatError


class PropertyGraph:
    """A logical graph: a graph head plus its vertices and edges.

    Wraps a networkx MultiDiGraph keyed by element ids. Vertex and edge
    objects are stored under the ``element`` attribute, edges use their id as
    the multigraph key so parallel edges are preserved.
    """

    def __init__(self, head: GraphHead | None = None):
        """Initialize an empty graph."""
        self._head = head if head is not None else GraphHead(id=new_id())
        self._graph = nx.MultiDiGraph()
        self._edges: dict[str, Edge] = {}

    @property
    def head(self) -> GraphHead:
        """Get the graph head."""
        return self._head

    @property
    def graph(self) -> nx.MultiDiGraph:
        """Get the underlying networkx graph."""
        return self._graph

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def add_vertex(self, vertex: Vertex) -> Vertex:
        """Add a vertex; adding the same id again is a no-op.

        Returns:
            The vertex stored in the graph.
        """
        if self._graph.has_node(vertex.id):
            return self._graph.nodes[vertex.id]["element"]
        self._graph.add_node(vertex.id, element=vertex)
        return vertex

    def add_edge(self, edge: Edge) -> Edge:
        """Add an edge between two existing vertices.

        Raises:
            GraphFormatError: If an endpoint is not part of the graph.
        """
        if edge.id in self._edges:
            return self._edges[edge.id]
        for endpoint in (edge.source_id, edge.target_id):
            if not self._graph.has_node(endpoint):
                raise GraphFormatError(
                    f"Edge '{edge.id}' references unknown vertex '{endpoint}'"
                )
        self._graph.add_edge(edge.source_id, edge.target_id, key=edge.id, element=edge)
        self._edges[edge.id] = edge
        return edge

    @classmethod
    def from_elements(
        cls,
        vertices: Iterable[Vertex],
        edges: Iterable[Edge],
        head: GraphHead | None = None,
    ) -> "PropertyGraph":
        """Build a graph from vertices and edges."""
        graph = cls(head)
        for vertex in vertices:
            graph.add_vertex(vertex)
        for edge in edges:
            graph.add_edge(edge)
        return graph

    def reverse(self) -> "PropertyGraph":
        """Return a copy with every edge reversed, keeping all ids."""
        return PropertyGraph.from_elements(
            self.vertices(),
            (edge.reversed() for edge in self.edges()),
            head=self._head,
        )

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def vertices(self) -> list[Vertex]:
        """Get all vertices."""
        return [data for _, data in self._graph.nodes(data="element")]

    def edges(self) -> list[Edge]:
        """Get all edges."""
        return list(self._edges.values())

    def get_vertex(self, vertex_id: str) -> Vertex | None:
        """Get a vertex by id."""
        if self._graph.has_node(vertex_id):
            return self._graph.nodes[vertex_id]["element"]
        return None

    def get_edge(self, edge_id: str) -> Edge | None:
        """Get an edge by id."""
        return self._edges.get(edge_id)

    def out_edges(self, vertex_id: str, label: str | None = None) -> Iterator[Edge]:
        """Iterate over outgoing edges of a vertex, optionally by label."""
        if not self._graph.has_node(vertex_id):
            return
        for _, _, edge in self._graph.out_edges(vertex_id, data="element"):
            if label is None or edge.label == label:
                yield edge

    def in_edges(self, vertex_id: str, label: str | None = None) -> Iterator[Edge]:
        """Iterate over incoming edges of a vertex, optionally by label."""
        if not self._graph.has_node(vertex_id):
            return
        for _, _, edge in self._graph.in_edges(vertex_id, data="element"):
            if label is None or edge.label == label:
                yield edge

    @property
    def vertex_count(self) -> int:
        return self._graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def vertex_collection(self) -> LocalCollection[Vertex]:
        """Expose the vertices as a substrate collection."""
        return LocalCollection.of(self.vertices())

    def edge_collection(self) -> LocalCollection[Edge]:
        """Expose the edges as a substrate collection."""
        return LocalCollection.of(self.edges())

    def property_index(self) -> dict[str, dict[str, Any]]:
        """Map every vertex and edge id to its properties."""
        index = {vertex.id: vertex.properties for vertex in self.vertices()}
        index.update({edge.id: edge.properties for edge in self.edges()})
        return index

    def __repr__(self) -> str:
        return (
            f"PropertyGraph(head={self._head.id!r}, "
            f"vertices={self.vertex_count}, edges={self.edge_count})"
        )


class GraphCollection:
    """An ordered collection of logical graphs with distinct heads."""

    def __init__(self, graphs: Iterable[PropertyGraph] = ()):
        self._graphs: dict[str, PropertyGraph] = {}
        for graph in graphs:
            self.add_graph(graph)

    def add_graph(self, graph: PropertyGraph) -> None:
        """Add a graph; a graph with an already known head id is ignored."""
        self._graphs.setdefault(graph.head.id, graph)

    @property
    def graph_ids(self) -> list[str]:
        return list(self._graphs)

    @property
    def heads(self) -> list[GraphHead]:
        return [graph.head for graph in self._graphs.values()]

    def get_graph(self, graph_id: str) -> PropertyGraph | None:
        return self._graphs.get(graph_id)

    def head_collection(self) -> LocalCollection[GraphHead]:
        """Expose the graph heads as a substrate collection."""
        return LocalCollection.of(self.heads)

    def __iter__(self) -> Iterator[PropertyGraph]:
        return iter(self._graphs.values())

    def __len__(self) -> int:
        return len(self._graphs)

    def __repr__(self) -> str:
        return f"GraphCollection(graphs={len(self)})"
