"""Canonical labels of graphs and graph collections.

A canonical label is a string built from element labels only, so two graphs
get the same label exactly when they are equal under the chosen labeling
functions, whatever their element identifiers.
"""

import json
from typing import Any, Callable

from ..model.elements import Edge, GraphHead, Vertex
from ..model.graph import GraphCollection, PropertyGraph

GraphHeadLabeler = Callable[[GraphHead], str]
VertexLabeler = Callable[[Vertex], str]
EdgeLabeler = Callable[[Edge], str]


def _properties_string(properties: dict[str, Any]) -> str:
    return json.dumps(properties, sort_keys=True, separators=(",", ":"), default=str)


def graph_head_to_empty_string(head: GraphHead) -> str:
    return ""


def graph_head_to_data_string(head: GraphHead) -> str:
    return f"|{head.label}{_properties_string(head.properties)}|"


def vertex_to_id_string(vertex: Vertex) -> str:
    return f"({vertex.id})"


def vertex_to_data_string(vertex: Vertex) -> str:
    return f"({vertex.label}{_properties_string(vertex.properties)})"


def edge_to_id_string(edge: Edge) -> str:
    return f"[{edge.id}]"


def edge_to_data_string(edge: Edge) -> str:
    return f"[{edge.label}{_properties_string(edge.properties)}]"


class CanonicalAdjacencyMatrixBuilder:
    """Builds canonical labels from an adjacency matrix of element labels.

    Each vertex contributes one row: its own label followed by the sorted
    labels of its incident edges, each combined with the label of the vertex
    at the other end. A graph label is the head label followed by the sorted
    rows, a collection label the sorted graph labels.

    Args:
        graph_head_to_string: Labeling function for graph heads.
        vertex_to_string: Labeling function for vertices.
        edge_to_string: Labeling function for edges.
        directed: If False, edge direction is ignored.
    """

    def __init__(
        self,
        graph_head_to_string: GraphHeadLabeler,
        vertex_to_string: VertexLabeler,
        edge_to_string: EdgeLabeler,
        directed: bool = True,
    ):
        self.graph_head_to_string = graph_head_to_string
        self.vertex_to_string = vertex_to_string
        self.edge_to_string = edge_to_string
        self.directed = directed

    def graph_label(self, graph: PropertyGraph) -> str:
        """Compute the canonical label of a graph."""
        vertex_labels = graph.vertex_collection().map(
            lambda vertex: (vertex.id, self.vertex_to_string(vertex))
        )
        edge_labels = graph.edge_collection().map(
            lambda edge: (edge.source_id, edge.target_id, self.edge_to_string(edge))
        )

        # (source id, target id, edge label, source label, target label)
        with_endpoints = (
            edge_labels.join(vertex_labels, lambda e: e[0], lambda v: v[0])
            .map(lambda pair: pair[0] + (pair[1][1],))
            .join(vertex_labels, lambda e: e[1], lambda v: v[0])
            .map(lambda pair: pair[0] + (pair[1][1],))
        )
        adjacency = with_endpoints.flat_map(self._adjacency_entries)

        rows = vertex_labels.co_group(adjacency, lambda v: v[0], lambda a: a[0]).flat_map(
            lambda group: [row[1] + "".join(sorted(a[1] for a in group[2])) for row in group[1]]
        )

        return self.graph_head_to_string(graph.head) + "[" + "\n".join(sorted(rows.collect())) + "]"

    def collection_label(self, collection: GraphCollection) -> str:
        """Compute the canonical label of a graph collection."""
        return "\n".join(sorted(self.graph_labels(collection)))

    def graph_labels(self, collection: GraphCollection) -> list[str]:
        return [self.graph_label(graph) for graph in collection]

    def _adjacency_entries(self, edge: tuple[str, str, str, str, str]) -> list[tuple[str, str]]:
        source_id, target_id, label, source_label, target_label = edge
        if self.directed:
            return [
                (source_id, f"-{label}->{target_label}"),
                (target_id, f"<-{label}-{source_label}"),
            ]
        return [
            (source_id, f"-{label}-{target_label}"),
            (target_id, f"-{label}-{source_label}"),
        ]
