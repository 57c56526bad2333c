"""Cardinality estimates for plan operators."""

from ..query.query_graph import Direction, QueryEdge, QueryGraph
from ..statistics import GraphStatistics


class CardinalityEstimator:
    """Estimates operator output sizes from graph statistics.

    Estimates assume independence between labels; predicate selectivity is
    not modelled.
    """

    def __init__(self, query_graph: QueryGraph, statistics: GraphStatistics):
        self.query_graph = query_graph
        self.statistics = statistics

    def label_of(self, variable: str) -> str | None:
        return self.query_graph.get_vertex(variable).label

    def vertex_cardinality(self, variable: str) -> float:
        """Number of vertices matching a query vertex."""
        return self.statistics.vertex_cardinality(self.label_of(variable))

    def degree(self, edge: QueryEdge, from_variable: str) -> float:
        """Average number of vertices reached from ``from_variable`` over ``edge``.

        For variable-length edges this is the number of paths, summed over all
        lengths within the bounds.
        """
        outgoing = from_variable == edge.source
        from_label = self.label_of(from_variable)
        if not edge.is_variable_length:
            to_label = self.label_of(edge.other(from_variable))
            return self._hop_degree(edge, from_label, to_label, outgoing)

        # Inner vertices of a path can carry any label.
        first = self._hop_degree(edge, from_label, None, outgoing)
        inner = self._hop_degree(edge, None, None, outgoing)
        total = 0.0
        for length in range(edge.lower, edge.upper + 1):
            total += 1.0 if length == 0 else first * inner ** (length - 1)
        return total

    def edge_cardinality(self, edge: QueryEdge) -> float:
        """Number of embeddings emitted by an edge scan."""
        return self.vertex_cardinality(edge.source) * self.degree(edge, edge.source)

    def _hop_degree(
        self, edge: QueryEdge, from_label: str | None, to_label: str | None, outgoing: bool
    ) -> float:
        stats = self.statistics
        if edge.direction == Direction.UNDIRECTED:
            return stats.average_degree(
                from_label, edge.label, to_label, outgoing=True
            ) + stats.average_degree(from_label, edge.label, to_label, outgoing=False)
        return stats.average_degree(from_label, edge.label, to_label, outgoing=outgoing)
