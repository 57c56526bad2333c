"""Equality operators for graphs and graph collections."""

import logging
from collections import Counter

from ..model.graph import GraphCollection, PropertyGraph
from .canonical import (
    CanonicalAdjacencyMatrixBuilder,
    EdgeLabeler,
    GraphHeadLabeler,
    VertexLabeler,
    edge_to_data_string,
    edge_to_id_string,
    graph_head_to_data_string,
    graph_head_to_empty_string,
    vertex_to_data_string,
    vertex_to_id_string,
)

logger = logging.getLogger(__name__)


class GraphEquality:
    """Compares two graphs by their canonical labels."""

    def __init__(
        self,
        graph_head_to_string: GraphHeadLabeler,
        vertex_to_string: VertexLabeler,
        edge_to_string: EdgeLabeler,
        directed: bool = True,
    ):
        self.builder = CanonicalAdjacencyMatrixBuilder(
            graph_head_to_string, vertex_to_string, edge_to_string, directed
        )

    def execute(self, first: PropertyGraph, second: PropertyGraph) -> bool:
        equal = self.builder.graph_label(first) == self.builder.graph_label(second)
        logger.debug("Graphs %s and %s equal: %s", first.head.id, second.head.id, equal)
        return equal


class CollectionEquality:
    """Compares two collections as multisets of canonical graph labels."""

    def __init__(
        self,
        graph_head_to_string: GraphHeadLabeler,
        vertex_to_string: VertexLabeler,
        edge_to_string: EdgeLabeler,
        directed: bool = True,
    ):
        self.builder = CanonicalAdjacencyMatrixBuilder(
            graph_head_to_string, vertex_to_string, edge_to_string, directed
        )

    def execute(self, first: GraphCollection, second: GraphCollection) -> bool:
        return Counter(self.builder.graph_labels(first)) == Counter(
            self.builder.graph_labels(second)
        )


class CollectionEqualityByGraphIds:
    """Compares two collections by the ids of their graph heads."""

    def execute(self, first: GraphCollection, second: GraphCollection) -> bool:
        groups = first.head_collection().co_group(
            second.head_collection(), lambda head: head.id, lambda head: head.id
        )
        return groups.filter(lambda group: len(group[1]) != len(group[2])).is_empty()


# -----------------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------------


def equals_by_element_ids(first: PropertyGraph, second: PropertyGraph) -> bool:
    """Whether both graphs contain the same vertex and edge ids."""
    return GraphEquality(
        graph_head_to_empty_string, vertex_to_id_string, edge_to_id_string
    ).execute(first, second)


def equals_by_element_data(
    first: PropertyGraph, second: PropertyGraph, directed: bool = True
) -> bool:
    """Whether both graphs have equal element data, ignoring the graph heads."""
    return GraphEquality(
        graph_head_to_empty_string, vertex_to_data_string, edge_to_data_string, directed
    ).execute(first, second)


def equals_by_data(first: PropertyGraph, second: PropertyGraph, directed: bool = True) -> bool:
    """Whether both graphs have equal head and element data."""
    return GraphEquality(
        graph_head_to_data_string, vertex_to_data_string, edge_to_data_string, directed
    ).execute(first, second)


def collection_equals_by_graph_ids(first: GraphCollection, second: GraphCollection) -> bool:
    return CollectionEqualityByGraphIds().execute(first, second)


def collection_equals_by_element_ids(first: GraphCollection, second: GraphCollection) -> bool:
    return CollectionEquality(
        graph_head_to_empty_string, vertex_to_id_string, edge_to_id_string
    ).execute(first, second)


def collection_equals_by_element_data(
    first: GraphCollection, second: GraphCollection, directed: bool = True
) -> bool:
    return CollectionEquality(
        graph_head_to_empty_string, vertex_to_data_string, edge_to_data_string, directed
    ).execute(first, second)


def collection_equals_by_data(
    first: GraphCollection, second: GraphCollection, directed: bool = True
) -> bool:
    return CollectionEquality(
        graph_head_to_data_string, vertex_to_data_string, edge_to_data_string, directed
    ).execute(first, second)
