"""Graph and graph collection equality based on canonical labels."""

from .canonical import (
    CanonicalAdjacencyMatrixBuilder,
    edge_to_data_string,
    edge_to_id_string,
    graph_head_to_data_string,
    graph_head_to_empty_string,
    vertex_to_data_string,
    vertex_to_id_string,
)
from .equality import (
    CollectionEquality,
    CollectionEqualityByGraphIds,
    GraphEquality,
    collection_equals_by_data,
    collection_equals_by_element_data,
    collection_equals_by_element_ids,
    collection_equals_by_graph_ids,
    equals_by_data,
    equals_by_element_data,
    equals_by_element_ids,
)

__all__ = [
    "CanonicalAdjacencyMatrixBuilder",
    "edge_to_data_string",
    "edge_to_id_string",
    "graph_head_to_data_string",
    "graph_head_to_empty_string",
    "vertex_to_data_string",
    "vertex_to_id_string",
    "CollectionEquality",
    "CollectionEqualityByGraphIds",
    "GraphEquality",
    "collection_equals_by_data",
    "collection_equals_by_element_data",
    "collection_equals_by_element_ids",
    "collection_equals_by_graph_ids",
    "equals_by_data",
    "equals_by_element_data",
    "equals_by_element_ids",
]
