"""Materialization of embeddings into graphs."""

from typing import Iterable

from ..model.elements import GraphHead, new_id
from ..model.graph import GraphCollection, PropertyGraph
from .embedding import Embedding, EmbeddingMetaData, EntryType

VARIABLE_MAPPING_KEY = "__variable_mapping"


def embedding_to_graph(
    embedding: Embedding, metadata: EmbeddingMetaData, graph: PropertyGraph
) -> PropertyGraph:
    """Build the subgraph of ``graph`` bound by one embedding.

    The new graph head carries the variable mapping under
    ``__variable_mapping``; path variables map to lists of ids.
    """
    vertex_ids: dict[str, None] = {}
    edge_ids: dict[str, None] = {}
    mapping = {}

    for variable, entry_type in metadata.entries:
        value = embedding.ids[metadata.column(variable)]
        if entry_type == EntryType.VERTEX:
            vertex_ids[value] = None
            mapping[variable] = value
        elif entry_type == EntryType.EDGE:
            edge_ids[value] = None
            mapping[variable] = value
        else:
            edge_ids.update(dict.fromkeys(value[0::2]))
            vertex_ids.update(dict.fromkeys(value[1::2]))
            mapping[variable] = list(value)

    # Endpoints of bound edges belong to the result even if not projected.
    edges = [graph.get_edge(edge_id) for edge_id in edge_ids]
    for edge in edges:
        vertex_ids.update(dict.fromkeys((edge.source_id, edge.target_id)))

    head = GraphHead(id=new_id(), properties={VARIABLE_MAPPING_KEY: mapping})
    return PropertyGraph.from_elements(
        (graph.get_vertex(vertex_id) for vertex_id in vertex_ids), edges, head=head
    )


def embeddings_to_collection(
    embeddings: Iterable[Embedding], metadata: EmbeddingMetaData, graph: PropertyGraph
) -> GraphCollection:
    """Build one graph per embedding."""
    return GraphCollection(embedding_to_graph(e, metadata, graph) for e in embeddings)
