"""Evaluation of plan trees against the collection substrate."""

import logging
from typing import Any, Iterable, Iterator

from ..model.elements import Edge, Vertex
from ..model.graph import PropertyGraph
from ..query.predicates import CNF, MISSING, Bindings
from ..query.query_graph import Direction, QueryEdge
from ..substrate import DistributedCollection, JoinSide
from .embedding import Embedding, EmbeddingMetaData
from .operators import EdgeScan, Expand, Filter, Join, PlanNode, Projection, VertexScan
from .strategy import DEFAULT_EDGE_STRATEGY, DEFAULT_VERTEX_STRATEGY, MatchStrategy

logger = logging.getLogger(__name__)

# (start vertex id, edge, reached vertex id)
Step = tuple[str, Edge, str]


class ElementBindings(Bindings):
    """Bindings of a single variable to a graph element."""

    def __init__(self, variable: str, element: Vertex | Edge):
        self.variable = variable
        self.element = element

    def element_id(self, variable: str) -> Any:
        return self.element.id if variable == self.variable else MISSING

    def property_value(self, variable: str, key: str) -> Any:
        if variable != self.variable:
            return MISSING
        return self.element.properties.get(key, MISSING)


class EmbeddingBindings(Bindings):
    """Bindings of an embedding, reading cached properties first.

    Properties that were not cached are looked up in ``property_index``
    (element id to properties), when one is given.
    """

    def __init__(
        self,
        embedding: Embedding,
        metadata: EmbeddingMetaData,
        property_index: dict[str, dict[str, Any]] | None = None,
    ):
        self.embedding = embedding
        self.metadata = metadata
        self.property_index = property_index

    def element_id(self, variable: str) -> Any:
        if not self.metadata.has_variable(variable):
            return MISSING
        return self.embedding.ids[self.metadata.column(variable)]

    def property_value(self, variable: str, key: str) -> Any:
        column = self.metadata.property_column(variable, key)
        if column is not None:
            return self.embedding.properties[column]
        if self.property_index is None:
            return MISSING
        element_id = self.element_id(variable)
        if element_id is MISSING:
            return MISSING
        return self.property_index.get(element_id, {}).get(key, MISSING)


class PlanExecutor:
    """Evaluates plan nodes to collections of embeddings.

    All side data is injected: the vertex and edge collections of the data
    graph and, optionally, a property index used by filters on properties
    that were not cached by a scan.
    """

    def __init__(
        self,
        vertices: DistributedCollection[Vertex],
        edges: DistributedCollection[Edge],
        vertex_strategy: MatchStrategy = DEFAULT_VERTEX_STRATEGY,
        edge_strategy: MatchStrategy = DEFAULT_EDGE_STRATEGY,
        property_index: dict[str, dict[str, Any]] | None = None,
    ):
        self.vertices = vertices
        self.edges = edges
        self.vertex_strategy = vertex_strategy
        self.edge_strategy = edge_strategy
        self.property_index = property_index

    @classmethod
    def for_graph(
        cls,
        graph: PropertyGraph,
        vertex_strategy: MatchStrategy = DEFAULT_VERTEX_STRATEGY,
        edge_strategy: MatchStrategy = DEFAULT_EDGE_STRATEGY,
    ) -> "PlanExecutor":
        """Create an executor over the collections of a graph."""
        return cls(
            graph.vertex_collection(),
            graph.edge_collection(),
            vertex_strategy,
            edge_strategy,
            property_index=graph.property_index(),
        )

    def execute(self, node: PlanNode) -> DistributedCollection[Embedding]:
        """Build the (lazy) collection of embeddings produced by ``node``."""
        match node:
            case VertexScan():
                return self._vertex_scan(node)
            case EdgeScan():
                return self._edge_scan(node)
            case Expand():
                return self._expand(node)
            case Join():
                return self._join(node)
            case Filter():
                return self._filter(node)
            case Projection():
                return self._projection(node)
            case _:
                raise TypeError(f"Unknown plan node: {type(node).__name__}")

    # -------------------------------------------------------------------------
    # Strategies
    # -------------------------------------------------------------------------

    def is_valid(self, embedding: Embedding, metadata: EmbeddingMetaData) -> bool:
        """Check an embedding against the vertex and edge strategies."""
        if self.vertex_strategy == MatchStrategy.ISOMORPHISM:
            ids = embedding.vertex_ids(metadata)
            if len(ids) != len(set(ids)):
                return False
        if self.edge_strategy == MatchStrategy.ISOMORPHISM:
            ids = embedding.edge_ids(metadata)
            if len(ids) != len(set(ids)):
                return False
        return True

    def _valid(
        self, embeddings: DistributedCollection[Embedding], metadata: EmbeddingMetaData
    ) -> DistributedCollection[Embedding]:
        if (
            self.vertex_strategy == MatchStrategy.HOMOMORPHISM
            and self.edge_strategy == MatchStrategy.HOMOMORPHISM
        ):
            return embeddings
        return embeddings.filter(lambda embedding: self.is_valid(embedding, metadata))

    # -------------------------------------------------------------------------
    # Scans
    # -------------------------------------------------------------------------

    def _vertex_scan(self, node: VertexScan) -> DistributedCollection[Embedding]:
        label, predicates, variable = node.label, node.predicates, node.variable

        def matches(vertex: Vertex) -> bool:
            if label is not None and vertex.label != label:
                return False
            return predicates.evaluate(ElementBindings(variable, vertex))

        return self.vertices.filter(matches).map(
            lambda vertex: Embedding((vertex.id,), _cached(vertex, node.properties))
        )

    def _edge_scan(self, node: EdgeScan) -> DistributedCollection[Embedding]:
        edge = node.edge

        if edge.is_variable_length:
            seeds = self.vertices.map(lambda vertex: Embedding((vertex.id,)))
            steps = self._steps(edge, edge.source)
            paths = _expand_paths(seeds, 0, steps, edge.lower, edge.upper)
            embeddings = paths.map(lambda item: item[0].extend(item[1]).extend(item[2]))
        else:
            steps = self._steps(edge, edge.source, node.predicates)
            embeddings = steps.map(
                lambda step: Embedding(
                    (step[0], step[1].id, step[2]), _cached(step[1], node.properties)
                )
            )

        return self._valid(embeddings, node.metadata)

    # -------------------------------------------------------------------------
    # Expand
    # -------------------------------------------------------------------------

    def _expand(self, node: Expand) -> DistributedCollection[Embedding]:
        edge = node.edge
        input_metadata = node.input.metadata
        from_column = input_metadata.column(node.from_variable)
        embeddings = self.execute(node.input)

        if edge.is_variable_length:
            steps = self._steps(edge, node.from_variable)
            paths = _expand_paths(embeddings, from_column, steps, edge.lower, edge.upper)
            # (embedding with the path column, reached vertex id)
            extended = paths.map(lambda item: (item[0].extend(item[1]), item[2]))
        else:
            steps = self._steps(edge, node.from_variable, node.predicates)
            extended = embeddings.join(
                steps,
                lambda embedding: embedding.ids[from_column],
                lambda step: step[0],
                JoinSide.RIGHT,
            ).map(
                lambda pair: (
                    pair[0].extend(pair[1][1].id, _cached(pair[1][1], node.properties)),
                    pair[1][2],
                )
            )

        if node.target is None:
            to_column = input_metadata.column(node.to_variable)
            result = extended.filter(lambda item: item[0].ids[to_column] == item[1]).map(
                lambda item: item[0]
            )
            return self._valid(result, node.metadata)

        target_metadata = node.target.metadata
        property_columns = list(range(len(target_metadata.properties)))
        result = extended.join(
            self.execute(node.target),
            lambda item: item[1],
            lambda candidate: candidate.ids[0],
            JoinSide.RIGHT,
        ).map(
            lambda pair: pair[0][0]
            .extend(pair[0][1])
            .merge(pair[1], (), property_columns)
        )
        return self._valid(result, node.metadata)

    def _steps(
        self, edge: QueryEdge, from_variable: str, predicates: CNF | None = None
    ) -> DistributedCollection[Step]:
        """Traversal steps over data edges matching ``edge``, leaving ``from_variable``'s side."""
        label = edge.label
        variable = edge.variable
        undirected = edge.direction == Direction.UNDIRECTED
        forward = from_variable == edge.source

        def matches(data_edge: Edge) -> bool:
            if label is not None and data_edge.label != label:
                return False
            return not predicates or predicates.evaluate(ElementBindings(variable, data_edge))

        def orient(data_edge: Edge) -> Iterator[Step]:
            if undirected or forward:
                yield (data_edge.source_id, data_edge, data_edge.target_id)
            if (undirected and data_edge.source_id != data_edge.target_id) or not (
                undirected or forward
            ):
                yield (data_edge.target_id, data_edge, data_edge.source_id)

        return self.edges.filter(matches).flat_map(orient)

    # -------------------------------------------------------------------------
    # Join, Filter, Projection
    # -------------------------------------------------------------------------

    def _join(self, node: Join) -> DistributedCollection[Embedding]:
        left_metadata = node.left.metadata
        right_metadata = node.right.metadata
        left_columns = [left_metadata.column(v) for v in node.variables]
        right_columns = [right_metadata.column(v) for v in node.variables]
        columns = [
            i
            for i, (variable, _) in enumerate(right_metadata.entries)
            if not left_metadata.has_variable(variable)
        ]
        property_columns = [
            i
            for i, prop in enumerate(right_metadata.properties)
            if prop not in left_metadata.properties
        ]

        joined = self.execute(node.left).join(
            self.execute(node.right),
            lambda embedding: tuple(embedding.ids[i] for i in left_columns),
            lambda embedding: tuple(embedding.ids[i] for i in right_columns),
            node.build_side,
        ).map(lambda pair: pair[0].merge(pair[1], columns, property_columns))
        return self._valid(joined, node.metadata)

    def _filter(self, node: Filter) -> DistributedCollection[Embedding]:
        metadata = node.input.metadata
        predicates = node.predicates
        index = self.property_index
        return self.execute(node.input).filter(
            lambda embedding: predicates.evaluate(EmbeddingBindings(embedding, metadata, index))
        )

    def _projection(self, node: Projection) -> DistributedCollection[Embedding]:
        metadata = node.input.metadata
        columns = [metadata.column(v) for v in node.variables]
        return self.execute(node.input).map(lambda embedding: embedding.project(columns))


def _cached(element: Vertex | Edge, keys: Iterable[str]) -> tuple[Any, ...]:
    return tuple(element.properties.get(key, MISSING) for key in keys)


def _expand_paths(
    embeddings: DistributedCollection[Embedding],
    column: int,
    steps: DistributedCollection[Step],
    lower: int,
    upper: int,
) -> DistributedCollection[tuple[Embedding, tuple[str, ...], str]]:
    """Follow ``steps`` from the vertex in ``column`` for ``lower..upper`` hops.

    Emits ``(embedding, path, reached vertex id)`` for every path that does not
    repeat an edge. Each hop is one join of the frontier with the steps.
    """
    # Frontier items: (embedding, alternating edge/vertex ids incl. last vertex, edge ids)
    frontier = embeddings.map(
        lambda embedding: (embedding, (), frozenset(), embedding.ids[column])
    )
    levels = []
    if lower == 0:
        levels.append(frontier.map(lambda item: (item[0], (), item[3])))

    for hop in range(1, upper + 1):
        frontier = frontier.join(
            steps, lambda item: item[3], lambda step: step[0], JoinSide.RIGHT
        ).filter(lambda pair: pair[1][1].id not in pair[0][2]).map(
            lambda pair: (
                pair[0][0],
                pair[0][1] + (pair[1][1].id, pair[1][2]),
                pair[0][2] | {pair[1][1].id},
                pair[1][2],
            )
        )
        if hop >= lower:
            levels.append(frontier.map(lambda item: (item[0], item[1][:-1], item[3])))

    if not levels:
        return frontier.filter(lambda item: False)

    result = levels[0]
    for level in levels[1:]:
        result = result.union(level)
    return result
