"""Entry point for pattern matching queries."""

import logging

from ..model.graph import GraphCollection, PropertyGraph
from ..query.errors import QueryError
from ..query.parser import parse_query
from ..query.query_graph import QueryGraph
from ..statistics import GraphStatistics
from ..substrate import DistributedCollection
from .embedding import Embedding, EmbeddingMetaData
from .errors import ExecutionFailure
from .executor import PlanExecutor
from .planner import GreedyPlanner, PlanTableEntry
from .results import embeddings_to_collection
from .strategy import DEFAULT_EDGE_STRATEGY, DEFAULT_VERTEX_STRATEGY, MatchStrategy

logger = logging.getLogger(__name__)


class CypherPatternMatching:
    """Matches a pattern query against property graphs.

    The query is parsed and validated on construction, so syntax and binding
    errors surface before any execution.

    Args:
        query: Pattern string or an already built query graph.
        statistics: Statistics used for planning. If None, statistics are
            computed from the data graph on execution.
        vertex_strategy: Strategy for vertex bindings.
        edge_strategy: Strategy for edge bindings.
        return_variables: Variables to project onto, all if None.

    Raises:
        QuerySyntaxError: If the query text is malformed.
        UnresolvedVariableError: If a referenced variable is not declared.
        UnsupportedPatternError: If the pattern cannot be evaluated.
    """

    def __init__(
        self,
        query: str | QueryGraph,
        statistics: GraphStatistics | None = None,
        vertex_strategy: MatchStrategy = DEFAULT_VERTEX_STRATEGY,
        edge_strategy: MatchStrategy = DEFAULT_EDGE_STRATEGY,
        return_variables: list[str] | None = None,
    ):
        self.query_graph = parse_query(query) if isinstance(query, str) else query
        self.statistics = statistics
        self.vertex_strategy = vertex_strategy
        self.edge_strategy = edge_strategy
        self.return_variables = return_variables
        # Validates the return variables.
        GreedyPlanner(self.query_graph, statistics, return_variables)

    def plan(self, statistics: GraphStatistics | None = None) -> PlanTableEntry:
        """Plan the query with the given (or configured) statistics."""
        stats = statistics if statistics is not None else self.statistics
        return GreedyPlanner(self.query_graph, stats, self.return_variables).plan()

    def plan_for(self, graph: PropertyGraph) -> PlanTableEntry:
        """Plan the query for a data graph."""
        stats = self.statistics
        if stats is None:
            stats = GraphStatistics.from_graph(graph)
        return self.plan(stats)

    def execute(
        self, graph: PropertyGraph
    ) -> tuple[DistributedCollection[Embedding], EmbeddingMetaData]:
        """Build the lazy result collection and its column layout."""
        entry = self.plan_for(graph)
        executor = PlanExecutor.for_graph(graph, self.vertex_strategy, self.edge_strategy)
        return executor.execute(entry.node), entry.metadata

    def collect(self, graph: PropertyGraph) -> tuple[list[Embedding], EmbeddingMetaData]:
        """Evaluate the query and collect all embeddings.

        Raises:
            ExecutionFailure: If evaluation fails; no partial result is returned.
        """
        embeddings, metadata = self.execute(graph)
        try:
            result = embeddings.collect()
        except QueryError:
            raise
        except Exception as e:
            raise ExecutionFailure(f"Query execution failed: {e}", e) from e
        logger.debug("Query produced %d embeddings", len(result))
        return result, metadata

    def to_graph_collection(self, graph: PropertyGraph) -> GraphCollection:
        """Evaluate the query and build one graph per embedding."""
        embeddings, metadata = self.collect(graph)
        return embeddings_to_collection(embeddings, metadata, graph)


def match_pattern(
    graph: PropertyGraph,
    query: str,
    vertex_strategy: MatchStrategy = DEFAULT_VERTEX_STRATEGY,
    edge_strategy: MatchStrategy = DEFAULT_EDGE_STRATEGY,
) -> list[dict]:
    """Match a query and return one variable mapping per embedding."""
    embeddings, metadata = CypherPatternMatching(
        query, vertex_strategy=vertex_strategy, edge_strategy=edge_strategy
    ).collect(graph)
    return [embedding.to_mapping(metadata) for embedding in embeddings]
