"""Pattern matching: planning and execution of query graphs."""

from .cypher import CypherPatternMatching, match_pattern
from .embedding import Embedding, EmbeddingMetaData, EntryType
from .errors import ExecutionFailure
from .estimation import CardinalityEstimator
from .executor import PlanExecutor
from .operators import EdgeScan, Expand, Filter, Join, PlanNode, Projection, VertexScan
from .planner import GreedyPlanner, PlanTable, PlanTableEntry
from .results import VARIABLE_MAPPING_KEY, embedding_to_graph, embeddings_to_collection
from .strategy import MatchStrategy

__all__ = [
    "CypherPatternMatching",
    "match_pattern",
    "Embedding",
    "EmbeddingMetaData",
    "EntryType",
    "ExecutionFailure",
    "CardinalityEstimator",
    "PlanExecutor",
    "EdgeScan",
    "Expand",
    "Filter",
    "Join",
    "PlanNode",
    "Projection",
    "VertexScan",
    "GreedyPlanner",
    "PlanTable",
    "PlanTableEntry",
    "VARIABLE_MAPPING_KEY",
    "embedding_to_graph",
    "embeddings_to_collection",
    "MatchStrategy",
]
