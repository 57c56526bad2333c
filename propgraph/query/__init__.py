"""Query layer: pattern parsing, query graphs and predicates."""

from .errors import (
    DuplicateVariableError,
    QueryError,
    QuerySyntaxError,
    UnresolvedVariableError,
    UnsupportedPatternError,
)
from .parser import QueryHandler, parse_query
from .predicates import (
    CNF,
    And,
    Clause,
    Comparator,
    Comparison,
    ElementRef,
    Literal,
    Not,
    Or,
    PropertyRef,
    to_cnf,
)
from .query_graph import Direction, QueryEdge, QueryGraph, QueryVertex

__all__ = [
    # Errors
    "QueryError",
    "QuerySyntaxError",
    "DuplicateVariableError",
    "UnresolvedVariableError",
    "UnsupportedPatternError",
    # Parsing
    "QueryHandler",
    "parse_query",
    # Query graph
    "Direction",
    "QueryEdge",
    "QueryGraph",
    "QueryVertex",
    # Predicates
    "CNF",
    "And",
    "Clause",
    "Comparator",
    "Comparison",
    "ElementRef",
    "Literal",
    "Not",
    "Or",
    "PropertyRef",
    "to_cnf",
]
