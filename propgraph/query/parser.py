"""Pattern parser turning ``MATCH ... WHERE ...`` text into a QueryGraph."""

import logging

from .errors import DuplicateVariableError, UnsupportedPatternError
from .grammar import PATTERN_GRAMMAR, parse_with
from .predicates import CNF, Comparator, Comparison, Literal, Predicate, PropertyRef, to_cnf
from .query_graph import QueryEdge, QueryGraph, QueryVertex
from .transformer import MatchClause, NodePattern, PatternTransformer, RelationshipPattern

logger = logging.getLogger(__name__)

_TRANSFORMER = PatternTransformer()


class QueryHandler:
    """Builds a QueryGraph from a pattern string.

    The text is parsed with the lark grammar in ``pattern.lark``; this class
    then declares the variables in the order they appear, checks them for
    conflicts and collects inline properties as equality predicates.
    """

    def __init__(self, text: str):
        self.text = text
        self._vertices: dict[str, QueryVertex] = {}
        self._edges: dict[str, QueryEdge] = {}
        self._predicates: list[Predicate] = []
        self._anonymous_vertices = 0
        self._anonymous_edges = 0

    @classmethod
    def from_string(cls, text: str) -> QueryGraph:
        """Parse a pattern string into a QueryGraph."""
        return cls(text).build()

    def build(self) -> QueryGraph:
        """Parse the pattern and validate the resulting query graph.

        Raises:
            QuerySyntaxError: If the text is malformed.
            UnresolvedVariableError: If a predicate references an undeclared variable.
            UnsupportedPatternError: If the pattern is not connected.
        """
        clause: MatchClause = parse_with(PATTERN_GRAMMAR, _TRANSFORMER, self.text)

        for pattern in clause.patterns:
            left = self._declare_node(pattern.start)
            for relationship, node in pattern.steps:
                right = self._declare_node(node)
                self._declare_relationship(relationship, left, right)
                left = right

        if clause.where is not None:
            self._predicates.append(clause.where)

        predicates = CNF()
        for predicate in self._predicates:
            predicates = predicates.and_(to_cnf(predicate))

        query_graph = QueryGraph(
            vertices=tuple(self._vertices.values()),
            edges=tuple(self._edges.values()),
            predicates=predicates,
        )

        if not query_graph.is_connected():
            components = query_graph.connected_components()
            described = " | ".join(",".join(sorted(c)) for c in components)
            raise UnsupportedPatternError(
                f"Pattern has {len(components)} disconnected components: {described}"
            )

        logger.debug("Parsed query graph: %s", query_graph)
        return query_graph

    # -------------------------------------------------------------------------
    # Declarations
    # -------------------------------------------------------------------------

    def _declare_node(self, node: NodePattern) -> str:
        if node.variable is None:
            variable = f"__v{self._anonymous_vertices}"
            self._anonymous_vertices += 1
            self._vertices[variable] = QueryVertex(variable, node.label, anonymous=True)
        else:
            variable = node.variable
            self._declare_vertex(variable, node.label, node.position)

        self._add_property_predicates(variable, node.properties)
        return variable

    def _declare_vertex(self, variable: str, label: str | None, position: int | None) -> None:
        if variable in self._edges:
            raise DuplicateVariableError(
                f"Variable '{variable}' is already used for an edge", position, variable
            )
        existing = self._vertices.get(variable)
        if existing is None:
            self._vertices[variable] = QueryVertex(variable, label)
        elif label is not None and existing.label is None:
            self._vertices[variable] = QueryVertex(variable, label)
        elif label is not None and label != existing.label:
            raise DuplicateVariableError(
                f"Vertex '{variable}' redeclared with label '{label}' "
                f"(was '{existing.label}')",
                position,
                variable,
            )

    def _declare_relationship(
        self, relationship: RelationshipPattern, left: str, right: str
    ) -> None:
        source, target = (right, left) if relationship.incoming else (left, right)

        if relationship.variable is None:
            variable = f"__e{self._anonymous_edges}"
            self._anonymous_edges += 1
        else:
            variable = relationship.variable
            if variable in self._edges or variable in self._vertices:
                raise DuplicateVariableError(
                    f"Variable '{variable}' declared twice", relationship.position, variable
                )

        lower, upper = relationship.bounds or (None, None)
        self._edges[variable] = QueryEdge(
            variable=variable,
            source=source,
            target=target,
            label=relationship.label,
            direction=relationship.direction,
            lower=lower,
            upper=upper,
            anonymous=relationship.variable is None,
        )
        self._add_property_predicates(variable, relationship.properties)

    def _add_property_predicates(self, variable: str, properties: dict) -> None:
        for key, value in properties.items():
            self._predicates.append(
                Comparison(PropertyRef(variable, key), Comparator.EQ, Literal(value))
            )


def parse_query(text: str) -> QueryGraph:
    """Parse a pattern string into a QueryGraph.

    Args:
        text: The ``MATCH ... [WHERE ...]`` pattern.

    Returns:
        The validated query graph.

    Raises:
        QuerySyntaxError: If the text is malformed.
        UnresolvedVariableError: If a predicate references an undeclared variable.
        UnsupportedPatternError: If the pattern cannot be evaluated.
    """
    return QueryHandler.from_string(text)
