"""Greedy cost-based query planner.

Planning starts with one leaf entry per query vertex. Each step picks the
cheapest way to bind one more query edge, either by expanding an entry into a
leaf vertex, by closing a cycle inside one entry, or by joining two grown
entries, until a single entry binds the whole query graph.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator

from ..query.errors import UnresolvedVariableError, UnsupportedPatternError
from ..query.predicates import CNF, Clause
from ..query.query_graph import QueryEdge, QueryGraph
from ..statistics import GraphStatistics
from ..substrate import JoinSide
from .embedding import EmbeddingMetaData, EntryType
from .estimation import CardinalityEstimator
from .operators import EdgeScan, Expand, Filter, Join, PlanNode, Projection, VertexScan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanTableEntry:
    """A partial plan with the variables it binds and its estimated cost."""

    node: PlanNode
    variables: frozenset[str]
    clauses: frozenset[Clause] = frozenset()
    cost: float = 0.0
    leaf: bool = False

    @property
    def metadata(self) -> EmbeddingMetaData:
        return self.node.metadata


class PlanTable:
    """The current set of disjoint partial plans."""

    def __init__(self, entries: list[PlanTableEntry] | None = None):
        self.entries: list[PlanTableEntry] = list(entries or [])

    def entry_for(self, variable: str) -> PlanTableEntry:
        for entry in self.entries:
            if variable in entry.variables:
                return entry
        raise KeyError(variable)

    def replace(self, consumed: list[PlanTableEntry], entry: PlanTableEntry) -> None:
        self.entries = [e for e in self.entries if all(e is not c for c in consumed)]
        self.entries.append(entry)

    def __iter__(self) -> Iterator[PlanTableEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class _Candidate:
    entry: PlanTableEntry
    consumed: list[PlanTableEntry] = field(hash=False, compare=False)
    new_variables: tuple[str, ...] = ()
    edge_variable: str = ""

    @property
    def rank(self) -> tuple[float, tuple[str, ...], str]:
        return (self.entry.cost, self.new_variables, self.edge_variable)


class GreedyPlanner:
    """Builds an execution plan for a query graph.

    Args:
        query_graph: The validated query graph.
        statistics: Statistics of the data graph; defaults are used if None.
        return_variables: Variables of the final projection, all if None.

    Raises:
        UnresolvedVariableError: If a return variable is not declared.
    """

    def __init__(
        self,
        query_graph: QueryGraph,
        statistics: GraphStatistics | None = None,
        return_variables: list[str] | None = None,
    ):
        self.query_graph = query_graph
        self.statistics = statistics if statistics is not None else GraphStatistics()
        self.estimator = CardinalityEstimator(query_graph, self.statistics)

        declared = query_graph.variables
        if return_variables is None:
            self.return_variables = tuple(declared)
        else:
            for variable in return_variables:
                if variable not in declared:
                    raise UnresolvedVariableError(
                        f"Return variable '{variable}' is not declared", variable
                    )
            self.return_variables = tuple(dict.fromkeys(return_variables))

    def plan(self) -> PlanTableEntry:
        """Compute the cheapest plan found by greedy search.

        Raises:
            UnsupportedPatternError: If the query graph cannot be fully bound.
        """
        table = PlanTable([self._leaf(v.variable) for v in self.query_graph.vertices])

        while not self._complete(table):
            candidates = list(self._candidates(table))
            if not candidates:
                raise UnsupportedPatternError(
                    "Query graph cannot be bound by a single plan; is it connected?"
                )
            best = min(candidates, key=lambda c: c.rank)
            logger.debug(
                "Binding %s with %s (cost %.2f)",
                best.edge_variable,
                best.entry.node.describe(),
                best.entry.cost,
            )
            table.replace(best.consumed, best.entry)

        entry = next(iter(table))
        root = Projection(
            input=entry.node,
            variables=self.return_variables,
            metadata=entry.metadata.project(self.return_variables),
            estimated_cardinality=entry.cost,
        )
        logger.info("Chose plan with estimated cardinality %.2f", entry.cost)
        return PlanTableEntry(root, entry.variables, entry.clauses, entry.cost)

    def _complete(self, table: PlanTable) -> bool:
        return len(table) == 1 and all(
            edge.variable in table.entries[0].variables for edge in self.query_graph.edges
        )

    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------

    def _leaf(self, variable: str) -> PlanTableEntry:
        vertex = self.query_graph.get_vertex(variable)
        clauses = self.query_graph.predicates_for([variable])
        properties = self.query_graph.required_properties(variable)
        cost = self.estimator.vertex_cardinality(variable)
        node = VertexScan(
            variable=variable,
            label=vertex.label,
            predicates=clauses,
            properties=properties,
            metadata=EmbeddingMetaData(((variable, EntryType.VERTEX),)).with_properties(
                variable, properties
            ),
            estimated_cardinality=cost,
        )
        return PlanTableEntry(node, frozenset({variable}), frozenset(clauses.clauses), cost, True)

    def _edge_predicates(self, edge: QueryEdge, applied: frozenset[Clause]) -> CNF:
        if edge.is_variable_length:
            # Path clauses are left to the Filter placed above the expansion
            return CNF()
        clauses = self.query_graph.predicates_for([edge.variable]).clauses
        return CNF(tuple(c for c in clauses if c not in applied))

    def _edge_properties(self, edge: QueryEdge) -> tuple[str, ...]:
        if edge.is_variable_length:
            return ()
        return self.query_graph.required_properties(edge.variable)

    def _edge_entry_type(self, edge: QueryEdge) -> EntryType:
        return EntryType.PATH if edge.is_variable_length else EntryType.EDGE

    def _with_filter(
        self, node: PlanNode, variables: frozenset[str], applied: frozenset[Clause], cost: float
    ) -> PlanTableEntry:
        """Wrap ``node`` in a filter for all clauses that just became evaluable."""
        pending = tuple(
            clause
            for clause in self.query_graph.predicates_for(variables).clauses
            if clause not in applied
        )
        if pending:
            node = Filter(
                input=node,
                predicates=CNF(pending),
                metadata=node.metadata,
                estimated_cardinality=cost,
            )
            applied = applied | frozenset(pending)
        return PlanTableEntry(node, variables, applied, cost)

    # -------------------------------------------------------------------------
    # Candidates
    # -------------------------------------------------------------------------

    def _candidates(self, table: PlanTable) -> Iterator[_Candidate]:
        bound = set().union(*(entry.variables for entry in table))
        for edge in self.query_graph.edges:
            if edge.variable in bound:
                continue
            source_entry = table.entry_for(edge.source)
            target_entry = table.entry_for(edge.target)

            if source_entry is target_entry:
                yield self._expand(source_entry, edge, edge.source, edge.target, None)
                continue
            if target_entry.leaf:
                yield self._expand(source_entry, edge, edge.source, edge.target, target_entry)
            if source_entry.leaf:
                yield self._expand(target_entry, edge, edge.target, edge.source, source_entry)
            if not source_entry.leaf and not target_entry.leaf:
                yield self._join(source_entry, target_entry, edge)

    def _expand(
        self,
        entry: PlanTableEntry,
        edge: QueryEdge,
        from_variable: str,
        to_variable: str,
        target: PlanTableEntry | None,
    ) -> _Candidate:
        degree = self.estimator.degree(edge, from_variable)
        predicates = self._edge_predicates(edge, entry.clauses)
        properties = self._edge_properties(edge)

        metadata = entry.metadata.with_entry(edge.variable, self._edge_entry_type(edge))
        metadata = metadata.with_properties(edge.variable, properties)
        variables = entry.variables | {edge.variable}
        applied = entry.clauses | frozenset(predicates.clauses)

        if target is None:
            cost = entry.cost * degree / max(self.estimator.vertex_cardinality(to_variable), 1.0)
            new_variables: tuple[str, ...] = (edge.variable,)
            consumed = [entry]
        else:
            cost = entry.cost * degree
            metadata = metadata.with_entry(to_variable, EntryType.VERTEX).merge(target.metadata)
            variables = variables | target.variables
            applied = applied | target.clauses
            new_variables = tuple(sorted((edge.variable, to_variable)))
            consumed = [entry, target]

        node = Expand(
            input=entry.node,
            edge=edge,
            from_variable=from_variable,
            to_variable=to_variable,
            target=target.node if target is not None else None,
            predicates=predicates,
            properties=properties,
            metadata=metadata,
            estimated_cardinality=cost,
        )
        return _Candidate(
            self._with_filter(node, variables, applied, cost),
            consumed,
            new_variables,
            edge.variable,
        )

    def _join(self, left: PlanTableEntry, right: PlanTableEntry, edge: QueryEdge) -> _Candidate:
        predicates = self._edge_predicates(edge, left.clauses | right.clauses)
        properties = self._edge_properties(edge)
        scan_metadata = EmbeddingMetaData(
            (
                (edge.source, EntryType.VERTEX),
                (edge.variable, self._edge_entry_type(edge)),
                (edge.target, EntryType.VERTEX),
            )
        ).with_properties(edge.variable, properties)
        scan = EdgeScan(
            edge=edge,
            predicates=predicates,
            properties=properties,
            metadata=scan_metadata,
            estimated_cardinality=self.estimator.edge_cardinality(edge),
        )

        degree = self.estimator.degree(edge, edge.source)
        half_cost = left.cost * degree
        inner = Join(
            left=left.node,
            right=scan,
            variables=(edge.source,),
            build_side=_build_side(left.cost, scan.estimated_cardinality),
            metadata=left.metadata.merge(scan_metadata),
            estimated_cardinality=half_cost,
        )

        cost = half_cost * right.cost / max(self.estimator.vertex_cardinality(edge.target), 1.0)
        node = Join(
            left=inner,
            right=right.node,
            variables=(edge.target,),
            build_side=_build_side(half_cost, right.cost),
            metadata=inner.metadata.merge(right.metadata),
            estimated_cardinality=cost,
        )

        variables = left.variables | right.variables | {edge.variable}
        applied = left.clauses | right.clauses | frozenset(predicates.clauses)
        new_variables = tuple(sorted(right.variables | {edge.variable}))
        return _Candidate(
            self._with_filter(node, variables, applied, cost),
            [left, right],
            new_variables,
            edge.variable,
        )


def _build_side(left_cost: float, right_cost: float) -> JoinSide:
    """Build the hash table on the smaller input."""
    return JoinSide.LEFT if left_cost < right_cost else JoinSide.RIGHT
