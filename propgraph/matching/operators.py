"""Plan operators.

A plan is a tree of ``PlanNode`` variants. Nodes only describe what to
compute; ``PlanExecutor`` evaluates them against the substrate.
"""

from dataclasses import dataclass, field
from typing import Iterator

from ..query.predicates import CNF
from ..query.query_graph import Direction, QueryEdge
from ..substrate import JoinSide
from .embedding import EmbeddingMetaData


@dataclass(frozen=True, kw_only=True)
class PlanNode:
    """Base of all plan operators."""

    metadata: EmbeddingMetaData
    estimated_cardinality: float = 0.0

    @property
    def children(self) -> tuple["PlanNode", ...]:
        return ()

    def describe(self) -> str:
        raise NotImplementedError

    def walk(self) -> Iterator["PlanNode"]:
        """Iterate over this node and its descendants, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()


def _where(predicates: CNF) -> str:
    return f" WHERE {predicates}" if predicates else ""


def _edge_pattern(edge: QueryEdge, from_variable: str, to_variable: str) -> str:
    label = f":{edge.label}" if edge.label else ""
    bounds = f"*{edge.lower}..{edge.upper}" if edge.is_variable_length else ""
    body = f"[{edge.variable}{label}{bounds}]"
    if edge.direction == Direction.UNDIRECTED:
        return f"({from_variable})-{body}-({to_variable})"
    if from_variable == edge.source:
        return f"({from_variable})-{body}->({to_variable})"
    return f"({from_variable})<-{body}-({to_variable})"


@dataclass(frozen=True, kw_only=True)
class VertexScan(PlanNode):
    """Emit one embedding per vertex with the label satisfying the predicates."""

    variable: str
    label: str | None = None
    predicates: CNF = field(default_factory=CNF)
    properties: tuple[str, ...] = ()

    def describe(self) -> str:
        label = f":{self.label}" if self.label else ""
        return f"VertexScan({self.variable}{label}){_where(self.predicates)}"


@dataclass(frozen=True, kw_only=True)
class EdgeScan(PlanNode):
    """Emit ``[source, edge, target]`` per matching edge or path.

    Undirected edges are emitted in both orientations.
    """

    edge: QueryEdge
    predicates: CNF = field(default_factory=CNF)
    properties: tuple[str, ...] = ()

    def describe(self) -> str:
        pattern = _edge_pattern(self.edge, self.edge.source, self.edge.target)
        return f"EdgeScan{pattern}{_where(self.predicates)}"


@dataclass(frozen=True, kw_only=True)
class Expand(PlanNode):
    """Extend each input embedding along an edge.

    ``from_variable`` is bound by ``input``. If ``target`` is set, the reached
    vertex binds ``to_variable`` and must be one of the target's candidates;
    otherwise ``to_variable`` is already bound and the reached vertex must be
    the same (a closing expand).
    """

    input: PlanNode
    edge: QueryEdge
    from_variable: str
    to_variable: str
    target: PlanNode | None = None
    predicates: CNF = field(default_factory=CNF)
    properties: tuple[str, ...] = ()

    @property
    def closing(self) -> bool:
        return self.target is None

    @property
    def children(self) -> tuple[PlanNode, ...]:
        if self.target is None:
            return (self.input,)
        return (self.input, self.target)

    def describe(self) -> str:
        pattern = _edge_pattern(self.edge, self.from_variable, self.to_variable)
        suffix = f" [closing: {self.to_variable} = {self.to_variable}]" if self.closing else ""
        return f"Expand{pattern}{_where(self.predicates)}{suffix}"


@dataclass(frozen=True, kw_only=True)
class Join(PlanNode):
    """Equi-join two inputs on their shared variables."""

    left: PlanNode
    right: PlanNode
    variables: tuple[str, ...]
    build_side: JoinSide = JoinSide.RIGHT

    @property
    def children(self) -> tuple[PlanNode, ...]:
        return (self.left, self.right)

    def describe(self) -> str:
        return f"Join(on {', '.join(self.variables)}, build {self.build_side.value})"


@dataclass(frozen=True, kw_only=True)
class Filter(PlanNode):
    """Keep embeddings satisfying a CNF predicate."""

    input: PlanNode
    predicates: CNF

    @property
    def children(self) -> tuple[PlanNode, ...]:
        return (self.input,)

    def describe(self) -> str:
        return f"Filter({self.predicates})"


@dataclass(frozen=True, kw_only=True)
class Projection(PlanNode):
    """Narrow embeddings to the output variables, dropping cached properties."""

    input: PlanNode
    variables: tuple[str, ...]

    @property
    def children(self) -> tuple[PlanNode, ...]:
        return (self.input,)

    def describe(self) -> str:
        return f"Projection({', '.join(self.variables)})"
