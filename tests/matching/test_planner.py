"""Tests for the greedy planner."""

import pytest

from propgraph.matching.embedding import EntryType
from propgraph.matching.operators import (
    EdgeScan,
    Expand,
    Filter,
    Join,
    Projection,
    VertexScan,
)
from propgraph.matching.planner import GreedyPlanner, PlanTable
from propgraph.query.errors import UnresolvedVariableError, UnsupportedPatternError
from propgraph.query.parser import parse_query
from propgraph.query.query_graph import QueryGraph, QueryVertex
from propgraph.statistics import GraphStatistics

JOIN_QUERY = "MATCH (a:A)-[x:x]->(b:B), (c:C)-[y:y]->(d:D), (b)-[z:z]->(c)"


@pytest.fixture
def join_statistics() -> GraphStatistics:
    """Cheap outer edges, an expensive edge in the middle."""
    return GraphStatistics.model_validate(
        {
            "vertex_labels": {"A": 1, "B": 1, "C": 1, "D": 1},
            "triples": {"A-x->B": 1, "C-y->D": 1, "B-z->C": 100},
        }
    )


def _plan(query: str, statistics=None, return_variables=None):
    return GreedyPlanner(parse_query(query), statistics, return_variables).plan()


def _operators(entry, kind):
    return [node for node in entry.node.walk() if isinstance(node, kind)]


class TestGreedyPlanner:
    def test_single_vertex(self):
        entry = _plan("MATCH (a:Person)")

        assert isinstance(entry.node, Projection)
        assert isinstance(entry.node.input, VertexScan)
        assert entry.node.input.label == "Person"
        assert entry.metadata.variables == ["a"]

    def test_root_binds_all_variables(self):
        entry = _plan("MATCH (a:Person)-[e:knows]->(b)-[f]->(c)")

        assert entry.variables == {"a", "b", "c", "e", "f"}
        assert set(entry.metadata.variables) == {"a", "b", "c", "e", "f"}
        assert entry.metadata.properties == ()

    def test_expand_into_leaf(self):
        entry = _plan("MATCH (a:Person)-[e:knows]->(b:Person)")

        expands = _operators(entry, Expand)
        assert len(expands) == 1
        assert not expands[0].closing
        assert isinstance(expands[0].target, VertexScan)
        assert entry.metadata.entry_type("e") == EntryType.EDGE

    def test_variable_length_edge_is_path_column(self):
        entry = _plan("MATCH (a)-[p:knows*1..3]->(b)")
        assert entry.metadata.entry_type("p") == EntryType.PATH

    def test_cycle_is_closed_inside_one_entry(self):
        entry = _plan("MATCH (p1:Person)-[:knows]->(p2:Person)-[:knows]->(p1)")

        closing = [node for node in _operators(entry, Expand) if node.closing]
        assert len(closing) == 1
        assert "[closing:" in closing[0].describe()

    def test_single_variable_predicates_pushed_into_scan(self):
        entry = _plan('MATCH (a:Person)-[e:knows]->(b) WHERE a.name = "Alice" AND e.since > 2014')

        scan = next(node for node in _operators(entry, VertexScan) if node.variable == "a")
        assert str(scan.predicates) == 'a.name = "Alice"'
        expand = _operators(entry, Expand)[0]
        assert str(expand.predicates) == "e.since > 2014"
        assert expand.properties == ("since",)
        assert _operators(entry, Filter) == []

    def test_multi_variable_predicate_becomes_filter(self):
        entry = _plan("MATCH (a:Person)-[e:knows]->(b:Person) WHERE a.age > b.age")

        filters = _operators(entry, Filter)
        assert len(filters) == 1
        assert str(filters[0].predicates) == "a.age > b.age"
        scans = {node.variable: node for node in _operators(entry, VertexScan)}
        assert scans["a"].properties == ("age",)
        assert scans["b"].properties == ("age",)

    def test_path_variable_predicate_becomes_filter(self):
        entry = _plan("MATCH (a)-[p:e*1..2]->(b) WHERE p <> p")

        expand = _operators(entry, Expand)[0]
        assert not expand.predicates
        filters = _operators(entry, Filter)
        assert len(filters) == 1
        assert str(filters[0].predicates) == "p <> p"

    def test_equal_cost_prefers_smallest_new_variables(self):
        # Default statistics give every expansion the same cost
        entry = _plan("MATCH (b)-[y]->(z), (b)-[x]->(a)")

        top = entry.node.input
        assert isinstance(top, Expand)
        assert top.edge.variable == "y"
        first = top.input
        assert isinstance(first, Expand)
        assert (first.edge.variable, first.from_variable, first.to_variable) == ("x", "b", "a")
        assert isinstance(first.input, VertexScan)
        assert first.input.variable == "b"

    def test_join_of_grown_entries(self, join_statistics):
        entry = _plan(JOIN_QUERY, join_statistics)

        joins = _operators(entry, Join)
        assert len(joins) == 2
        scans = _operators(entry, EdgeScan)
        assert [scan.edge.variable for scan in scans] == ["z"]
        assert entry.cost == pytest.approx(100)

    def test_return_variables(self):
        entry = _plan("MATCH (a)-[e]->(b)", return_variables=["b", "a"])

        assert entry.metadata.variables == ["b", "a"]
        assert entry.node.variables == ("b", "a")

    def test_undeclared_return_variable(self):
        with pytest.raises(UnresolvedVariableError) as exc_info:
            GreedyPlanner(parse_query("MATCH (a)-[e]->(b)"), return_variables=["c"])
        assert exc_info.value.variable == "c"

    def test_disconnected_query_graph(self):
        query_graph = QueryGraph((QueryVertex("a"), QueryVertex("b")))

        with pytest.raises(UnsupportedPatternError):
            GreedyPlanner(query_graph).plan()

    def test_deterministic(self, join_statistics):
        first = _plan(JOIN_QUERY, join_statistics)
        second = _plan(JOIN_QUERY, join_statistics)

        assert [n.describe() for n in first.node.walk()] == [
            n.describe() for n in second.node.walk()
        ]

    def test_logs_chosen_plan(self, caplog):
        with caplog.at_level("INFO", logger="propgraph.matching.planner"):
            _plan("MATCH (a)-[e]->(b)")
        assert "Chose plan" in caplog.text


class TestPlanTable:
    def test_entry_for_and_replace(self):
        planner = GreedyPlanner(parse_query("MATCH (a)-[e]->(b)"))
        a, b = planner._leaf("a"), planner._leaf("b")
        table = PlanTable([a, b])

        assert table.entry_for("b") is b
        with pytest.raises(KeyError):
            table.entry_for("e")

        table.replace([a, b], a)
        assert len(table) == 1
        assert table.entry_for("a") is a
