"""Tests for the QueryGraph."""

import pytest

from propgraph.query.errors import (
    DuplicateVariableError,
    UnresolvedVariableError,
    UnsupportedPatternError,
)
from propgraph.query.parser import parse_query
from propgraph.query.predicates import CNF, Clause, Comparator, Comparison, Literal, PropertyRef
from propgraph.query.query_graph import QueryEdge, QueryGraph, QueryVertex


def _where(variable: str, key: str) -> CNF:
    return CNF((Clause((Comparison(PropertyRef(variable, key), Comparator.EQ, Literal(1)),)),))


class TestQueryGraphValidation:
    def test_duplicate_variable(self):
        with pytest.raises(DuplicateVariableError):
            QueryGraph((QueryVertex("a"), QueryVertex("a")))

    def test_edge_to_undeclared_vertex(self):
        with pytest.raises(UnresolvedVariableError) as exc_info:
            QueryGraph((QueryVertex("a"),), (QueryEdge("e", "a", "b"),))
        assert exc_info.value.variable == "b"

    def test_predicate_on_undeclared_variable(self):
        with pytest.raises(UnresolvedVariableError):
            QueryGraph((QueryVertex("a"),), predicates=_where("z", "x"))

    def test_property_of_path_variable(self):
        with pytest.raises(UnsupportedPatternError):
            QueryGraph(
                (QueryVertex("a"), QueryVertex("b")),
                (QueryEdge("p", "a", "b", lower=1, upper=2),),
                _where("p", "x"),
            )

    def test_disconnected_graph_can_be_built(self):
        graph = QueryGraph((QueryVertex("a"), QueryVertex("b")))

        assert not graph.is_connected()
        assert graph.connected_components() == [{"a"}, {"b"}]


class TestQueryGraphLookups:
    def test_variables_order(self):
        graph = parse_query("MATCH (b)-[y]->(a)-[x]->(c)")
        assert graph.variables == ["b", "a", "c", "y", "x"]

    def test_get_unknown(self):
        graph = parse_query("MATCH (a)")

        with pytest.raises(UnresolvedVariableError):
            graph.get_vertex("b")
        with pytest.raises(UnresolvedVariableError):
            graph.get_edge("a")

    def test_other_endpoint(self):
        edge = parse_query("MATCH (a)-[e]->(b)").get_edge("e")

        assert edge.other("a") == "b"
        assert edge.other("b") == "a"

    def test_predicates_for(self):
        graph = parse_query("MATCH (a)-[e]->(b) WHERE a.x = 1 AND a.y = b.y")

        assert len(graph.predicates_for(["a"])) == 1
        assert len(graph.predicates_for(["a", "b"])) == 2

    def test_required_properties(self):
        graph = parse_query("MATCH (a)-[e]->(b) WHERE a.y = 1 AND a.x = b.x")

        assert graph.required_properties("a") == ("x", "y")
        assert graph.required_properties("e") == ()

    def test_to_networkx(self):
        nx_graph = parse_query("MATCH (a)-[e]->(b)-[f]->(a)").to_networkx()

        assert set(nx_graph.nodes) == {"a", "b"}
        assert nx_graph.number_of_edges() == 2

    def test_str(self):
        text = str(parse_query("MATCH (a)-[e:knows*1..2]->(b) WHERE a.x = 1"))
        assert text == "MATCH (a)-[e:knows*1..2]->(b) WHERE a.x = 1"
