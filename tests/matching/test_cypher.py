"""Tests for CypherPatternMatching end to end."""

import pytest

from propgraph.matching.cypher import CypherPatternMatching, match_pattern
from propgraph.matching.errors import ExecutionFailure
from propgraph.matching.executor import PlanExecutor
from propgraph.matching.results import VARIABLE_MAPPING_KEY
from propgraph.matching.strategy import MatchStrategy
from propgraph.model.ascii import AsciiGraphLoader
from propgraph.query.errors import (
    QuerySyntaxError,
    UnresolvedVariableError,
    UnsupportedPatternError,
)
from propgraph.statistics import GraphStatistics
from propgraph.substrate import LocalCollection

HOMO = MatchStrategy.HOMOMORPHISM
ISO = MatchStrategy.ISOMORPHISM


def _count(graph, query, **kwargs) -> int:
    embeddings, _ = CypherPatternMatching(query, **kwargs).collect(graph)
    return len(embeddings)


class TestConstruction:
    def test_syntax_error(self):
        with pytest.raises(QuerySyntaxError):
            CypherPatternMatching("MATCH (a")

    def test_unresolved_variable(self):
        with pytest.raises(UnresolvedVariableError):
            CypherPatternMatching("MATCH (a)-[e]->(b) WHERE c.x = 1")

    def test_disconnected_pattern(self):
        with pytest.raises(UnsupportedPatternError):
            CypherPatternMatching("MATCH (a), (b)")

    def test_undeclared_return_variable(self):
        with pytest.raises(UnresolvedVariableError):
            CypherPatternMatching("MATCH (a)-[e]->(b)", return_variables=["x"])


class TestSocialGraph:
    def test_single_hop(self, social_graph):
        assert _count(social_graph, "MATCH (a:Person)-[e:knows]->(b:Person)") == 3

    def test_property_comparison_between_variables(self, social_graph, social_loader):
        embeddings, metadata = CypherPatternMatching(
            "MATCH (a:Person)-[e:knows]->(b:Person) WHERE a.age > b.age"
        ).collect(social_graph)

        alice = social_loader.get_vertex_by_variable("alice").id
        carol = social_loader.get_vertex_by_variable("carol").id
        pairs = {(e.to_mapping(metadata)["a"], e.to_mapping(metadata)["b"]) for e in embeddings}
        assert pairs == {(alice, social_loader.get_vertex_by_variable("bob").id), (carol, alice)}

    def test_triangle(self, social_graph):
        query = "MATCH (a)-[:knows]->(b)-[:knows]->(c)-[:knows]->(a)"
        assert _count(social_graph, query) == 3

    def test_two_cycle_has_no_match(self, social_graph):
        query = "MATCH (p1:Person)-[:knows]->(p2:Person)-[:knows]->(p1)"
        assert _count(social_graph, query) == 0

    def test_variable_length(self, social_graph):
        query = 'MATCH (a:Person{name="Alice"})-[:knows*1..3]->(b:Person)'

        assert _count(social_graph, query) == 3
        assert _count(social_graph, query, vertex_strategy=ISO) == 2

    def test_variable_length_from_zero(self, social_graph):
        query = 'MATCH (a:Person{name="Alice"})-[:knows*0..1]->(b:Person)'
        assert _count(social_graph, query) == 2

    def test_predicate_on_path_variable_is_evaluated(self, chain_graph):
        assert _count(chain_graph, "MATCH (a)-[p:e*1..2]->(b) WHERE p <> p") == 0
        assert _count(chain_graph, "MATCH (a)-[p:e*1..2]->(b) WHERE p = p") == 3

    def test_undirected(self, social_graph):
        query = 'MATCH (a:Person{name="Alice"})-[:knows]-(b)'
        assert _count(social_graph, query) == 2

    def test_negation_with_missing_property(self, social_graph):
        # acme has no age, so neither a.age > 28 nor its negation holds
        assert _count(social_graph, "MATCH (a) WHERE NOT a.age > 28") == 1

    def test_disjunction(self, social_graph):
        query = 'MATCH (a:Person) WHERE a.name = "Alice" OR a.name = "Carol"'
        assert _count(social_graph, query) == 2

    def test_edge_property(self, social_graph):
        query = "MATCH (a)-[e:knows]->(b) WHERE e.since >= 2015"
        assert _count(social_graph, query) == 2

    def test_element_inequality(self, social_graph):
        query = "MATCH (a:Person)-[:knows]->(b:Person) WHERE a <> b"
        assert _count(social_graph, query) == 3

    def test_return_variables(self, social_graph):
        embeddings, metadata = CypherPatternMatching(
            "MATCH (a:Person)-[e:knows]->(b:Person)", return_variables=["b"]
        ).collect(social_graph)

        assert metadata.variables == ["b"]
        assert all(len(e.ids) == 1 for e in embeddings)

    def test_given_statistics(self, social_graph, examples_dir):
        from propgraph.statistics import load_statistics

        stats = load_statistics(examples_dir / "statistics.yaml")
        assert _count(social_graph, "MATCH (a:Person)-[:knows]->(b)", statistics=stats) == 3


class TestJoinPlans:
    def test_join_result(self):
        graph = AsciiGraphLoader.from_string(
            "(a:A)-[:x]->(b:B)-[:z]->(c:C)-[:y]->(d:D); (b)-[:z]->(c2:C)"
        ).get_database_graph()
        stats = GraphStatistics.model_validate(
            {
                "vertex_labels": {"A": 1, "B": 1, "C": 1, "D": 1},
                "triples": {"A-x->B": 1, "C-y->D": 1, "B-z->C": 100},
            }
        )
        matching = CypherPatternMatching(
            "MATCH (a:A)-[:x]->(b:B), (c:C)-[:y]->(d:D), (b)-[:z]->(c)", statistics=stats
        )

        assert "Join" in {type(node).__name__ for node in matching.plan().node.walk()}
        embeddings, _ = matching.collect(graph)
        assert len(embeddings) == 1


class TestResults:
    def test_match_pattern(self, chain_graph):
        mappings = match_pattern(chain_graph, "MATCH (a)-[e]->(b)")

        assert len(mappings) == 2
        assert all(set(m) == {"a", "e", "b"} for m in mappings)

    def test_to_graph_collection(self, social_graph, social_loader):
        collection = CypherPatternMatching(
            'MATCH (a:Person{name="Alice"})-[e:worksAt]->(c)'
        ).to_graph_collection(social_graph)

        assert len(collection) == 1
        (graph,) = list(collection)
        assert graph.vertex_count == 2
        assert graph.edge_count == 1
        assert graph.head.properties[VARIABLE_MAPPING_KEY] == {
            "a": social_loader.get_vertex_by_variable("alice").id,
            "e": social_loader.get_edge_by_variable("aw").id,
            "c": social_loader.get_vertex_by_variable("acme").id,
        }

    def test_path_mapping_is_a_list(self, chain_graph):
        collection = CypherPatternMatching("MATCH (a)-[p:e*2..2]->(b)").to_graph_collection(
            chain_graph
        )

        (graph,) = list(collection)
        assert graph.vertex_count == 3
        assert graph.edge_count == 2
        assert len(graph.head.properties[VARIABLE_MAPPING_KEY]["p"]) == 3

    def test_projected_edge_keeps_endpoints(self, social_graph):
        collection = CypherPatternMatching(
            'MATCH (a:Person{name="Alice"})-[e:worksAt]->(c)', return_variables=["e"]
        ).to_graph_collection(social_graph)

        (graph,) = list(collection)
        assert graph.vertex_count == 2


class TestExecutionFailure:
    def test_substrate_error_is_wrapped(self, social_graph, monkeypatch):
        def broken():
            raise RuntimeError("worker lost")

        monkeypatch.setattr(PlanExecutor, "execute", lambda self, node: LocalCollection(broken))

        with pytest.raises(ExecutionFailure) as exc_info:
            CypherPatternMatching("MATCH (a)").collect(social_graph)
        assert "worker lost" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
