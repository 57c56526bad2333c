"""Tests for graph and collection equality."""

import pytest

from propgraph.equality import (
    CollectionEquality,
    GraphEquality,
    collection_equals_by_data,
    collection_equals_by_element_data,
    collection_equals_by_element_ids,
    collection_equals_by_graph_ids,
    edge_to_data_string,
    equals_by_data,
    equals_by_element_data,
    equals_by_element_ids,
    graph_head_to_empty_string,
    vertex_to_data_string,
)
from propgraph.model.ascii import AsciiGraphLoader
from propgraph.model.graph import GraphCollection


@pytest.fixture
def graphs(equality_loader):
    def get(variable):
        return equality_loader.get_logical_graph_by_variable(variable)

    return get


@pytest.fixture
def collections(equality_loader):
    def get(*variables):
        return equality_loader.get_graph_collection_by_variables(*variables)

    return get


class TestGraphEquality:
    def test_by_element_ids(self, graphs):
        assert equals_by_element_ids(graphs("gRef"), graphs("gClone"))
        assert not equals_by_element_ids(graphs("gRef"), graphs("gDiffId"))
        assert not equals_by_element_ids(graphs("gRef"), graphs("gEmpty"))

    def test_by_element_data(self, graphs):
        assert equals_by_element_data(graphs("gRef"), graphs("gDiffId"))
        assert equals_by_element_data(graphs("gRef"), graphs("gClone"))
        assert not equals_by_element_data(graphs("gRef"), graphs("gDiffData"))

    def test_by_data(self, graphs):
        assert equals_by_data(graphs("gRef"), graphs("gDiffId"))
        assert not equals_by_data(graphs("gRef"), graphs("gClone"))
        assert not equals_by_data(graphs("gRef"), graphs("gDiffData"))

    def test_undirected(self, graphs):
        assert not equals_by_data(graphs("gRef"), graphs("gRev"))
        assert equals_by_data(graphs("gRef"), graphs("gRev"), directed=False)
        assert equals_by_element_data(graphs("gRef"), graphs("gRev"), directed=False)

    def test_reflexive(self, graphs):
        for variable in ("gEmpty", "gRef", "gDiffData", "gRev"):
            assert equals_by_data(graphs(variable), graphs(variable))

    def test_property_change(self):
        first = AsciiGraphLoader.from_string("g[(a:A{x=1})-[:e]->(b:B)]")
        second = AsciiGraphLoader.from_string("g[(a:A{x=2})-[:e]->(b:B)]")

        assert not equals_by_data(
            first.get_logical_graph_by_variable("g"), second.get_logical_graph_by_variable("g")
        )

    def test_independent_loaders(self):
        text = 'g:G{k="v"}[(a:A)-[:e{w=1.5}]->(b:B)-[:f]->(a)]'
        first = AsciiGraphLoader.from_string(text).get_logical_graph_by_variable("g")
        second = AsciiGraphLoader.from_string(text).get_logical_graph_by_variable("g")

        assert equals_by_data(first, second)
        assert not equals_by_element_ids(first, second)

    def test_logs_result(self, graphs, caplog):
        equality = GraphEquality(
            graph_head_to_empty_string, vertex_to_data_string, edge_to_data_string
        )
        with caplog.at_level("DEBUG", logger="propgraph.equality.equality"):
            assert equality.execute(graphs("gRef"), graphs("gDiffId"))
        assert "equal: True" in caplog.text


class TestCollectionEquality:
    def test_by_element_ids(self, collections):
        assert collection_equals_by_element_ids(
            collections("gRef", "gClone", "gEmpty"), collections("gClone", "gRef", "gEmpty")
        )
        assert not collection_equals_by_element_ids(
            collections("gRef", "gEmpty"), collections("gDiffId", "gEmpty")
        )

    def test_duplicate_graphs_are_collapsed(self, collections):
        first = collections("gRef", "gRef")

        assert len(first) == 1
        assert not collection_equals_by_element_ids(first, collections("gRef", "gClone"))

    def test_by_element_data(self, collections):
        assert collection_equals_by_element_data(
            collections("gRef", "gClone"), collections("gDiffId", "gRef")
        )
        assert not collection_equals_by_element_data(
            collections("gRef", "gEmpty"), collections("gDiffData", "gEmpty")
        )

    def test_by_data_counts_multiplicity(self, collections):
        # gRef and gDiffId have equal data
        assert collection_equals_by_data(collections("gRef"), collections("gDiffId"))
        assert not collection_equals_by_data(
            collections("gRef", "gDiffId"), collections("gRef", "gClone")
        )

    def test_undirected(self, collections):
        assert collection_equals_by_data(collections("gRev"), collections("gRef"), directed=False)
        assert not collection_equals_by_data(collections("gRev"), collections("gRef"))

    def test_by_graph_ids(self, collections):
        assert collection_equals_by_graph_ids(
            collections("gRef", "gClone"), collections("gClone", "gRef")
        )
        assert not collection_equals_by_graph_ids(collections("gRef"), collections("gClone"))
        assert not collection_equals_by_graph_ids(collections("gRef"), GraphCollection())

    def test_empty_collections(self):
        equality = CollectionEquality(
            graph_head_to_empty_string, vertex_to_data_string, edge_to_data_string
        )

        assert equality.execute(GraphCollection(), GraphCollection())
        assert collection_equals_by_graph_ids(GraphCollection(), GraphCollection())
