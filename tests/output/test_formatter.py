"""Tests for output formatting."""

import json

import pytest

from propgraph.matching.embedding import Embedding, EmbeddingMetaData, EntryType
from propgraph.matching.planner import GreedyPlanner
from propgraph.output.formatter import format_embeddings, format_equality, format_plan
from propgraph.query.parser import parse_query


@pytest.fixture
def entry():
    return GreedyPlanner(parse_query("MATCH (a:Person)-[e:knows]->(b)")).plan()


@pytest.fixture
def metadata() -> EmbeddingMetaData:
    return EmbeddingMetaData(
        (("a", EntryType.VERTEX), ("p", EntryType.PATH), ("b", EntryType.VERTEX))
    )


class TestFormatPlan:
    def test_text(self, entry):
        output = format_plan(entry)
        lines = output.splitlines()

        assert lines[0].startswith("Projection(a, b, e)")
        assert any(line.startswith("  Expand") for line in lines)
        assert "VertexScan(a:Person)" in output
        assert output.endswith(f"Estimated cardinality: {entry.cost:.2f}")

    def test_json(self, entry):
        data = json.loads(format_plan(entry, "json"))

        assert data["estimated_cardinality"] == entry.cost
        assert data["plan"]["operator"] == "Projection"
        assert set(data["variables"]) == {"a", "e", "b"}
        assert data["plan"]["children"][0]["operator"] == "Expand"


class TestFormatEmbeddings:
    def test_text_with_names(self, metadata):
        embeddings = [Embedding(("v1", ("e1", "v2", "e2"), "v3"))]
        names = {"v1": "alice", "v2": "bob", "v3": "carol", "e1": "ab"}

        output = format_embeddings(embeddings, metadata, "text", names)

        assert "  1. a=alice, p=[ab, bob, e2], b=carol" in output
        assert output.endswith("1 match(es)")

    def test_text_without_matches(self, metadata):
        output = format_embeddings([], metadata)

        assert "(none)" in output
        assert output.endswith("0 match(es)")

    def test_json(self, metadata):
        embeddings = [Embedding(("v1", (), "v1")), Embedding(("v2", ("e1",), "v3"))]

        data = json.loads(format_embeddings(embeddings, metadata, "json"))

        assert data["count"] == 2
        assert data["variables"] == ["a", "p", "b"]
        assert data["embeddings"][0] == {"a": "v1", "p": [], "b": "v1"}
        assert data["embeddings"][1]["p"] == ["e1"]


class TestFormatEquality:
    def test_text(self):
        assert format_equality(True, "data") == "Equal (by data, directed)"
        assert format_equality(False, "ids", directed=False) == "Not equal (by ids, undirected)"

    def test_json(self):
        data = json.loads(format_equality(False, "element-data", True, "json"))
        assert data == {"equal": False, "mode": "element-data", "directed": True}
