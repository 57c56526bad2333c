"""Pydantic models for graph statistics used in cost estimation."""

import logging
import re
from collections import Counter
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import StatisticsUnavailable

if TYPE_CHECKING:
    from ..model.graph import PropertyGraph

logger = logging.getLogger(__name__)

DEFAULT_ESTIMATE = 1000.0

# Shorthand triple key: "Person-knows->Person"
TRIPLE_KEY_PATTERN = re.compile(r"^(?P<source>[^-]*)-(?P<label>[^-]*)->(?P<target>.*)$")


class TripleCount(BaseModel):
    """Number of edges with a label between vertices of two labels."""

    model_config = ConfigDict(frozen=True)

    source: str
    label: str
    target: str
    count: int = Field(ge=0)


class GraphStatistics(BaseModel):
    """Read-only label and degree cardinalities of a data graph.

    Lookups never fail: a missing entry is recovered with an estimate derived
    from coarser counts, or with ``default_estimate`` when nothing is known.
    """

    model_config = ConfigDict(frozen=True)

    vertex_count: int = Field(default=0, ge=0)
    edge_count: int = Field(default=0, ge=0)
    vertex_labels: dict[str, int] = Field(default_factory=dict)
    edge_labels: dict[str, int] = Field(default_factory=dict)
    triples: list[TripleCount] = Field(default_factory=list)
    default_estimate: float = Field(default=DEFAULT_ESTIMATE, gt=0)

    @model_validator(mode="before")
    @classmethod
    def normalize_triples(cls, data: Any) -> Any:
        """Normalize shorthand triples ({"A-knows->B": 3}) to a list of records."""
        if not isinstance(data, dict):
            return data

        triples = data.get("triples")
        if isinstance(triples, dict):
            normalized = []
            for key, count in triples.items():
                match = TRIPLE_KEY_PATTERN.match(str(key))
                if match is None:
                    raise ValueError(f"Invalid triple key '{key}', expected 'Source-label->Target'")
                normalized.append({**match.groupdict(), "count": count})
            data = {**data, "triples": normalized}

        return data

    @classmethod
    def from_graph(cls, graph: "PropertyGraph", **kwargs: Any) -> "GraphStatistics":
        """Compute exact statistics for a graph.

        Args:
            graph: The data graph.
            **kwargs: Extra fields, e.g. ``default_estimate``.
        """
        vertices = graph.vertices()
        labels_by_id = {vertex.id: vertex.label for vertex in vertices}
        triples: Counter[tuple[str, str, str]] = Counter()
        edge_labels: Counter[str] = Counter()
        for edge in graph.edges():
            edge_labels[edge.label] += 1
            triples[(labels_by_id[edge.source_id], edge.label, labels_by_id[edge.target_id])] += 1

        return cls(
            vertex_count=len(vertices),
            edge_count=graph.edge_count,
            vertex_labels=dict(Counter(labels_by_id.values())),
            edge_labels=dict(edge_labels),
            triples=[
                TripleCount(source=s, label=l, target=t, count=n)
                for (s, l, t), n in sorted(triples.items())
            ],
            **kwargs,
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def vertex_cardinality(self, label: str | None = None) -> float:
        """Estimated number of vertices with a label (any label if None)."""
        try:
            if label is None:
                return float(self._total(self.vertex_count, "vertices"))
            return float(self._lookup(self.vertex_labels, label, "vertex label"))
        except StatisticsUnavailable as e:
            logger.debug("%s, using default %s", e, self.default_estimate)
            return self.default_estimate

    def edge_cardinality(self, label: str | None = None) -> float:
        """Estimated number of edges with a label (any label if None)."""
        try:
            if label is None:
                return float(self._total(self.edge_count, "edges"))
            return float(self._lookup(self.edge_labels, label, "edge label"))
        except StatisticsUnavailable as e:
            logger.debug("%s, using default %s", e, self.default_estimate)
            return self.default_estimate

    def triple_cardinality(
        self, source_label: str | None, edge_label: str | None, target_label: str | None
    ) -> float:
        """Estimated number of edges ``(source_label)-[edge_label]->(target_label)``.

        ``None`` matches any label. Without a matching triple the estimate
        assumes edge endpoints are distributed independently of their labels.
        """
        try:
            return float(self._triple(source_label, edge_label, target_label))
        except StatisticsUnavailable as e:
            logger.debug("%s, estimating from label counts", e)

        estimate = self.edge_cardinality(edge_label)
        total = self.vertex_cardinality(None)
        for label in (source_label, target_label):
            if label is not None:
                estimate *= self.vertex_cardinality(label) / max(total, 1.0)
        return estimate

    def average_degree(
        self,
        bound_label: str | None,
        edge_label: str | None,
        other_label: str | None,
        outgoing: bool = True,
    ) -> float:
        """Average number of matching edges per vertex with ``bound_label``.

        Args:
            bound_label: Label of the vertex the expansion starts from.
            edge_label: Label of the traversed edge.
            other_label: Label of the vertex reached by the expansion.
            outgoing: Whether the edge leaves the bound vertex.
        """
        if outgoing:
            edges = self.triple_cardinality(bound_label, edge_label, other_label)
        else:
            edges = self.triple_cardinality(other_label, edge_label, bound_label)
        return edges / max(self.vertex_cardinality(bound_label), 1.0)

    def _total(self, value: int, what: str) -> int:
        if value <= 0:
            raise StatisticsUnavailable(f"No statistics for total number of {what}")
        return value

    @staticmethod
    def _lookup(mapping: dict[str, int], key: str, what: str) -> int:
        if key not in mapping:
            raise StatisticsUnavailable(f"No statistics for {what} '{key}'", key)
        return mapping[key]

    def _triple(
        self, source_label: str | None, edge_label: str | None, target_label: str | None
    ) -> int:
        matches = [
            triple.count
            for triple in self.triples
            if (source_label is None or triple.source == source_label)
            and (edge_label is None or triple.label == edge_label)
            and (target_label is None or triple.target == target_label)
        ]
        if not matches:
            key = (source_label, edge_label, target_label)
            raise StatisticsUnavailable(f"No statistics for triple {key}", key)
        return sum(matches)
