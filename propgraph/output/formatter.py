"""Output formatting for plans, match results and equality checks."""

import json
from typing import Any, Literal

from ..matching.embedding import Embedding, EmbeddingMetaData
from ..matching.operators import PlanNode
from ..matching.planner import PlanTableEntry


def format_plan(
    entry: PlanTableEntry,
    format: Literal["text", "json"] = "text",
) -> str:
    """Format a query plan for output.

    Args:
        entry: The planned entry, rooted at a Projection.
        format: Output format ("text" or "json").

    Returns:
        Formatted string representation.
    """
    if format == "json":
        data = {
            "estimated_cardinality": entry.cost,
            "variables": entry.metadata.variables,
            "plan": _node_to_dict(entry.node),
        }
        return json.dumps(data, indent=2)

    lines = _node_lines(entry.node, 0)
    lines.append("")
    lines.append(f"Estimated cardinality: {entry.cost:.2f}")
    return "\n".join(lines)


def _node_lines(node: PlanNode, depth: int) -> list[str]:
    lines = [f"{'  ' * depth}{node.describe()}  (~{node.estimated_cardinality:.2f})"]
    for child in node.children:
        lines.extend(_node_lines(child, depth + 1))
    return lines


def _node_to_dict(node: PlanNode) -> dict[str, Any]:
    return {
        "operator": type(node).__name__,
        "description": node.describe(),
        "estimated_cardinality": node.estimated_cardinality,
        "variables": node.metadata.variables,
        "children": [_node_to_dict(child) for child in node.children],
    }


def format_embeddings(
    embeddings: list[Embedding],
    metadata: EmbeddingMetaData,
    format: Literal["text", "json"] = "text",
    names: dict[str, str] | None = None,
) -> str:
    """Format match results for output.

    Args:
        embeddings: The collected embeddings.
        metadata: Column layout of the embeddings.
        format: Output format ("text" or "json").
        names: Optional display names for element ids.

    Returns:
        Formatted string representation.
    """
    names = names or {}
    rows = [
        {variable: _display(value, names) for variable, value in e.to_mapping(metadata).items()}
        for e in embeddings
    ]

    if format == "json":
        data = {
            "count": len(rows),
            "variables": metadata.variables,
            "embeddings": rows,
        }
        return json.dumps(data, indent=2)

    lines: list[str] = []
    for number, row in enumerate(rows, start=1):
        bindings = ", ".join(f"{variable}={_text(value)}" for variable, value in row.items())
        lines.append(f"  {number}. {bindings}")
    if not rows:
        lines.append("  (none)")
    lines.append("")
    lines.append(f"{len(rows)} match(es)")
    return "\n".join(lines)


def _display(value: Any, names: dict[str, str]) -> Any:
    if isinstance(value, tuple):
        return [names.get(item, item) for item in value]
    return names.get(value, value)


def _text(value: Any) -> str:
    if isinstance(value, list):
        return "[" + ", ".join(value) + "]"
    return str(value)


def format_equality(
    equal: bool,
    mode: str,
    directed: bool = True,
    format: Literal["text", "json"] = "text",
) -> str:
    """Format the outcome of an equality check."""
    if format == "json":
        return json.dumps({"equal": equal, "mode": mode, "directed": directed}, indent=2)

    direction = "directed" if directed else "undirected"
    verdict = "Equal" if equal else "Not equal"
    return f"{verdict} (by {mode}, {direction})"
