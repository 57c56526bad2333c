"""Transformers from lark parse trees to pattern records.

The records keep the source offsets of named elements, so that semantic
checks done later (duplicate variables, conflicting labels) can still point
at the offending text.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any

from lark import Token, Transformer

from .errors import QuerySyntaxError
from .predicates import (
    And,
    Comparator,
    Comparison,
    ElementRef,
    Literal,
    Not,
    Operand,
    Or,
    Predicate,
    PropertyRef,
)
from .query_graph import Direction

ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"', "'": "'"}


def unescape(raw: str) -> str:
    """Strip the quotes of a string literal and resolve its escapes."""
    return re.sub(r"\\(.)", lambda m: ESCAPES.get(m.group(1), m.group(1)), raw[1:-1])


def identifier(token: Token) -> str:
    """Get the name of an identifier, without backticks if quoted."""
    text = str(token)
    return text[1:-1] if text.startswith("`") else text


def _optional_identifier(token: Token | None) -> str | None:
    return identifier(token) if token is not None else None


def _position(token: Token | None) -> int | None:
    return token.start_pos if token is not None else None


@dataclass(frozen=True)
class NodePattern:
    """A ``(var:Label {props})`` element."""

    variable: str | None = None
    label: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    position: int | None = None


@dataclass(frozen=True)
class RelationshipPattern:
    """A ``-[var:Label*lower..upper {props}]->`` element.

    ``incoming`` marks ``<-[...]-``: the edge points from the right node to
    the left one.
    """

    variable: str | None = None
    label: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)
    position: int | None = None
    direction: Direction = Direction.OUTGOING
    incoming: bool = False
    bounds: tuple[int, int] | None = None


@dataclass(frozen=True)
class PathPattern:
    """A node followed by (relationship, node) steps."""

    start: NodePattern
    steps: tuple[tuple[RelationshipPattern, NodePattern], ...] = ()


@dataclass(frozen=True)
class MatchClause:
    patterns: tuple[PathPattern, ...]
    where: Predicate | None = None


class ElementTransformer(Transformer):
    """Rules shared by both grammars: literals, property maps, nodes and paths."""

    def string(self, items):
        return unescape(items[0])

    def number(self, items):
        text = str(items[0])
        return float(text) if "." in text else int(text)

    def true(self, items):
        return True

    def false(self, items):
        return False

    def null(self, items):
        return None

    def property_pair(self, items):
        return identifier(items[0]), items[1]

    def properties(self, items):
        return dict(pair for pair in items if pair is not None)

    def node(self, items):
        variable, label, properties = items
        return NodePattern(
            variable=_optional_identifier(variable),
            label=_optional_identifier(label),
            properties=properties or {},
            position=_position(variable),
        )

    def outgoing(self, items):
        return items[0]

    def incoming(self, items):
        return replace(items[0], incoming=True)

    def pattern(self, items):
        return PathPattern(items[0], tuple(zip(items[1::2], items[2::2])))


class PatternTransformer(ElementTransformer):
    """Builds a MatchClause from a ``MATCH ... WHERE ...`` parse tree."""

    def start(self, items):
        *patterns, where = items
        return MatchClause(tuple(patterns), where)

    def edge_body(self, items):
        variable, label, bounds, properties = items
        return RelationshipPattern(
            variable=_optional_identifier(variable),
            label=_optional_identifier(label),
            properties=properties or {},
            position=_position(variable),
            bounds=bounds,
        )

    def undirected(self, items):
        return replace(items[0], direction=Direction.UNDIRECTED)

    def bounds(self, items):
        star, lower, dots, upper = items
        if (lower is None and dots is None) or (dots is not None and upper is None):
            raise QuerySyntaxError(
                "Unbounded variable-length edges are not supported", star.start_pos
            )

        if dots is None:
            bounds = (int(lower), int(lower))
        else:
            bounds = (1 if lower is None else int(lower), int(upper))

        if bounds[1] < 1 or bounds[0] > bounds[1]:
            raise QuerySyntaxError(
                f"Invalid path length bounds {bounds[0]}..{bounds[1]}", star.start_pos
            )
        return bounds

    # -------------------------------------------------------------------------
    # WHERE expressions
    # -------------------------------------------------------------------------

    def or_(self, items):
        return Or(items[0], items[1])

    def and_(self, items):
        return And(items[0], items[1])

    def not_(self, items):
        return Not(items[0])

    def comparison(self, items):
        left, comparator, right = items
        return Comparison(_operand(left), comparator, _operand(right))

    def comparator(self, items):
        return Comparator(str(items[0]))

    def property_ref(self, items):
        return PropertyRef(identifier(items[0]), identifier(items[1]))

    def element_ref(self, items):
        return ElementRef(identifier(items[0]))


def _operand(value: Any) -> Operand:
    if isinstance(value, (PropertyRef, ElementRef)):
        return value
    return Literal(value)
