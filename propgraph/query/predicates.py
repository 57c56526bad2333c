"""Predicate trees over query variables and their conjunctive normal form.

A predicate is a tree of comparisons combined by ``And``, ``Or`` and ``Not``.
Before planning it is converted to CNF: a conjunction of clauses, each clause a
disjunction of comparisons. Negation is pushed down to the comparisons by
De Morgan's laws and operator inversion, so a CNF never contains ``Not``.

A comparison whose operand refers to a missing property, or whose operands
cannot be ordered, evaluates to false. Because negation is applied to the
operator and not to the result, ``NOT a.x = 1`` is false as well when ``a.x``
is missing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Union


class Comparator(str, Enum):
    """Comparison operators."""

    EQ = "="
    NEQ = "<>"
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="

    def negate(self) -> "Comparator":
        return _NEGATIONS[self]

    def apply(self, left: Any, right: Any) -> bool:
        try:
            return _OPERATIONS[self](left, right)
        except TypeError:
            return False


_NEGATIONS = {
    Comparator.EQ: Comparator.NEQ,
    Comparator.NEQ: Comparator.EQ,
    Comparator.LT: Comparator.GTE,
    Comparator.GTE: Comparator.LT,
    Comparator.GT: Comparator.LTE,
    Comparator.LTE: Comparator.GT,
}

_OPERATIONS: dict[Comparator, Callable[[Any, Any], bool]] = {
    Comparator.EQ: lambda a, b: a == b,
    Comparator.NEQ: lambda a, b: a != b,
    Comparator.LT: lambda a, b: a < b,
    Comparator.GT: lambda a, b: a > b,
    Comparator.LTE: lambda a, b: a <= b,
    Comparator.GTE: lambda a, b: a >= b,
}


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


@dataclass(frozen=True)
class Literal:
    """A constant operand."""

    value: Any

    @property
    def variables(self) -> frozenset[str]:
        return frozenset()

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return f'"{self.value}"'
        if self.value is None:
            return "NULL"
        if isinstance(self.value, bool):
            return str(self.value).upper()
        return str(self.value)


@dataclass(frozen=True)
class PropertyRef:
    """A property of the element bound to a variable (``v.key``)."""

    variable: str
    key: str

    @property
    def variables(self) -> frozenset[str]:
        return frozenset({self.variable})

    def __str__(self) -> str:
        return f"{self.variable}.{self.key}"


@dataclass(frozen=True)
class ElementRef:
    """The identifier of the element bound to a variable."""

    variable: str

    @property
    def variables(self) -> frozenset[str]:
        return frozenset({self.variable})

    def __str__(self) -> str:
        return self.variable


Operand = Union[Literal, PropertyRef, ElementRef]


class Bindings:
    """Resolves operands against a (partial) match.

    Subclasses provide element identifiers and property values for bound
    variables; unknown values resolve to ``MISSING``.
    """

    def element_id(self, variable: str) -> Any:
        raise NotImplementedError

    def property_value(self, variable: str, key: str) -> Any:
        raise NotImplementedError

    def resolve(self, operand: Operand) -> Any:
        if isinstance(operand, Literal):
            return operand.value
        if isinstance(operand, PropertyRef):
            return self.property_value(operand.variable, operand.key)
        return self.element_id(operand.variable)


@dataclass(frozen=True)
class Comparison:
    """``left <op> right``."""

    left: Operand
    comparator: Comparator
    right: Operand

    @property
    def variables(self) -> frozenset[str]:
        return self.left.variables | self.right.variables

    @property
    def property_refs(self) -> frozenset[PropertyRef]:
        return frozenset(
            operand for operand in (self.left, self.right) if isinstance(operand, PropertyRef)
        )

    def negate(self) -> "Comparison":
        return Comparison(self.left, self.comparator.negate(), self.right)

    def evaluate(self, bindings: Bindings) -> bool:
        left = bindings.resolve(self.left)
        right = bindings.resolve(self.right)
        if left is MISSING or right is MISSING:
            return False
        return self.comparator.apply(left, right)

    def __str__(self) -> str:
        return f"{self.left} {self.comparator.value} {self.right}"


@dataclass(frozen=True)
class And:
    left: "Predicate"
    right: "Predicate"

    def __str__(self) -> str:
        return f"({self.left} AND {self.right})"


@dataclass(frozen=True)
class Or:
    left: "Predicate"
    right: "Predicate"

    def __str__(self) -> str:
        return f"({self.left} OR {self.right})"


@dataclass(frozen=True)
class Not:
    operand: "Predicate"

    def __str__(self) -> str:
        return f"NOT {self.operand}"


Predicate = Union[Comparison, And, Or, Not]


# -----------------------------------------------------------------------------
# Conjunctive normal form
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Clause:
    """A disjunction of comparisons."""

    comparisons: tuple[Comparison, ...]

    @property
    def variables(self) -> frozenset[str]:
        result: frozenset[str] = frozenset()
        for comparison in self.comparisons:
            result |= comparison.variables
        return result

    @property
    def property_refs(self) -> frozenset[PropertyRef]:
        result: frozenset[PropertyRef] = frozenset()
        for comparison in self.comparisons:
            result |= comparison.property_refs
        return result

    def evaluate(self, bindings: Bindings) -> bool:
        return any(comparison.evaluate(bindings) for comparison in self.comparisons)

    def __str__(self) -> str:
        if len(self.comparisons) == 1:
            return str(self.comparisons[0])
        return "(" + " OR ".join(str(c) for c in self.comparisons) + ")"


@dataclass(frozen=True)
class CNF:
    """A conjunction of clauses. The empty CNF is always true."""

    clauses: tuple[Clause, ...] = ()

    @classmethod
    def of(cls, clauses: Iterable[Clause]) -> "CNF":
        unique: list[Clause] = []
        for clause in clauses:
            if clause not in unique:
                unique.append(clause)
        return cls(tuple(unique))

    @property
    def variables(self) -> frozenset[str]:
        result: frozenset[str] = frozenset()
        for clause in self.clauses:
            result |= clause.variables
        return result

    @property
    def property_refs(self) -> frozenset[PropertyRef]:
        result: frozenset[PropertyRef] = frozenset()
        for clause in self.clauses:
            result |= clause.property_refs
        return result

    def and_(self, other: "CNF") -> "CNF":
        return CNF.of(self.clauses + other.clauses)

    def restricted_to(self, variables: Iterable[str]) -> "CNF":
        """Keep only the clauses whose variables are all in ``variables``."""
        allowed = frozenset(variables)
        return CNF(tuple(c for c in self.clauses if c.variables <= allowed))

    def evaluate(self, bindings: Bindings) -> bool:
        return all(clause.evaluate(bindings) for clause in self.clauses)

    def __bool__(self) -> bool:
        return bool(self.clauses)

    def __len__(self) -> int:
        return len(self.clauses)

    def __str__(self) -> str:
        return " AND ".join(str(c) for c in self.clauses)


def to_cnf(predicate: Predicate) -> CNF:
    """Convert a predicate tree to conjunctive normal form."""
    return CNF.of(_cnf(predicate, negated=False))


def _cnf(predicate: Predicate, negated: bool) -> list[Clause]:
    if isinstance(predicate, Comparison):
        comparison = predicate.negate() if negated else predicate
        return [Clause((comparison,))]

    if isinstance(predicate, Not):
        return _cnf(predicate.operand, not negated)

    conjunctive = isinstance(predicate, And) != negated
    left = _cnf(predicate.left, negated)
    right = _cnf(predicate.right, negated)

    if conjunctive:
        return left + right

    # (A1 & A2) | (B1 & B2) == (A1|B1) & (A1|B2) & (A2|B1) & (A2|B2)
    clauses = []
    for left_clause in left:
        for right_clause in right:
            comparisons = left_clause.comparisons + tuple(
                c for c in right_clause.comparisons if c not in left_clause.comparisons
            )
            clauses.append(Clause(comparisons))
    return clauses
