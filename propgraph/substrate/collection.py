"""Collection interface of the execution substrate and a local implementation.

The matching and equality operators are written entirely against
``DistributedCollection``. ``LocalCollection`` evaluates the same operations
lazily in the current process: every transformation returns a new collection
that recomputes from its source when iterated, so no operator waits for its
whole input before emitting, except for the build side of a join.
"""

from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Protocol, TypeVar

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K", bound=Hashable)


class JoinSide(str, Enum):
    """Which side of a join is materialized into the hash table."""

    LEFT = "left"
    RIGHT = "right"


class DistributedCollection(Protocol[T]):
    """Capabilities the core expects from the execution substrate."""

    def map(self, fn: Callable[[T], U]) -> "DistributedCollection[U]": ...

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "DistributedCollection[U]": ...

    def filter(self, fn: Callable[[T], bool]) -> "DistributedCollection[T]": ...

    def join(
        self,
        other: "DistributedCollection[U]",
        left_key: Callable[[T], Any],
        right_key: Callable[[U], Any],
        build_side: JoinSide = JoinSide.RIGHT,
    ) -> "DistributedCollection[tuple[T, U]]": ...

    def co_group(
        self,
        other: "DistributedCollection[U]",
        left_key: Callable[[T], Any],
        right_key: Callable[[U], Any],
    ) -> "DistributedCollection[tuple[Any, list[T], list[U]]]": ...

    def union(self, other: "DistributedCollection[T]") -> "DistributedCollection[T]": ...

    def distinct(self, key: Callable[[T], Any] | None = None) -> "DistributedCollection[T]": ...

    def broadcast(self) -> list[T]: ...

    def collect(self) -> list[T]: ...

    def count(self) -> int: ...


class LocalCollection(Generic[T]):
    """Lazy, re-iterable in-process collection."""

    def __init__(self, source: Callable[[], Iterable[T]]):
        self._source = source

    @classmethod
    def of(cls, items: Iterable[T]) -> "LocalCollection[T]":
        """Create a collection over a fixed set of items."""
        data = list(items)
        return cls(lambda: data)

    @classmethod
    def empty(cls) -> "LocalCollection[T]":
        return cls.of(())

    def __iter__(self) -> Iterator[T]:
        return iter(self._source())

    def map(self, fn: Callable[[T], U]) -> "LocalCollection[U]":
        return LocalCollection(lambda: (fn(item) for item in self))

    def flat_map(self, fn: Callable[[T], Iterable[U]]) -> "LocalCollection[U]":
        return LocalCollection(lambda: (out for item in self for out in fn(item)))

    def filter(self, fn: Callable[[T], bool]) -> "LocalCollection[T]":
        return LocalCollection(lambda: (item for item in self if fn(item)))

    def join(
        self,
        other: "LocalCollection[U]",
        left_key: Callable[[T], Any],
        right_key: Callable[[U], Any],
        build_side: JoinSide = JoinSide.RIGHT,
    ) -> "LocalCollection[tuple[T, U]]":
        """Equi-join two collections, emitting ``(left, right)`` pairs."""

        def run() -> Iterator[tuple[T, U]]:
            if build_side == JoinSide.RIGHT:
                table: dict[Any, list[U]] = defaultdict(list)
                for right in other:
                    table[right_key(right)].append(right)
                for left in self:
                    for right in table.get(left_key(left), ()):
                        yield left, right
            else:
                table_left: dict[Any, list[T]] = defaultdict(list)
                for left in self:
                    table_left[left_key(left)].append(left)
                for right in other:
                    for left in table_left.get(right_key(right), ()):
                        yield left, right

        return LocalCollection(run)

    def co_group(
        self,
        other: "LocalCollection[U]",
        left_key: Callable[[T], Any],
        right_key: Callable[[U], Any],
    ) -> "LocalCollection[tuple[Any, list[T], list[U]]]":
        """Group both sides by key, emitting one triple per key on either side."""

        def run() -> Iterator[tuple[Any, list[T], list[U]]]:
            lefts: dict[Any, list[T]] = defaultdict(list)
            rights: dict[Any, list[U]] = defaultdict(list)
            for left in self:
                lefts[left_key(left)].append(left)
            for right in other:
                rights[right_key(right)].append(right)
            for key in list(lefts) + [k for k in rights if k not in lefts]:
                yield key, lefts.get(key, []), rights.get(key, [])

        return LocalCollection(run)

    def union(self, other: "LocalCollection[T]") -> "LocalCollection[T]":
        def run() -> Iterator[T]:
            yield from self
            yield from other

        return LocalCollection(run)

    def distinct(self, key: Callable[[T], Any] | None = None) -> "LocalCollection[T]":
        def run() -> Iterator[T]:
            seen = set()
            for item in self:
                marker = key(item) if key is not None else item
                if marker not in seen:
                    seen.add(marker)
                    yield item

        return LocalCollection(run)

    def broadcast(self) -> list[T]:
        """Materialize the collection as side data for other operators."""
        return list(self)

    def collect(self) -> list[T]:
        return list(self)

    def count(self) -> int:
        return sum(1 for _ in self)

    def is_empty(self) -> bool:
        for _ in self:
            return False
        return True
