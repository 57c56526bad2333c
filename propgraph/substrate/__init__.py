"""Execution substrate abstraction."""

from .collection import DistributedCollection, JoinSide, LocalCollection

__all__ = [
    "DistributedCollection",
    "JoinSide",
    "LocalCollection",
]
