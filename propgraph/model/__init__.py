"""Property graph model: elements, graphs, collections and the ASCII loader."""

from .ascii import AsciiGraphLoader, load_graphs
from .elements import Edge, Element, ElementKind, GraphHead, Vertex, new_id
from .errors import GraphFormatError, GraphLoadError
from .graph import GraphCollection, PropertyGraph

__all__ = [
    "AsciiGraphLoader",
    "load_graphs",
    "Edge",
    "Element",
    "ElementKind",
    "GraphHead",
    "Vertex",
    "new_id",
    "GraphFormatError",
    "GraphLoadError",
    "GraphCollection",
    "PropertyGraph",
]
