"""Match strategies for vertex and edge bindings."""

from enum import Enum


class MatchStrategy(str, Enum):
    """Whether distinct query variables may bind the same graph element.

    HOMOMORPHISM allows it, ISOMORPHISM requires pairwise distinct elements.
    Vertex and edge strategies are chosen independently.
    """

    HOMOMORPHISM = "homomorphism"
    ISOMORPHISM = "isomorphism"


DEFAULT_VERTEX_STRATEGY = MatchStrategy.HOMOMORPHISM
DEFAULT_EDGE_STRATEGY = MatchStrategy.ISOMORPHISM
