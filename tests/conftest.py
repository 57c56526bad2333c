"""Shared fixtures for tests."""

from pathlib import Path

import pytest

from propgraph.model.ascii import AsciiGraphLoader


SOCIAL_GRAPH = """
g:Community{area="Leipzig"}[
    (alice:Person{name="Alice", age=30})-[ak:knows{since=2014}]->(bob:Person{name="Bob", age=25});
    (bob)-[bc:knows{since=2015}]->(carol:Person{name="Carol", age=35});
    (carol)-[ca:knows{since=2016}]->(alice);
    (alice)-[aw:worksAt]->(acme:Company{name="Acme"});
    (bob)-[bw:worksAt]->(acme)
]
"""

EQUALITY_GRAPHS = """
gEmpty[];
gRef:G{dataDiff=false}[
    (a1:A{x=1})-[loop:a{x=1}]->(a1)-[aa:a{x=1}]->(a2:A{x=2});
    (a1)-[par1:p]->(b1:B);(a1)-[par2:p]->(b1:B);
    (b1)-[cyc1:c]->(b2:B)-[cyc2:c]->(b3:B)-[cyc3:c]->(b1)
];
gClone:G{dataDiff=true}[
    (a1)-[loop]->(a1)-[aa]->(a2);
    (a1)-[par1]->(b1);(a1)-[par2]->(b1);
    (b1)-[cyc1]->(b2)-[cyc2]->(b3)-[cyc3]->(b1)
];
gDiffId:G{dataDiff=false}[
    (a1)-[loop]->(a1)-[aa]->(a2);
    (a1)-[par1]->(b1);(a1)-[par2]->(b1);
    (b1)-[cyc1]->(b2)-[:c]->(b3)-[cyc3]->(b1)
];
gDiffData:G[
    (a1)-[loop]->(a1)-[:a{y=1}]->(:A{x="diff"});
    (a1)-[par1]->(b1);(a1)-[par2]->(b1);
    (b1)-[cyc1]->(b2)-[cyc2]->(b3)-[cyc3]->(b1)
];
gRev:G{dataDiff=false}[
    (a1)-[loop]->(a1)<-[:a{x=1}]-(a2);
    (a1)<-[:p]-(b1);(a1)-[:p]->(b1);
    (b1)-[cyc1]->(b2)-[cyc2]->(b3)-[cyc3]->(b1)
]
"""


@pytest.fixture
def examples_dir() -> Path:
    """Return the path to the examples directory."""
    return Path(__file__).parent.parent / "examples"


@pytest.fixture
def social_loader() -> AsciiGraphLoader:
    """Three people in a knows-cycle, two of them working at one company."""
    return AsciiGraphLoader.from_string(SOCIAL_GRAPH)


@pytest.fixture
def social_graph(social_loader):
    return social_loader.get_logical_graph_by_variable("g")


@pytest.fixture
def chain_graph():
    """Return the chain a1 -> a2 -> a3."""
    loader = AsciiGraphLoader.from_string("(a1:A)-[e1:e]->(a2:A)-[e2:e]->(a3:A)")
    return loader.get_database_graph()


@pytest.fixture
def equality_loader() -> AsciiGraphLoader:
    """Graphs sharing elements, differing in ids, data or edge direction."""
    return AsciiGraphLoader.from_string(EQUALITY_GRAPHS)
