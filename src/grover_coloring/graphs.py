"""Coloring problem construction and named test graphs."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

import networkx as nx

from .errors import InconsistentVertexCount, InvalidGraph

Edge = Tuple[int, int]
GraphLike = Union[nx.Graph, Iterable[Edge]]


@dataclass(frozen=True)
class ColoringProblem:
    """Immutable graph: vertices ``0 .. num_vertices-1`` and undirected edges.

    Edges are stored as ``(min, max)`` pairs in first-seen input order.
    """

    num_vertices: int
    edges: Tuple[Edge, ...]

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def to_networkx(self) -> nx.Graph:
        G = nx.Graph()
        G.add_nodes_from(range(self.num_vertices))
        G.add_edges_from(self.edges)
        return G


def _normalise_edges(pairs: Iterable[Edge]) -> Tuple[Edge, ...]:
    seen = set()
    edges = []
    for pair in pairs:
        u, v = (int(x) for x in pair)
        if u < 0 or v < 0:
            raise InvalidGraph(f"negative vertex index in edge ({u}, {v})")
        if u == v:
            raise InvalidGraph(f"self-loop on vertex {u}")
        key = (min(u, v), max(u, v))
        if key not in seen:
            seen.add(key)
            edges.append(key)
    return tuple(edges)


def make_problem(graph: GraphLike, num_vertices: Optional[int] = None) -> ColoringProblem:
    """Build a validated :class:`ColoringProblem`.

    Args:
        graph: A networkx graph whose nodes are exactly ``0 .. n-1``, or an
            iterable of ``(u, v)`` integer pairs.
        num_vertices: Expected vertex count.  For an edge list it must equal
            the largest vertex index + 1 (it is required when the list is
            empty).  For a networkx graph it must equal the node count.

    Raises:
        InvalidGraph: self-loop or negative index.
        InconsistentVertexCount: vertex count does not match the edges.
    """
    if isinstance(graph, nx.Graph):
        n = graph.number_of_nodes()
        if n == 0:
            raise InconsistentVertexCount("graph has no nodes")
        if set(graph.nodes()) != set(range(n)):
            raise InconsistentVertexCount(
                f"graph nodes must be labelled 0..{n - 1}, got {sorted(graph.nodes(), key=str)}"
            )
        if num_vertices is not None and num_vertices != n:
            raise InconsistentVertexCount(
                f"num_vertices={num_vertices} but the graph has {n} nodes"
            )
        return ColoringProblem(num_vertices=n, edges=_normalise_edges(graph.edges()))

    edges = _normalise_edges(graph)
    if not edges:
        if num_vertices is None or num_vertices < 1:
            raise InconsistentVertexCount(
                "num_vertices must be a positive integer for an empty edge list"
            )
        return ColoringProblem(num_vertices=num_vertices, edges=edges)

    implied = max(v for _, v in edges) + 1
    if num_vertices is not None and num_vertices != implied:
        raise InconsistentVertexCount(
            f"num_vertices={num_vertices} but the edges use vertices 0..{implied - 1}"
        )
    return ColoringProblem(num_vertices=implied, edges=edges)


# ---------------------------------------------------------------------------
# Named test graphs
# ---------------------------------------------------------------------------

EMPTY_SQUARE_EDGES = [
    (0, 1), (1, 2), (2, 3), (3, 0),
    (0, 4), (1, 5), (2, 6), (3, 7),
    (4, 5), (5, 6), (6, 7), (7, 4),
]


def empty_square() -> nx.Graph:
    """Cube graph drawn as a square inside a square. Chromatic number = 2."""
    G = nx.Graph()
    G.add_nodes_from(range(8))
    G.add_edges_from(EMPTY_SQUARE_EDGES)
    return G


def paper_5vertex() -> nx.Graph:
    """5-vertex graph with a triangle and a pendant path. Chromatic number = 3."""
    G = nx.Graph()
    G.add_nodes_from(range(5))
    G.add_edges_from([(0, 1), (0, 2), (1, 2), (1, 3), (2, 4), (3, 4)])
    return G


def triangle() -> nx.Graph:
    """K3 triangle. Chromatic number = 3."""
    return nx.cycle_graph(3)


def complete_k4() -> nx.Graph:
    """K4 complete graph. Chromatic number = 4."""
    return nx.complete_graph(4)


def path_p4() -> nx.Graph:
    """P4 path graph. Chromatic number = 2."""
    return nx.path_graph(4)


def cycle_c5() -> nx.Graph:
    """C5 odd cycle. Chromatic number = 3."""
    return nx.cycle_graph(5)


def wheel_w5() -> nx.Graph:
    """Wheel graph W5 (6 nodes including center). Chromatic number = 4."""
    return nx.wheel_graph(6)


def erdos_renyi(n: int, p: float, seed: int = 42) -> nx.Graph:
    """Erdos-Renyi random graph G(n,p)."""
    return nx.gnp_random_graph(n, p, seed=seed)


KNOWN_CHROMATIC = {
    "empty_square": 2,
    "paper_5vertex": 3,
    "triangle": 3,
    "complete_k4": 4,
    "path_p4": 2,
    "cycle_c5": 3,
    "wheel_w5": 4,
}

TEST_GRAPHS = {
    "empty_square": empty_square,
    "paper_5vertex": paper_5vertex,
    "triangle": triangle,
    "complete_k4": complete_k4,
    "path_p4": path_p4,
    "cycle_c5": cycle_c5,
    "wheel_w5": wheel_w5,
}


def bits_for_colors(num_colors: int) -> int:
    """Smallest register width holding ``num_colors`` distinct colors."""
    return max(1, (num_colors - 1).bit_length())
