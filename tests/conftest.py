"""Shared test fixtures for grover-coloring."""

import pytest
import numpy as np

from grover_coloring.graphs import (
    empty_square,
    paper_5vertex,
    triangle,
    complete_k4,
    path_p4,
    cycle_c5,
    KNOWN_CHROMATIC,
)


@pytest.fixture
def graph_square():
    """Cube graph drawn as two nested squares (chromatic number 2)."""
    return empty_square()


@pytest.fixture
def graph_5vertex():
    return paper_5vertex()


@pytest.fixture
def graph_triangle():
    return triangle()


@pytest.fixture
def graph_k4():
    return complete_k4()


@pytest.fixture
def graph_p4():
    return path_p4()


@pytest.fixture
def graph_c5():
    return cycle_c5()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(params=list(KNOWN_CHROMATIC.keys()))
def named_graph(request):
    """Parametrized fixture yielding (name, graph, expected_chromatic_number)."""
    from grover_coloring.graphs import TEST_GRAPHS

    name = request.param
    return name, TEST_GRAPHS[name](), KNOWN_CHROMATIC[name]
