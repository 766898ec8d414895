"""End-to-end Grover coloring search tests."""

import numpy as np
import pytest

from grover_coloring.amplification import AmplitudeAmplifier, optimal_iterations
from grover_coloring.errors import (
    InconsistentVertexCount,
    InvalidGraph,
    InvalidWidth,
    NoColoringFound,
    ResourceExceeded,
)
from grover_coloring.graphs import EMPTY_SQUARE_EDGES, bits_for_colors, make_problem
from grover_coloring.search import find_coloring, verify_coloring, validate_coloring
from grover_coloring.timing import SearchTimer


def _record_verdicts(monkeypatch):
    verdicts = []
    original = AmplitudeAmplifier.finish

    def finish(self, success):
        verdicts.append(success)
        original(self, success)

    monkeypatch.setattr(AmplitudeAmplifier, "finish", finish)
    return verdicts


class TestFindColoring:
    """Run the full pipeline on small graphs."""

    def test_empty_square_two_bits(self, rng):
        coloring = find_coloring(EMPTY_SQUARE_EDGES, 2, rng=rng)
        assert len(coloring) == 8
        assert all(0 <= c < 4 for c in coloring)
        assert verify_coloring(coloring, EMPTY_SQUARE_EDGES)

    def test_empty_square_exact_count(self, rng):
        timer = SearchTimer()
        coloring = find_coloring(
            EMPTY_SQUARE_EDGES, 2, num_vertices=8, count_strategy="exact", rng=rng, timer=timer,
        )
        assert verify_coloring(coloring, EMPTY_SQUARE_EDGES)
        # M = 2652 of 65536 -> 4 iterations per attempt
        assert all(a.m_guess == 2652 for a in timer.attempts)
        assert all(a.iterations == 4 for a in timer.attempts)

    def test_empty_square_one_bit(self, graph_square, rng):
        coloring = find_coloring(graph_square, 1, count_strategy="exact", rng=rng)
        # only the two bipartition colorings use a single bit
        assert coloring in ([0, 1, 0, 1, 1, 0, 1, 0], [1, 0, 1, 0, 0, 1, 0, 1])

    def test_all_known_graphs(self, named_graph, rng):
        name, graph, chi = named_graph
        coloring = find_coloring(
            graph, bits_for_colors(chi), count_strategy="exact", max_attempts=40, rng=rng,
        )
        assert verify_coloring(coloring, list(graph.edges())), f"Invalid coloring on {name}"

    def test_triangle_two_colors_exhausts(self, graph_triangle, rng):
        timer = SearchTimer()
        with pytest.raises(NoColoringFound) as excinfo:
            find_coloring(graph_triangle, 1, rng=rng, timer=timer)
        assert excinfo.value.attempts == 10
        assert timer.num_attempts == 10
        assert timer.num_successes == 0

    def test_triangle_exact_count_short_circuits(self, graph_triangle, rng):
        timer = SearchTimer()
        with pytest.raises(NoColoringFound) as excinfo:
            find_coloring(graph_triangle, 1, count_strategy="exact", rng=rng, timer=timer)
        assert excinfo.value.attempts == 0
        assert timer.num_attempts == 0

    def test_no_edges_needs_no_iterations(self, rng):
        timer = SearchTimer()
        coloring = find_coloring([], 2, num_vertices=3, rng=rng, timer=timer)
        assert len(coloring) == 3
        assert timer.num_attempts == 1
        assert timer.total_iterations == 0

    def test_large_marking_set_skips_amplification(self, rng):
        # one edge, four colors: 12 of 16 states valid
        timer = SearchTimer()
        coloring = find_coloring([(0, 1)], 2, count_strategy="exact", rng=rng, timer=timer)
        assert coloring[0] != coloring[1]
        assert timer.total_iterations == 0

    def test_fixed_iteration_count(self, graph_p4, rng):
        timer = SearchTimer()
        coloring = find_coloring(graph_p4, 1, num_iterations=2, max_attempts=30, rng=rng, timer=timer)
        assert verify_coloring(coloring, list(graph_p4.edges()))
        assert all(a.iterations == 2 and a.m_guess is None for a in timer.attempts)

    def test_doubling_guesses_recorded(self, graph_triangle, rng):
        timer = SearchTimer()
        with pytest.raises(NoColoringFound):
            find_coloring(graph_triangle, 1, max_attempts=6, rng=rng, timer=timer)
        assert [a.m_guess for a in timer.attempts] == [1, 2, 4, 8, 1, 2]

    def test_seeded_runs_repeat(self):
        a = find_coloring(EMPTY_SQUARE_EDGES, 2, rng=np.random.default_rng(99))
        b = find_coloring(EMPTY_SQUARE_EDGES, 2, rng=np.random.default_rng(99))
        assert a == b

    def test_concurrent_attempts(self, rng):
        timer = SearchTimer()
        coloring = find_coloring(EMPTY_SQUARE_EDGES, 2, workers=3, rng=rng, timer=timer)
        assert verify_coloring(coloring, EMPTY_SQUARE_EDGES)
        assert 1 <= timer.num_attempts <= 10

    def test_concurrent_attempts_exhaust(self, graph_triangle, rng):
        with pytest.raises(NoColoringFound) as excinfo:
            find_coloring(graph_triangle, 1, workers=4, rng=rng)
        assert excinfo.value.attempts == 10

    def test_concurrent_winner_cancels_rest_of_batch(self):
        scheduled = {}
        cancelled = []
        for seed in range(10):
            timer = SearchTimer()
            coloring = find_coloring(
                EMPTY_SQUARE_EDGES, 2, workers=4, rng=np.random.default_rng(seed), timer=timer,
            )
            assert verify_coloring(coloring, EMPTY_SQUARE_EDGES)
            for a in timer.attempts:
                scheduled[a.m_guess] = optimal_iterations(1 << 16, a.m_guess)
            cancelled.extend(a for a in timer.attempts if a.cancelled)
        assert cancelled
        for a in cancelled:
            assert not a.valid
            assert a.iterations < scheduled[a.m_guess]

    def test_concurrent_verdict_on_winner(self, monkeypatch, rng):
        verdicts = _record_verdicts(monkeypatch)
        find_coloring(EMPTY_SQUARE_EDGES, 2, workers=3, rng=rng)
        assert verdicts == [True]

    def test_concurrent_verdict_on_exhaustion(self, graph_triangle, monkeypatch, rng):
        verdicts = _record_verdicts(monkeypatch)
        with pytest.raises(NoColoringFound):
            find_coloring(graph_triangle, 1, workers=4, rng=rng)
        # 10 attempts in batches of 4: the last batch holds two engines
        assert verdicts == [False, False]

    def test_sequential_verdicts(self, graph_triangle, monkeypatch, rng):
        verdicts = _record_verdicts(monkeypatch)
        find_coloring(EMPTY_SQUARE_EDGES, 2, rng=rng)
        with pytest.raises(NoColoringFound):
            find_coloring(graph_triangle, 1, rng=rng)
        assert verdicts == [True, False]

    def test_threaded_oracle_pass(self, rng):
        timer = SearchTimer()
        coloring = find_coloring(
            EMPTY_SQUARE_EDGES, 2, count_strategy="exact", pass_workers=3, chunk_size=4096,
            rng=rng, timer=timer,
        )
        assert verify_coloring(coloring, EMPTY_SQUARE_EDGES)
        assert all(a.iterations == 4 for a in timer.attempts)

    def test_half_marked_shortcut_disabled(self, rng):
        # 12 of 16 valid: the single formula iteration leaves no weight on them
        timer = SearchTimer()
        with pytest.raises(NoColoringFound) as excinfo:
            find_coloring(
                [(0, 1)], 2, count_strategy="exact", shortcut_half_marked=False,
                max_attempts=5, rng=rng, timer=timer,
            )
        assert excinfo.value.attempts == 5
        assert all(a.m_guess == 12 and a.iterations == 1 for a in timer.attempts)

    def test_verbose_output(self, graph_p4, rng, capsys):
        find_coloring(graph_p4, 1, count_strategy="exact", rng=rng, verbose=True)
        out = capsys.readouterr().out
        assert "4 vertices, 3 edges" in out
        assert "attempt 1" in out


class TestInputErrors:
    def test_inconsistent_vertex_count(self, rng):
        with pytest.raises(InconsistentVertexCount):
            find_coloring(EMPTY_SQUARE_EDGES, 2, num_vertices=7, rng=rng)

    def test_invalid_width(self, graph_triangle):
        with pytest.raises(InvalidWidth):
            find_coloring(graph_triangle, 0)

    def test_self_loop(self):
        with pytest.raises(InvalidGraph):
            find_coloring([(0, 0)], 1)

    def test_resource_exceeded(self, graph_c5):
        timer = SearchTimer()
        with pytest.raises(ResourceExceeded):
            find_coloring(graph_c5, 2, resource_ceiling_bits=9, timer=timer)
        assert timer.num_attempts == 0

    def test_resource_default_ceiling(self):
        edges = [(i, i + 1) for i in range(12)]  # 13 vertices x 2 bits = 26 qubits
        with pytest.raises(ResourceExceeded):
            find_coloring(edges, 2)

    def test_bad_options(self, graph_triangle):
        with pytest.raises(ValueError):
            find_coloring(graph_triangle, 2, max_attempts=0)
        with pytest.raises(ValueError):
            find_coloring(graph_triangle, 2, count_strategy="guess")
        with pytest.raises(ValueError):
            find_coloring(graph_triangle, 2, num_iterations=-1)


class TestVerifyColoring:
    def test_valid(self):
        assert verify_coloring([0, 1, 0, 1, 1, 0, 1, 0], EMPTY_SQUARE_EDGES)

    def test_invalid_adjacent(self):
        assert not verify_coloring([0, 0, 1, 2], [(0, 1), (1, 2)])

    def test_no_edges(self):
        assert verify_coloring([3, 3, 3], [])

    def test_short_coloring_is_invalid(self):
        assert not verify_coloring([0], [(0, 1)])
        assert not verify_coloring([], [(0, 1)])


class TestValidateColoring:
    """Tests for the detailed validate_coloring function."""

    def test_valid_coloring(self, graph_5vertex):
        problem = make_problem(graph_5vertex)
        vr = validate_coloring([0, 1, 2, 0, 1], problem, 2)
        assert vr.valid
        assert vr.num_colors_used == 3
        assert vr.num_vertices_covered == 5
        assert vr.num_vertices_expected == 5
        assert vr.out_of_range == []
        assert vr.edge_violations == []

    def test_edge_violation_detected(self, graph_5vertex):
        problem = make_problem(graph_5vertex)
        vr = validate_coloring([0, 0, 2, 1, 1], problem, 2)
        assert not vr.valid
        assert (0, 1, 0) in vr.edge_violations
        assert (3, 4, 1) in vr.edge_violations

    def test_out_of_range_detected(self, graph_triangle):
        problem = make_problem(graph_triangle)
        vr = validate_coloring([0, 1, 2], problem, 1)
        assert not vr.valid
        assert vr.out_of_range == [2]

    def test_short_coloring(self, graph_triangle):
        problem = make_problem(graph_triangle)
        vr = validate_coloring([0, 1], problem, 2)
        assert not vr.valid
        assert vr.num_vertices_covered == 2

    def test_search_output_validates(self, graph_5vertex, rng):
        """validate_coloring agrees with verify_coloring on search output."""
        problem = make_problem(graph_5vertex)
        coloring = find_coloring(graph_5vertex, 2, count_strategy="exact", max_attempts=20, rng=rng)
        assert verify_coloring(coloring, problem.edges)
        assert validate_coloring(coloring, problem, 2).valid


class TestSearchTimer:
    def test_summary(self):
        timer = SearchTimer()
        timer.record(m_guess=1, iterations=3, amplify_seconds=0.5, valid=False)
        timer.record(m_guess=2, iterations=2, amplify_seconds=0.25, valid=True)
        timer.record(m_guess=4, iterations=1, cancelled=True)
        s = timer.summary()
        assert s["num_attempts"] == 3
        assert s["num_successes"] == 1
        assert s["success_rate"] == 0.5
        assert s["total_iterations"] == 6
        assert s["total_amplify_seconds"] == 0.75
        assert "3 attempts" in repr(timer)
        timer.reset()
        assert timer.num_attempts == 0
        assert timer.success_rate == 0.0
