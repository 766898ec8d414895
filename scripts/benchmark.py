#!/usr/bin/env python
"""Benchmark: doubling vs exact-count Grover search on a range of graphs.

Outputs a markdown table with the size of the marking set, the success
probability of one amplification at the textbook iteration count, and the
observed success rate / attempts / wall-clock time of repeated searches.
"""

import argparse
import json
import sys
import time
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Tuple

import networkx as nx
import numpy as np

from grover_coloring.amplification import AmplitudeAmplifier, optimal_iterations
from grover_coloring.encoding import ColorEncoding
from grover_coloring.errors import NoColoringFound
from grover_coloring.graphs import TEST_GRAPHS, KNOWN_CHROMATIC, bits_for_colors, erdos_renyi, make_problem
from grover_coloring.oracle.coloring import ColoringOracle
from grover_coloring.search import find_coloring
from grover_coloring.timing import SearchTimer


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class RunResult:
    strategy: str
    graph_name: str
    n_nodes: int
    n_edges: int
    bits: int
    qubits: int
    marked: int
    ideal_iterations: Optional[int]
    ideal_success: float
    trials: int
    successes: int
    mean_attempts: float
    mean_iterations: float
    wall_seconds: float


@dataclass
class BenchmarkSuite:
    results: List[RunResult] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ideal_success(oracle: ColoringOracle, marked: int) -> Tuple[Optional[int], float]:
    """Success probability of one amplification at the textbook iteration count."""
    if marked == 0:
        return None, 0.0
    iterations = optimal_iterations(oracle.num_states, marked)
    amplifier = AmplitudeAmplifier(oracle)
    amplifier.prepare()
    amplifier.iterate(iterations)
    p = amplifier.success_probability()
    amplifier.discard()
    return iterations, p


def _run_graph(
    graph: nx.Graph,
    graph_name: str,
    bits: int,
    strategy: str,
    trials: int,
    max_attempts: int,
    seed: int,
) -> RunResult:
    problem = make_problem(graph)
    encoding = ColorEncoding(problem.num_vertices, bits)
    oracle = ColoringOracle(encoding, problem.edges)
    marked = oracle.count_marked()
    ideal_iters, ideal_p = _ideal_success(oracle, marked)

    rng = np.random.default_rng(seed)
    timer = SearchTimer()
    successes = 0
    attempts = []
    t0 = time.time()
    for _ in range(trials):
        before = timer.num_attempts
        try:
            find_coloring(graph, bits, max_attempts=max_attempts,
                          count_strategy=strategy, rng=rng, timer=timer)
            successes += 1
        except NoColoringFound:
            pass
        attempts.append(timer.num_attempts - before)
    elapsed = time.time() - t0

    return RunResult(
        strategy=strategy,
        graph_name=graph_name,
        n_nodes=problem.num_vertices,
        n_edges=problem.num_edges,
        bits=bits,
        qubits=encoding.num_qubits,
        marked=marked,
        ideal_iterations=ideal_iters,
        ideal_success=round(ideal_p, 4),
        trials=trials,
        successes=successes,
        mean_attempts=round(float(np.mean(attempts)), 2) if attempts else 0.0,
        mean_iterations=round(timer.total_iterations / trials, 1) if trials else 0.0,
        wall_seconds=round(elapsed, 2),
    )


def _nx_greedy_chi(G: nx.Graph) -> int:
    """NetworkX greedy upper bound on chromatic number."""
    coloring = nx.coloring.greedy_color(G, strategy="largest_first")
    return max(coloring.values()) + 1 if coloring else 1


# ---------------------------------------------------------------------------
# Benchmark graph catalogue
# ---------------------------------------------------------------------------

def build_graph_catalogue(
    er_sizes: List[int],
    er_probs: List[float],
    max_qubits: int,
    seed: int = 42,
) -> List[Tuple[str, nx.Graph, int]]:
    """Return (name, graph, bits_per_color) tuples that fit in *max_qubits*."""
    catalogue = []

    for name, factory in TEST_GRAPHS.items():
        G = factory()
        catalogue.append((name, G, bits_for_colors(KNOWN_CHROMATIC[name])))

    # Erdos-Renyi graphs: width from the greedy bound
    for n in er_sizes:
        for p in er_probs:
            G = erdos_renyi(n, p, seed=seed)
            catalogue.append((f"ER({n},{p})", G, bits_for_colors(_nx_greedy_chi(G))))

    return [
        (name, G, bits) for name, G, bits in catalogue
        if G.number_of_nodes() * bits <= max_qubits
    ]


# ---------------------------------------------------------------------------
# Printing
# ---------------------------------------------------------------------------

def print_markdown_table(results: List[RunResult]):
    hdr = (
        "| Graph | n | m | bits | qubits | M | R* | p(R*) | strategy "
        "| ok/trials | attempts | iters | time(s) |"
    )
    sep = (
        "|-------|---|---|------|--------|---|----|-------|----------"
        "|-----------|----------|-------|---------|"
    )
    print(hdr)
    print(sep)
    for r in results:
        r_star = str(r.ideal_iterations) if r.ideal_iterations is not None else "-"
        print(
            f"| {r.graph_name:<16} | {r.n_nodes:>3} | {r.n_edges:>3} | {r.bits:>4} "
            f"| {r.qubits:>6} | {r.marked:>6} | {r_star:>4} | {r.ideal_success:>6} "
            f"| {r.strategy:<8} | {r.successes:>4}/{r.trials:<4} | {r.mean_attempts:>8} "
            f"| {r.mean_iterations:>6} | {r.wall_seconds:>7} |"
        )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(description="Benchmark Grover coloring search")
    parser.add_argument("--trials", type=int, default=20)
    parser.add_argument("--max-attempts", type=int, default=10)
    parser.add_argument("--strategies", nargs="+", default=["doubling", "exact"],
                        choices=["doubling", "exact"])
    parser.add_argument("--er-sizes", type=int, nargs="*", default=[6, 8])
    parser.add_argument("--er-probs", type=float, nargs="*", default=[0.3, 0.5])
    parser.add_argument("--max-qubits", type=int, default=18)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--json", type=str, default=None, help="Save results as JSON")
    args = parser.parse_args()

    catalogue = build_graph_catalogue(args.er_sizes, args.er_probs, args.max_qubits, args.seed)
    suite = BenchmarkSuite()
    for name, G, bits in catalogue:
        for strategy in args.strategies:
            r = _run_graph(G, name, bits, strategy, args.trials, args.max_attempts, args.seed)
            suite.results.append(r)
            print(f"  {name:<16} {strategy:<8} {r.successes}/{r.trials}  {r.wall_seconds}s",
                  file=sys.stderr)

    print_markdown_table(suite.results)

    if args.json:
        with open(args.json, "w") as f:
            json.dump([asdict(r) for r in suite.results], f, indent=2)
        print(f"\nSaved {len(suite.results)} results to {args.json}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
