#!/usr/bin/env python
"""CLI entry point for Grover-search graph coloring."""

import argparse
import sys

import numpy as np

from grover_coloring.errors import ColoringError, NoColoringFound
from grover_coloring.graphs import TEST_GRAPHS, KNOWN_CHROMATIC, bits_for_colors, make_problem
from grover_coloring.search import find_coloring, verify_coloring
from grover_coloring.timing import SearchTimer


def _parse_edges(text: str):
    edges = []
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        u, v = token.split("-")
        edges.append((int(u), int(v)))
    return edges


def main():
    parser = argparse.ArgumentParser(
        description="Simulated Grover search for a proper vertex coloring"
    )
    parser.add_argument("--test", action="store_true", help="Run on predefined test graphs")
    parser.add_argument("--graph", choices=sorted(TEST_GRAPHS), default="empty_square",
                        help="Named test graph (default: empty_square)")
    parser.add_argument("--edges", help="Explicit edge list, e.g. '0-1,1-2,2-0'")
    parser.add_argument("--num-vertices", type=int, default=None,
                        help="Vertex count (checked against --edges)")
    parser.add_argument("--bits", type=int, default=2, help="Bits per color (default: 2)")
    parser.add_argument("--max-attempts", type=int, default=10)
    parser.add_argument("--strategy", choices=["doubling", "exact"], default="doubling",
                        help="How the number of valid colorings is estimated")
    parser.add_argument("--iterations", type=int, default=None,
                        help="Fixed Grover iteration count")
    parser.add_argument("--ceiling", type=int, default=24, help="Max simulated qubits")
    parser.add_argument("--workers", type=int, default=1, help="Concurrent attempts")
    parser.add_argument("--pass-workers", type=int, default=1,
                        help="Threads sharing each oracle pass")
    parser.add_argument("--no-shortcut", action="store_true",
                        help="Always use the iteration formula with --strategy exact")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", "-v", action="store_true")

    args = parser.parse_args()
    rng = np.random.default_rng(args.seed)

    search_kwargs = {
        "max_attempts": args.max_attempts,
        "count_strategy": args.strategy,
        "num_iterations": args.iterations,
        "resource_ceiling_bits": args.ceiling,
        "workers": args.workers,
        "pass_workers": args.pass_workers,
        "shortcut_half_marked": not args.no_shortcut,
        "verbose": args.verbose,
    }

    if args.test:
        print("=" * 60)
        print("Grover coloring on predefined test graphs")
        print("=" * 60)
        all_pass = True
        for name, factory in TEST_GRAPHS.items():
            G = factory()
            chi = KNOWN_CHROMATIC[name]
            bits = bits_for_colors(chi)
            timer = SearchTimer()
            try:
                coloring = find_coloring(G, bits, rng=rng, timer=timer, **search_kwargs)
                valid = verify_coloring(coloring, list(G.edges()))
            except ColoringError as exc:
                coloring, valid = None, False
                if args.verbose:
                    print(f"  {name}: {exc}")
            status = "PASS" if valid else "FAIL"
            if not valid:
                all_pass = False
            print(
                f"  {name:<16} bits={bits}  qubits={G.number_of_nodes() * bits:<3} "
                f"attempts={timer.num_attempts:<3} iters={timer.total_iterations:<5} "
                f"coloring={coloring}  [{status}]"
            )
        print("=" * 60)
        return 0 if all_pass else 1

    try:
        if args.edges:
            graph = _parse_edges(args.edges)
            problem = make_problem(graph, args.num_vertices)
        else:
            graph = TEST_GRAPHS[args.graph]()
            problem = make_problem(graph)
        print(f"Graph: {problem.num_vertices} nodes, {problem.num_edges} edges, "
              f"{1 << args.bits} colors")
        timer = SearchTimer()
        coloring = find_coloring(graph, args.bits, num_vertices=args.num_vertices,
                                 rng=rng, timer=timer, **search_kwargs)
    except NoColoringFound as exc:
        print(f"Result: {exc}")
        return 1
    except ColoringError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(f"Result: valid coloring after {timer.num_attempts} attempt(s)")
    for v, c in enumerate(coloring):
        print(f"  Vertex {v}: color {c}")
    print(f"Timing: {timer}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
