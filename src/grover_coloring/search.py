"""Grover search driver: amplify, sample, verify and retry."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .amplification import (
    DEFAULT_RESOURCE_CEILING_BITS,
    AmplitudeAmplifier,
    doubling_guesses,
    optimal_iterations,
)
from .encoding import ColorEncoding
from .errors import NoColoringFound, ResourceExceeded
from .graphs import ColoringProblem, GraphLike, make_problem
from .oracle.base import DEFAULT_CHUNK_SIZE
from .oracle.coloring import ColoringOracle
from .timing import SearchTimer

COUNT_STRATEGIES = ("doubling", "exact")


def verify_coloring(coloring: Sequence[int], edges: Sequence[Tuple[int, int]]) -> bool:
    """Check that no edge joins two vertices of the same color.

    A coloring too short to cover an edge endpoint is not valid.
    """
    return all(
        max(u, v) < len(coloring) and coloring[u] != coloring[v] for u, v in edges
    )


@dataclass
class ValidationResult:
    """Detailed coloring validation result."""
    valid: bool
    num_colors_used: int
    num_vertices_covered: int
    num_vertices_expected: int
    out_of_range: List[int]  # vertices whose color does not fit the register
    edge_violations: List[Tuple[int, int, int]]  # (u, v, shared color)


def validate_coloring(
    coloring: Sequence[int], problem: ColoringProblem, bits_per_color: int,
) -> ValidationResult:
    """Detailed validation of a coloring against *problem*.

    Returns a ValidationResult with specific error information.
    """
    num_colors = 1 << bits_per_color
    out_of_range = [v for v, c in enumerate(coloring) if not 0 <= c < num_colors]
    edge_violations: List[Tuple[int, int, int]] = []
    for u, v in problem.edges:
        if u < len(coloring) and v < len(coloring) and coloring[u] == coloring[v]:
            edge_violations.append((u, v, coloring[u]))

    covered = min(len(coloring), problem.num_vertices)
    valid = (
        len(coloring) == problem.num_vertices
        and not out_of_range
        and not edge_violations
    )
    return ValidationResult(
        valid=valid,
        num_colors_used=len(set(coloring)),
        num_vertices_covered=covered,
        num_vertices_expected=problem.num_vertices,
        out_of_range=out_of_range,
        edge_violations=edge_violations,
    )


@dataclass
class _Attempt:
    m_guess: Optional[int]
    iterations: int
    coloring: Optional[List[int]] = None
    valid: bool = False
    cancelled: bool = False
    amplify_seconds: float = 0.0
    sample_seconds: float = 0.0
    amplifier: Optional[AmplitudeAmplifier] = field(default=None, repr=False)


def _iteration_schedule(
    oracle: ColoringOracle,
    max_attempts: int,
    count_strategy: str,
    num_iterations: Optional[int],
    shortcut_half_marked: bool = True,
) -> List[Tuple[Optional[int], int]]:
    """One ``(m_guess, iterations)`` pair per attempt."""
    n = oracle.num_states
    if num_iterations is not None:
        return [(None, num_iterations)] * max_attempts
    if oracle.marks_everything:
        return [(n, 0)] * max_attempts
    if count_strategy == "exact":
        m = oracle.count_marked()
        if m == 0:
            raise NoColoringFound(0, "marking set is empty")
        # At M >= N/2 one more iteration can only lower the odds of a plain
        # sample of the start state, which already succeeds half the time.
        if shortcut_half_marked and 2 * m >= n:
            iterations = 0
        else:
            iterations = optimal_iterations(n, m)
        return [(m, iterations)] * max_attempts
    return [(g, optimal_iterations(n, g)) for g in doubling_guesses(n, max_attempts)]


def _run_attempt(
    amplifier: AmplitudeAmplifier,
    edges: Sequence[Tuple[int, int]],
    m_guess: Optional[int],
    iterations: int,
    rng: np.random.Generator,
    cancel_event: Optional[threading.Event] = None,
) -> _Attempt:
    attempt = _Attempt(m_guess=m_guess, iterations=iterations, amplifier=amplifier)

    t0 = time.monotonic()
    amplifier.prepare()
    done = amplifier.iterate(iterations, cancel_event=cancel_event)
    attempt.amplify_seconds = time.monotonic() - t0
    if done < iterations:
        amplifier.discard()
        attempt.cancelled = True
        attempt.iterations = done
        return attempt

    t0 = time.monotonic()
    index = amplifier.measure(rng)
    attempt.coloring = amplifier.oracle.encoding.decode(index)
    attempt.valid = verify_coloring(attempt.coloring, edges)
    attempt.sample_seconds = time.monotonic() - t0
    return attempt


def _report(attempt_no: int, attempt: _Attempt, timer: Optional[SearchTimer], verbose: bool) -> None:
    if timer is not None:
        timer.record(
            m_guess=attempt.m_guess,
            iterations=attempt.iterations,
            amplify_seconds=attempt.amplify_seconds,
            sample_seconds=attempt.sample_seconds,
            valid=attempt.valid,
            cancelled=attempt.cancelled,
        )
    if verbose:
        if attempt.cancelled:
            print(f"  attempt {attempt_no}: M~{attempt.m_guess} cancelled "
                  f"after {attempt.iterations} iterations")
        else:
            print(f"  attempt {attempt_no}: M~{attempt.m_guess} R={attempt.iterations} "
                  f"sample={attempt.coloring} valid={attempt.valid}")


def _search_sequential(make_amplifier, edges, schedule, rng, timer, verbose) -> List[int]:
    amplifier = make_amplifier()
    for attempt_no, (m_guess, iterations) in enumerate(schedule, start=1):
        attempt = _run_attempt(amplifier, edges, m_guess, iterations, rng)
        _report(attempt_no, attempt, timer, verbose)
        if attempt.valid:
            amplifier.finish(True)
            return attempt.coloring
    amplifier.finish(False)
    raise NoColoringFound(len(schedule))


def _search_concurrent(make_amplifier, edges, schedule, rng, workers, timer, verbose) -> List[int]:
    child_rngs = rng.spawn(len(schedule))
    stop = threading.Event()

    def task(m_guess, iterations, child_rng):
        return _run_attempt(make_amplifier(), edges, m_guess, iterations, child_rng, stop)

    attempt_no = 0
    batch_attempts: List[_Attempt] = []
    with ThreadPoolExecutor(max_workers=workers) as pool:
        for batch_start in range(0, len(schedule), workers):
            batch = schedule[batch_start:batch_start + workers]
            futures = [
                pool.submit(task, m_guess, iterations, child_rngs[batch_start + i])
                for i, (m_guess, iterations) in enumerate(batch)
            ]
            winner: Optional[_Attempt] = None
            batch_attempts = []
            for future in as_completed(futures):
                attempt = future.result()
                batch_attempts.append(attempt)
                attempt_no += 1
                _report(attempt_no, attempt, timer, verbose)
                if attempt.valid and winner is None:
                    winner = attempt
                    stop.set()
            if winner is not None:
                winner.amplifier.finish(True)
                return winner.coloring
    # cancelled engines hold no measurement, so only measured ones get a verdict
    for attempt in batch_attempts:
        if not attempt.cancelled:
            attempt.amplifier.finish(False)
    raise NoColoringFound(attempt_no)


def find_coloring(
    graph: GraphLike,
    bits_per_color: int,
    num_vertices: Optional[int] = None,
    max_attempts: int = 10,
    resource_ceiling_bits: int = DEFAULT_RESOURCE_CEILING_BITS,
    count_strategy: str = "doubling",
    num_iterations: Optional[int] = None,
    initial_state: Optional[np.ndarray] = None,
    rng: Optional[np.random.Generator] = None,
    workers: int = 1,
    pass_workers: int = 1,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    shortcut_half_marked: bool = True,
    timer: Optional[SearchTimer] = None,
    verbose: bool = False,
) -> List[int]:
    """Find a proper vertex coloring with simulated Grover search.

    Args:
        graph: networkx graph (nodes 0..n-1) or list of ``(u, v)`` pairs.
        bits_per_color: Register width; ``2**bits_per_color`` colors.
        num_vertices: Optional vertex count, checked against the edges.
        max_attempts: Amplify-measure-verify attempts before giving up.
        resource_ceiling_bits: Largest simulated qubit count allowed.
        count_strategy: ``"doubling"`` guesses the number of valid colorings
            as 1, 2, 4, ... (one guess per attempt); ``"exact"`` counts it
            once by enumerating the oracle predicate.
        num_iterations: Fixed Grover iteration count, overriding the formula.
        initial_state: Custom normalised start state instead of the uniform
            superposition.
        rng: Generator used for measurement; a fresh one when None.
        workers: Concurrent attempts.  The first verified sample stops the
            other attempts of its batch at their next pass boundary.
        pass_workers: Threads sharing one oracle pass; chunks of
            ``chunk_size`` indices are spread across them.
        chunk_size: Indices evaluated per oracle chunk.
        shortcut_half_marked: With the exact count, skip amplification when
            at least half of all states are valid colorings.
        timer: Optional SearchTimer receiving one record per attempt.
        verbose: Print attempt details.

    Returns:
        One color per vertex, each in ``[0, 2**bits_per_color)``.

    Raises:
        InvalidGraph, InconsistentVertexCount, InvalidWidth: bad input,
            raised before any amplification.
        ResourceExceeded: the state vector would be too large.
        NoColoringFound: every attempt produced an invalid sample, or the
            exact count found no valid coloring.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive, got {max_attempts}")
    if count_strategy not in COUNT_STRATEGIES:
        raise ValueError(
            f"Unknown count_strategy {count_strategy!r}; expected one of {COUNT_STRATEGIES}"
        )
    if num_iterations is not None and num_iterations < 0:
        raise ValueError(f"num_iterations must be non-negative, got {num_iterations}")

    problem = make_problem(graph, num_vertices)
    encoding = ColorEncoding(problem.num_vertices, bits_per_color)
    if encoding.num_qubits > resource_ceiling_bits:
        raise ResourceExceeded(encoding.num_qubits, resource_ceiling_bits)
    oracle = ColoringOracle(encoding, problem.edges, chunk_size=chunk_size)
    if rng is None:
        rng = np.random.default_rng()

    if verbose:
        print(f"Grover coloring: {problem.num_vertices} vertices, {problem.num_edges} edges, "
              f"{encoding.num_colors} colors, {encoding.num_qubits} qubits")

    schedule = _iteration_schedule(
        oracle, max_attempts, count_strategy, num_iterations, shortcut_half_marked,
    )

    pass_pool = ThreadPoolExecutor(max_workers=pass_workers) if pass_workers > 1 else None

    def make_amplifier():
        return AmplitudeAmplifier(
            oracle,
            resource_ceiling_bits=resource_ceiling_bits,
            initial_state=initial_state,
            executor=pass_pool,
        )

    try:
        if workers <= 1:
            return _search_sequential(make_amplifier, problem.edges, schedule, rng, timer, verbose)
        return _search_concurrent(
            make_amplifier, problem.edges, schedule, rng, workers, timer, verbose,
        )
    finally:
        if pass_pool is not None:
            pass_pool.shutdown()
