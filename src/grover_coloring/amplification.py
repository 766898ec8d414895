"""Grover amplitude amplification on a dense simulated state vector."""

import math
import threading
from concurrent.futures import Executor
from enum import Enum
from typing import List, Optional

import numpy as np

from .errors import EngineStateError, ResourceExceeded
from .oracle.base import MarkingOracle, iter_chunks

DEFAULT_RESOURCE_CEILING_BITS = 24


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    PREPARED = "prepared"
    ITERATING = "iterating"
    MEASURED = "measured"
    DONE = "done"
    EXHAUSTED = "exhausted"


def optimal_iterations(num_states: int, num_marked: int) -> int:
    """Textbook Grover iteration count ``round(pi/4 * sqrt(N/M))``.

    Returns 0 when every state is marked: the oracle is then a global phase
    and the prepared state is already the answer.
    """
    if num_marked <= 0:
        raise ValueError(f"num_marked must be positive, got {num_marked}")
    if num_marked >= num_states:
        return 0
    return int(round(math.pi / 4 * math.sqrt(num_states / num_marked)))


def doubling_guesses(num_states: int, count: int) -> List[int]:
    """Marking-set size guesses ``1, 2, 4, ...`` capped at *num_states*.

    Once the guess reaches *num_states* the sequence starts again at 1.
    """
    guesses = []
    m = 1
    for _ in range(count):
        guesses.append(m)
        m = 1 if m >= num_states else min(2 * m, num_states)
    return guesses


class AmplitudeAmplifier:
    """Owns one amplitude vector and drives it through Grover iterations.

    Lifecycle::

        UNINITIALIZED -> PREPARED -> ITERATING -> MEASURED -> DONE | EXHAUSTED

    ``prepare()`` may be called again from any state to start a fresh
    attempt.  Measurement is destructive: the vector is dropped afterwards.
    """

    def __init__(
        self,
        oracle: MarkingOracle,
        resource_ceiling_bits: int = DEFAULT_RESOURCE_CEILING_BITS,
        initial_state: Optional[np.ndarray] = None,
        executor: Optional[Executor] = None,
    ):
        num_qubits = oracle.encoding.num_qubits
        if num_qubits > resource_ceiling_bits:
            raise ResourceExceeded(num_qubits, resource_ceiling_bits)
        self.oracle = oracle
        self.resource_ceiling_bits = resource_ceiling_bits
        self.executor = executor
        self._initial = self._check_initial_state(initial_state)
        self._amplitudes: Optional[np.ndarray] = None
        self._state = EngineState.UNINITIALIZED
        self.iterations_done = 0

    def _check_initial_state(self, initial_state: Optional[np.ndarray]) -> Optional[np.ndarray]:
        if initial_state is None:
            return None
        psi = np.array(initial_state, dtype=np.complex128)
        if psi.shape != (self.num_states,):
            raise ValueError(
                f"initial state has shape {psi.shape}, expected ({self.num_states},)"
            )
        norm = np.linalg.norm(psi)
        if abs(norm - 1.0) > 1e-9:
            raise ValueError(f"initial state is not normalised (norm={norm:.12f})")
        return psi

    # ------------------------------------------------------------------
    @property
    def num_qubits(self) -> int:
        return self.oracle.encoding.num_qubits

    @property
    def num_states(self) -> int:
        return self.oracle.encoding.num_states

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def amplitudes(self) -> np.ndarray:
        if self._amplitudes is None:
            raise EngineStateError(f"no amplitude vector in state {self._state.value}")
        return self._amplitudes

    def _require(self, *states: EngineState) -> None:
        if self._state not in states:
            raise EngineStateError(
                f"operation not allowed in state {self._state.value}; "
                f"expected one of {[s.value for s in states]}"
            )

    # ------------------------------------------------------------------
    def prepare(self) -> None:
        """Allocate the vector in the uniform (or configured) start state."""
        if self._initial is None:
            self._amplitudes = np.full(
                self.num_states, 1.0 / math.sqrt(self.num_states), dtype=np.complex128
            )
        else:
            self._amplitudes = self._initial.copy()
        self.iterations_done = 0
        self._state = EngineState.PREPARED

    def apply_oracle(self) -> None:
        self._require(EngineState.PREPARED, EngineState.ITERATING)
        self._state = EngineState.ITERATING
        self.oracle.mark(self._amplitudes, executor=self.executor)

    def diffuse(self) -> None:
        """Reflect the vector about the prepared state.

        For the uniform start this is the inversion about the mean,
        ``amp[i] = 2 * mean(amp) - amp[i]``.
        """
        self._require(EngineState.PREPARED, EngineState.ITERATING)
        self._state = EngineState.ITERATING
        amp = self._amplitudes
        if self._initial is None:
            np.subtract(2.0 * amp.mean(), amp, out=amp)
        else:
            overlap = np.vdot(self._initial, amp)
            np.subtract(2.0 * overlap * self._initial, amp, out=amp)

    def iterate(
        self, num_iterations: int, cancel_event: Optional[threading.Event] = None
    ) -> int:
        """Apply oracle + diffusion *num_iterations* times.

        *cancel_event* is checked before every pass, never inside one.
        Returns the number of complete iterations applied.
        """
        self._require(EngineState.PREPARED, EngineState.ITERATING)
        completed = 0
        for _ in range(num_iterations):
            if cancel_event is not None and cancel_event.is_set():
                break
            self.apply_oracle()
            if cancel_event is not None and cancel_event.is_set():
                break
            self.diffuse()
            completed += 1
        self.iterations_done += completed
        return completed

    def success_probability(self) -> float:
        """Probability mass currently sitting on the marking set."""
        amp = self.amplitudes
        total = 0.0
        for start, stop in iter_chunks(self.num_states, self.oracle.chunk_size):
            indices = np.arange(start, stop, dtype=np.int64)
            chunk = amp[start:stop][self.oracle.is_valid(indices)]
            total += float(np.sum(np.abs(chunk) ** 2))
        return total

    def measure(self, rng: np.random.Generator) -> int:
        """Sample one basis-state index and discard the vector."""
        self._require(EngineState.PREPARED, EngineState.ITERATING)
        probs = np.abs(self._amplitudes) ** 2
        probs /= probs.sum()
        index = int(rng.choice(self.num_states, p=probs))
        self.discard()
        self._state = EngineState.MEASURED
        return index

    def discard(self) -> None:
        self._amplitudes = None
        self._state = EngineState.UNINITIALIZED

    def finish(self, success: bool) -> None:
        """Record the verdict on the last measurement."""
        self._require(EngineState.MEASURED)
        self._state = EngineState.DONE if success else EngineState.EXHAUSTED

    def run(
        self,
        num_iterations: int,
        rng: np.random.Generator,
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[int]:
        """Prepare, iterate and measure once.

        Returns the sampled index, or None when *cancel_event* fired before
        all iterations completed.
        """
        self.prepare()
        completed = self.iterate(num_iterations, cancel_event=cancel_event)
        if completed < num_iterations:
            self.discard()
            return None
        return self.measure(rng)
