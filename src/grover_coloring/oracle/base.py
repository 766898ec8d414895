"""Abstract base class for phase-marking oracles."""

from abc import ABC, abstractmethod
from concurrent.futures import Executor
from typing import Iterator, Optional, Tuple

import numpy as np

from ..encoding import ColorEncoding

DEFAULT_CHUNK_SIZE = 1 << 16


def iter_chunks(num_states: int, chunk_size: int) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, stop)`` index ranges covering ``0 .. num_states``."""
    for start in range(0, num_states, chunk_size):
        yield start, min(start + chunk_size, num_states)


class MarkingOracle(ABC):
    """Interface for oracles that phase-flip the basis states they accept.

    The marking set is never stored: every pass re-evaluates
    :meth:`is_valid` over index chunks, so memory stays at one chunk of
    indices on top of the amplitude vector itself.
    """

    def __init__(self, encoding: ColorEncoding, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.encoding = encoding
        self.chunk_size = chunk_size

    @property
    def num_states(self) -> int:
        return self.encoding.num_states

    @abstractmethod
    def is_valid(self, indices: np.ndarray) -> np.ndarray:
        """Return a boolean mask, True where the basis state is marked.

        Args:
            indices: int64 array of basis-state indices.
        """

    def _mark_chunk(self, amplitudes: np.ndarray, start: int, stop: int) -> None:
        indices = np.arange(start, stop, dtype=np.int64)
        view = amplitudes[start:stop]
        np.negative(view, out=view, where=self.is_valid(indices))

    def mark(self, amplitudes: np.ndarray, executor: Optional[Executor] = None) -> None:
        """Flip the sign of every marked amplitude in place.

        With an *executor* the chunks are processed concurrently; chunks are
        disjoint slices so no locking is needed.  Returns only after every
        chunk has been written.
        """
        if amplitudes.shape != (self.num_states,):
            raise ValueError(
                f"amplitude vector has shape {amplitudes.shape}, "
                f"expected ({self.num_states},)"
            )
        chunks = iter_chunks(self.num_states, self.chunk_size)
        if executor is None:
            for start, stop in chunks:
                self._mark_chunk(amplitudes, start, stop)
            return
        futures = [
            executor.submit(self._mark_chunk, amplitudes, start, stop)
            for start, stop in chunks
        ]
        for f in futures:
            f.result()

    def count_marked(self) -> int:
        """Exact size of the marking set, streamed chunk by chunk."""
        total = 0
        for start, stop in iter_chunks(self.num_states, self.chunk_size):
            indices = np.arange(start, stop, dtype=np.int64)
            total += int(np.count_nonzero(self.is_valid(indices)))
        return total
