"""Oracle marking every basis state that encodes a proper coloring."""

from typing import Iterable, List, Tuple

import numpy as np

from ..encoding import ColorEncoding
from .base import DEFAULT_CHUNK_SIZE, MarkingOracle
from .edge_checker import EdgeInequalityChecker


class ColoringOracle(MarkingOracle):
    """AND of one :class:`EdgeInequalityChecker` per edge.

    A basis state is marked when its decoded coloring gives every edge two
    different colors.  With no edges every state is marked, which amounts to
    a global phase.
    """

    def __init__(
        self,
        encoding: ColorEncoding,
        edges: Iterable[Tuple[int, int]],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        super().__init__(encoding, chunk_size=chunk_size)
        self.checkers: List[EdgeInequalityChecker] = [
            EdgeInequalityChecker(encoding, u, v) for u, v in edges
        ]

    @property
    def edges(self) -> List[Tuple[int, int]]:
        return [(c.u, c.v) for c in self.checkers]

    @property
    def marks_everything(self) -> bool:
        return not self.checkers

    def is_valid(self, indices: np.ndarray) -> np.ndarray:
        valid = np.ones(indices.shape, dtype=bool)
        for checker in self.checkers:
            valid &= checker.differs(indices)
        return valid

    def is_valid_reversible(self, indices: np.ndarray) -> np.ndarray:
        """Same predicate, evaluated as compute / AND / uncompute.

        Each checker writes into its own ancilla row, the rows are AND-ed
        into the result, then every checker is applied again in reverse
        order and the ancillas must come back all-False.
        """
        ancillas = np.zeros((len(self.checkers),) + indices.shape, dtype=bool)
        for row, checker in enumerate(self.checkers):
            ancillas[row] = checker.apply(indices, ancillas[row])
        valid = ancillas.all(axis=0)
        for row in reversed(range(len(self.checkers))):
            ancillas[row] = self.checkers[row].inverse().apply(indices, ancillas[row])
        if ancillas.any():
            raise RuntimeError("ancilla flags not restored after uncompute")
        return valid
