"""Per-edge color inequality predicate."""

import numpy as np

from ..encoding import ColorEncoding


class EdgeInequalityChecker:
    """Computes ``color(u) != color(v)`` for one edge over basis-state indices.

    Only shifts, masks and a comparison are used; nothing depends on the
    number of vertices beyond the register offsets of *u* and *v*.

    :meth:`apply` is the reversible form: it XORs the predicate into an
    ancilla flag array, so a second application uncomputes it.
    """

    def __init__(self, encoding: ColorEncoding, u: int, v: int):
        for vertex in (u, v):
            if not 0 <= vertex < encoding.num_vertices:
                raise ValueError(
                    f"vertex {vertex} outside 0..{encoding.num_vertices - 1}"
                )
        if u == v:
            raise ValueError(f"edge ({u}, {v}) is a self-loop")
        self.encoding = encoding
        self.u = u
        self.v = v
        self._shift_u = u * encoding.bits_per_color
        self._shift_v = v * encoding.bits_per_color

    def differs(self, indices: np.ndarray) -> np.ndarray:
        mask = self.encoding.color_mask
        return ((indices >> self._shift_u) & mask) != ((indices >> self._shift_v) & mask)

    def apply(self, indices: np.ndarray, ancilla: np.ndarray) -> np.ndarray:
        """Return ``ancilla XOR differs(indices)``."""
        return np.logical_xor(ancilla, self.differs(indices))

    def inverse(self) -> "EdgeInequalityChecker":
        return self

    def __repr__(self) -> str:
        return f"EdgeInequalityChecker({self.u}, {self.v}, bits={self.encoding.bits_per_color})"
