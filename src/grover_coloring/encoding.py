"""Bit-register encoding of vertex colorings as basis-state indices."""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .errors import InvalidWidth

# Widest register whose indices still fit a signed 64-bit numpy integer.
MAX_REGISTER_BITS = 62


@dataclass(frozen=True)
class ColorEncoding:
    """Fixed-width color register per vertex, concatenated into one index.

    Vertex ``i`` occupies bits ``[i * bits_per_color, (i + 1) * bits_per_color)``
    of the basis-state index, so vertex 0 sits in the least significant bits.
    """

    num_vertices: int
    bits_per_color: int

    def __post_init__(self):
        if self.bits_per_color < 1:
            raise InvalidWidth(f"bits_per_color must be positive, got {self.bits_per_color}")
        if self.num_vertices < 1:
            raise InvalidWidth(f"num_vertices must be positive, got {self.num_vertices}")
        if self.num_vertices * self.bits_per_color > MAX_REGISTER_BITS:
            raise InvalidWidth(
                f"{self.num_vertices} vertices x {self.bits_per_color} bits = "
                f"{self.num_vertices * self.bits_per_color} bits, "
                f"more than the {MAX_REGISTER_BITS}-bit register limit"
            )

    @property
    def num_qubits(self) -> int:
        return self.num_vertices * self.bits_per_color

    @property
    def num_states(self) -> int:
        return 1 << self.num_qubits

    @property
    def num_colors(self) -> int:
        return 1 << self.bits_per_color

    @property
    def color_mask(self) -> int:
        return self.num_colors - 1

    def encode(self, colors: Sequence[int]) -> int:
        """Pack one color per vertex into a basis-state index."""
        if len(colors) != self.num_vertices:
            raise InvalidWidth(
                f"expected {self.num_vertices} colors, got {len(colors)}"
            )
        index = 0
        for vertex, color in enumerate(colors):
            color = int(color)
            if not 0 <= color < self.num_colors:
                raise InvalidWidth(
                    f"color {color} of vertex {vertex} outside [0, {self.num_colors})"
                )
            index |= color << (vertex * self.bits_per_color)
        return index

    def decode(self, index: int) -> List[int]:
        """Unpack a basis-state index into one color per vertex."""
        index = int(index)
        if not 0 <= index < self.num_states:
            raise InvalidWidth(f"index {index} outside [0, {self.num_states})")
        return [
            (index >> (vertex * self.bits_per_color)) & self.color_mask
            for vertex in range(self.num_vertices)
        ]

    def color_of(self, indices: np.ndarray, vertex: int) -> np.ndarray:
        """Color register of *vertex* for every index in *indices*."""
        return (indices >> (vertex * self.bits_per_color)) & self.color_mask

    def decode_all(self, indices: np.ndarray) -> np.ndarray:
        """Decode an index array into a ``(len(indices), num_vertices)`` color table."""
        indices = np.asarray(indices, dtype=np.int64)
        return np.stack(
            [self.color_of(indices, v) for v in range(self.num_vertices)], axis=-1
        )
