"""Exception types raised by the Grover coloring search."""


class ColoringError(Exception):
    """Base class for every failure the search can report."""


class InvalidWidth(ColoringError, ValueError):
    """Color register width or a color value does not fit the encoding."""


class InconsistentVertexCount(ColoringError, ValueError):
    """``num_vertices`` disagrees with the vertex indices used by the edges."""


class InvalidGraph(ColoringError, ValueError):
    """Edge list contains a self-loop or a negative vertex index."""


class ResourceExceeded(ColoringError, RuntimeError):
    """Simulated state vector would exceed the configured qubit ceiling."""

    def __init__(self, num_qubits: int, ceiling: int):
        super().__init__(
            f"{num_qubits} simulated qubits exceed the ceiling of {ceiling} "
            f"(state vector of 2**{num_qubits} amplitudes)"
        )
        self.num_qubits = num_qubits
        self.ceiling = ceiling


class NoColoringFound(ColoringError, RuntimeError):
    """Attempt budget exhausted without a verified coloring.

    Either the graph has no coloring with the available colors or the
    amplification under-sampled; count the marking set exactly to tell the
    two apart.
    """

    def __init__(self, attempts: int, reason: str = "attempt budget exhausted"):
        super().__init__(f"no valid coloring after {attempts} attempts ({reason})")
        self.attempts = attempts
        self.reason = reason


class EngineStateError(RuntimeError):
    """Amplifier operation called in the wrong lifecycle state."""
