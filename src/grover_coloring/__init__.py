"""Simulated Grover amplitude amplification for graph vertex coloring."""

from .amplification import AmplitudeAmplifier, EngineState, doubling_guesses, optimal_iterations
from .encoding import ColorEncoding
from .errors import (
    ColoringError,
    InconsistentVertexCount,
    InvalidGraph,
    InvalidWidth,
    NoColoringFound,
    ResourceExceeded,
)
from .graphs import ColoringProblem, make_problem
from .oracle import ColoringOracle, EdgeInequalityChecker, MarkingOracle
from .search import find_coloring, verify_coloring, validate_coloring, ValidationResult
from .timing import SearchTimer
