"""Phase-marking oracles used by the amplitude amplification engine."""

from .base import MarkingOracle
from .coloring import ColoringOracle
from .edge_checker import EdgeInequalityChecker
