"""Timing utilities for amplification attempts."""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class AttemptRecord:
    """Timing record for a single amplify-measure-verify attempt."""

    m_guess: Optional[int] = None
    iterations: int = 0
    amplify_seconds: float = 0.0
    sample_seconds: float = 0.0
    valid: bool = False
    cancelled: bool = False


class SearchTimer:
    """Accumulates per-attempt records for one or more searches.

    Usage::

        timer = SearchTimer()
        coloring = find_coloring(graph, 2, timer=timer)
        print(timer.summary())
    """

    def __init__(self) -> None:
        self.attempts: List[AttemptRecord] = []

    def record(
        self,
        m_guess: Optional[int] = None,
        iterations: int = 0,
        amplify_seconds: float = 0.0,
        sample_seconds: float = 0.0,
        valid: bool = False,
        cancelled: bool = False,
    ) -> None:
        self.attempts.append(AttemptRecord(
            m_guess=m_guess,
            iterations=iterations,
            amplify_seconds=amplify_seconds,
            sample_seconds=sample_seconds,
            valid=valid,
            cancelled=cancelled,
        ))

    def reset(self) -> None:
        self.attempts.clear()

    @property
    def num_attempts(self) -> int:
        return len(self.attempts)

    @property
    def num_successes(self) -> int:
        return sum(1 for a in self.attempts if a.valid)

    @property
    def total_iterations(self) -> int:
        return sum(a.iterations for a in self.attempts)

    @property
    def total_amplify_seconds(self) -> float:
        return sum(a.amplify_seconds for a in self.attempts)

    @property
    def total_sample_seconds(self) -> float:
        return sum(a.sample_seconds for a in self.attempts)

    @property
    def success_rate(self) -> float:
        finished = [a for a in self.attempts if not a.cancelled]
        return self.num_successes / len(finished) if finished else 0.0

    def summary(self) -> Dict[str, float]:
        """Return a dict of timing statistics suitable for JSON serialization."""
        return {
            "num_attempts": self.num_attempts,
            "num_successes": self.num_successes,
            "success_rate": round(self.success_rate, 4),
            "total_iterations": self.total_iterations,
            "total_amplify_seconds": round(self.total_amplify_seconds, 4),
            "total_sample_seconds": round(self.total_sample_seconds, 4),
        }

    def __repr__(self) -> str:
        s = self.summary()
        return (
            f"SearchTimer({s['num_attempts']} attempts, "
            f"ok={s['num_successes']}, "
            f"iters={s['total_iterations']}, "
            f"amplify={s['total_amplify_seconds']}s)"
        )
