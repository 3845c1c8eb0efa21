"""Process-wide usage counters shared by all request handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum


class UsageKind(str, Enum):
    SIMULATION = "simulation"
    SCREENING = "screening"
    PREDICTION = "prediction"
    MOLECULES_ANALYZED = "molecules_analyzed"


@dataclass(frozen=True, slots=True)
class UsageCounters:
    """Point-in-time copy of the usage counters."""

    total_simulations: int = 0
    total_screenings: int = 0
    total_predictions: int = 0
    molecules_analyzed: int = 0

    @property
    def total_ops(self) -> int:
        return self.total_simulations + self.total_screenings + self.total_predictions


class UsageAggregator:
    """Monotonic counters guarded by a single lock.

    The lock is only held for the counter update itself; callers derive their
    results before recording usage.  Counters start at zero and are never
    reset for the lifetime of the aggregator.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts = {kind: 0 for kind in UsageKind}

    def increment(self, kind: UsageKind | str, amount: int = 1) -> None:
        kind = UsageKind(kind)
        if amount < 0:
            raise ValueError("usage counters cannot decrease")
        with self._lock:
            self._counts[kind] += amount

    def _record(self, *updates: tuple[UsageKind, int]) -> None:
        with self._lock:
            for kind, amount in updates:
                self._counts[kind] += amount

    def record_simulation(self) -> None:
        self._record((UsageKind.SIMULATION, 1), (UsageKind.MOLECULES_ANALYZED, 1))

    def record_screening(self, library_size: int) -> None:
        if library_size < 0:
            raise ValueError("library size must be non-negative")
        self._record((UsageKind.SCREENING, 1), (UsageKind.MOLECULES_ANALYZED, library_size))

    def record_prediction(self) -> None:
        self._record((UsageKind.PREDICTION, 1))

    def record_energy(self) -> None:
        self._record((UsageKind.MOLECULES_ANALYZED, 1))

    def snapshot(self) -> UsageCounters:
        with self._lock:
            return UsageCounters(
                total_simulations=self._counts[UsageKind.SIMULATION],
                total_screenings=self._counts[UsageKind.SCREENING],
                total_predictions=self._counts[UsageKind.PREDICTION],
                molecules_analyzed=self._counts[UsageKind.MOLECULES_ANALYZED],
            )


__all__ = ["UsageAggregator", "UsageCounters", "UsageKind"]
