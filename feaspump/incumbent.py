import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class Incumbent:
    point: np.ndarray
    objective_value: float
    source: str = ""


class IncumbentStore:
    """
    The best feasible point known across one or more pump runs.

    Updates are a compare-and-swap under a lock: a candidate replaces the
    incumbent only if there is none yet or it is strictly better.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._best: Optional[Incumbent] = None
        self.history = []  # objective values of accepted incumbents, in order

    @property
    def best(self) -> Optional[Incumbent]:
        with self._lock:
            return self._best

    @property
    def best_cost(self) -> float:
        best = self.best
        return best.objective_value if best is not None else float('inf')

    @property
    def has_solution(self) -> bool:
        return self.best is not None

    def update_best_solution(self, point, cost, source="") -> bool:
        with self._lock:
            if self._best is None or cost < self._best.objective_value:
                self._best = Incumbent(np.array(point, dtype=float), float(cost), source)
                self.history.append(float(cost))
                return True
            return False


class CancellationToken:
    """Cooperative stop signal: an explicit cancel or an optional deadline."""

    def __init__(self, time_budget=None):
        self._event = threading.Event()
        self.deadline = time.time() + time_budget if time_budget is not None else None

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.time() >= self.deadline
