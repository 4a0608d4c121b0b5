from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

import numpy as np


class PumpPhase(str, Enum):
    INIT = "init"
    SOLVING = "solving"
    ROUNDING = "rounding"
    MEASURING = "measuring"
    CONVERGED = "converged"
    PERTURBING = "perturbing"
    RESTARTING = "restarting"
    STALLED_OUT = "stalled_out"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureReason(str, Enum):
    RELAXATION_INFEASIBLE = "RelaxationInfeasible"
    RELAXATION_UNBOUNDED = "RelaxationUnbounded"
    ITERATION_LIMIT = "IterationLimit"
    MAX_RESTARTS_EXCEEDED = "MaxRestartsExceeded"
    CANCELLED = "Cancelled"


@dataclass(frozen=True)
class IterationRecord:
    iteration: int
    phase: PumpPhase  # decision taken at the end of the iteration
    distance: float
    alpha: float
    num_fractional: int
    restarts: int


@dataclass
class PumpInfo:
    restarts: int = 0
    perturbations: int = 0
    runtime: float = 0.0
    alpha: float = 0.0
    trace: List[IterationRecord] = field(default_factory=list)

    def phases(self):
        return [record.phase for record in self.trace]


@dataclass
class Success:
    point: np.ndarray
    objective_value: float
    iteration_count: int
    info: PumpInfo = field(default_factory=PumpInfo)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass
class Failure:
    reason: FailureReason
    iteration_count: int
    info: PumpInfo = field(default_factory=PumpInfo)

    @property
    def succeeded(self) -> bool:
        return False


Outcome = Union[Success, Failure]


def best_of(outcomes) -> Optional[Success]:
    """Best successful outcome by objective value, None if all failed."""
    best = None
    for outcome in outcomes:
        if outcome.succeeded and (best is None or outcome.objective_value < best.objective_value):
            best = outcome
    return best
