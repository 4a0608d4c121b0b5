"""
Configuration of a feasibility pump run.

All options carry a default; `PumpConfig.validate()` is called by the driver
before a run and coerces string options to their enums.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RoundingPolicy(str, Enum):
    NEAREST = "nearest"
    RANDOMIZED = "randomized"
    PROPAGATION = "propagation"


class TieBreak(str, Enum):
    RANGE = "range"  # towards the bound with the larger remaining range
    DOWN = "down"
    UP = "up"


class RankingPolicy(str, Enum):
    DISPLACEMENT = "displacement"
    LOCKS = "locks"
    RANDOM = "random"


class AlphaSchedule(str, Enum):
    CONSTANT = "constant"
    GEOMETRIC = "geometric"
    LINEAR = "linear"


@dataclass
class PumpConfig:
    """Named options of the pump, grouped by the component they drive."""
    # Budgets
    max_iterations: int = 1000
    max_restarts: int = 20
    time_budget: Optional[float] = None  # seconds

    # Rounding
    rounding_policy: RoundingPolicy = RoundingPolicy.NEAREST
    tie_break: TieBreak = TieBreak.RANGE

    # Ranking / perturbation
    ranking_policy: RankingPolicy = RankingPolicy.DISPLACEMENT
    perturbation_fraction: float = 0.1
    perturbation_step: int = 1
    random_flip_count: bool = False
    random_restarts: bool = True
    visit_penalty: float = 0.1
    stall_patience: int = 5
    stall_ceiling: int = 10

    # Objective blending
    initial_alpha: float = 0.0
    alpha_schedule: AlphaSchedule = AlphaSchedule.GEOMETRIC
    alpha_decay: float = 0.9
    alpha_step: float = 0.05
    cycle_alpha_tolerance: float = 0.005

    # Reproducibility and numerics
    random_seed: int = 0
    cycle_history_size: int = 10
    tolerance_epsilon: float = 1e-6

    # Output
    verbose: bool = False
    verbosity_interval: int = 10

    def validate(self):
        self.rounding_policy = RoundingPolicy(self.rounding_policy)
        self.tie_break = TieBreak(self.tie_break)
        self.ranking_policy = RankingPolicy(self.ranking_policy)
        self.alpha_schedule = AlphaSchedule(self.alpha_schedule)

        if self.max_restarts < 0:
            raise ValueError(f"max_restarts must be >= 0, got {self.max_restarts}")
        if self.time_budget is not None and self.time_budget < 0:
            raise ValueError(f"time_budget must be >= 0, got {self.time_budget}")
        if not 0.0 < self.perturbation_fraction <= 1.0:
            raise ValueError(f"perturbation_fraction must be in (0, 1], got {self.perturbation_fraction}")
        if self.perturbation_step < 1:
            raise ValueError(f"perturbation_step must be >= 1, got {self.perturbation_step}")
        if self.visit_penalty < 0:
            raise ValueError(f"visit_penalty must be >= 0, got {self.visit_penalty}")
        if self.stall_patience < 1:
            raise ValueError(f"stall_patience must be >= 1, got {self.stall_patience}")
        if self.stall_ceiling < 0:
            raise ValueError(f"stall_ceiling must be >= 0, got {self.stall_ceiling}")
        if not 0.0 <= self.initial_alpha <= 1.0:
            raise ValueError(f"initial_alpha must be in [0, 1], got {self.initial_alpha}")
        if not 0.0 <= self.alpha_decay <= 1.0:
            raise ValueError(f"alpha_decay must be in [0, 1], got {self.alpha_decay}")
        if self.alpha_step < 0:
            raise ValueError(f"alpha_step must be >= 0, got {self.alpha_step}")
        if self.cycle_alpha_tolerance < 0:
            raise ValueError(f"cycle_alpha_tolerance must be >= 0, got {self.cycle_alpha_tolerance}")
        if self.cycle_history_size < 1:
            raise ValueError(f"cycle_history_size must be >= 1, got {self.cycle_history_size}")
        if not 0.0 < self.tolerance_epsilon < 0.5:
            raise ValueError(f"tolerance_epsilon must be in (0, 0.5), got {self.tolerance_epsilon}")
        if self.verbosity_interval < 1:
            raise ValueError(f"verbosity_interval must be >= 1, got {self.verbosity_interval}")
        return self

    def flip_count(self, num_integer):
        """Number of variables flipped by one perturbation event (before randomization)"""
        return max(1, int(math.ceil(self.perturbation_fraction * num_integer)))

    def next_alpha(self, alpha):
        if self.alpha_schedule == AlphaSchedule.GEOMETRIC:
            return alpha * self.alpha_decay
        if self.alpha_schedule == AlphaSchedule.LINEAR:
            return max(0.0, alpha - self.alpha_step)
        return alpha
