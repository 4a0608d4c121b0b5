from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Distance:
    value: float
    weights: np.ndarray  # one coefficient per model variable, zero on continuous ones
    gaps: np.ndarray  # |x_j - candidate_j| per integer variable, below-tolerance gaps zeroed

    def is_zero(self) -> bool:
        return self.value == 0.0


def l1_distance(point, candidate, table, eps=1e-6) -> Distance:
    """
    L1 distance between an LP point and a rounded candidate over the integer
    variables. The sign pattern of the differences is the linear objective
    whose minimization pulls the next LP point towards the candidate.
    """
    diff = np.asarray(point, dtype=float)[table.int_idx] - candidate
    diff[np.abs(diff) <= eps] = 0.0
    gaps = np.abs(diff)
    weights = np.zeros(table.num_vars)
    weights[table.int_idx] = np.sign(diff)
    return Distance(value=float(np.sum(gaps)), weights=weights, gaps=gaps)


def blended_objective(alpha, weights, table):
    """
    alpha * scale * c + (1 - alpha) * weights.

    `scale` brings the original objective to the norm of the distance
    objective, sqrt(#integer variables) / ||c||.
    """
    if alpha <= 0.0:
        return np.array(weights, dtype=float)
    norm = np.linalg.norm(table.obj)
    scale = np.sqrt(table.num_integer) / norm if norm > 0 else 0.0
    return alpha * scale * table.obj + (1.0 - alpha) * np.asarray(weights, dtype=float)


def projection_objective(alpha, candidate, table):
    """
    Objective of the LP that projects onto `candidate`, blended with the
    original objective.

    An integer variable rounded to its lower bound contributes x - lb and one
    rounded to its upper bound ub - x, both linear. A variable rounded strictly
    inside its bounds contributes |x - candidate|, returned as a target
    (index, value, weight) that the model linearizes with an auxiliary
    variable. Returns (objective, targets).
    """
    candidate = np.asarray(candidate, dtype=float)
    at_lb = candidate <= table.int_lb
    at_ub = candidate >= table.int_ub
    linear = np.zeros(table.num_vars)
    linear[table.int_idx[at_ub]] = -1.0
    linear[table.int_idx[at_lb]] = 1.0

    interior = ~(at_lb | at_ub)
    weight = 1.0 if alpha <= 0.0 else 1.0 - alpha
    targets = [(int(j), float(value), weight)
               for j, value in zip(table.int_idx[interior], candidate[interior])]
    return blended_objective(alpha, linear, table), targets
