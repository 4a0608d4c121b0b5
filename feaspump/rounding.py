"""
Rounding transformers: LP point -> integer candidate.

Every transformer returns a candidate aligned with `table.int_idx` whose
entries are integral and inside the integral bounds of their variable.
"""

from abc import ABC, abstractmethod

import numpy as np

from feaspump.bounds import BoundScope
from feaspump.config import RoundingPolicy, TieBreak
from feaspump.errors import RoundingInfeasible
from feaspump.propagation import BoundPropagator


def round_nearest(values, lb, ub, tie_break=TieBreak.RANGE, eps=1e-6):
    """
    Rounds each value to the nearest integer in [lb, ub].

    Fractional parts within eps of 0.5 are ties: `down`, `up`, or `range`
    (towards the bound with more room left; equal room rounds down).
    """
    values = np.clip(np.asarray(values, dtype=float), lb, ub)
    floor = np.floor(values)
    frac = values - floor
    result = np.where(frac > 0.5, floor + 1.0, floor)

    tie = np.abs(frac - 0.5) <= eps
    if np.any(tie):
        if tie_break == TieBreak.UP:
            up = tie
        elif tie_break == TieBreak.DOWN:
            up = np.zeros_like(tie)
        else:
            room_up = ub - (floor + 1.0)
            room_down = floor - lb
            up = tie & (room_up > room_down)
        result = np.where(tie, np.where(up, floor + 1.0, floor), result)
    return np.clip(result, lb, ub)


class RoundingTransformer(ABC):
    def __init__(self, table, eps=1e-6):
        self.table = table
        self.eps = eps

    @abstractmethod
    def round(self, point, state) -> np.ndarray:
        pass


class NearestRounding(RoundingTransformer):
    def __init__(self, table, tie_break=TieBreak.RANGE, eps=1e-6):
        super().__init__(table, eps)
        self.tie_break = TieBreak(tie_break)

    def round(self, point, state):
        values = np.asarray(point, dtype=float)[self.table.int_idx]
        return round_nearest(values, self.table.int_lb, self.table.int_ub, self.tie_break, self.eps)


class RandomizedRounding(RoundingTransformer):
    """Rounds up with probability equal to the fractional part."""

    def round(self, point, state):
        values = np.clip(np.asarray(point, dtype=float)[self.table.int_idx],
                         self.table.int_lb, self.table.int_ub)
        floor = np.floor(values)
        frac = values - floor
        # One draw per variable keeps the generator stream independent of the point
        draws = state.rng.random(len(values))
        up = draws < frac
        up = np.where(frac <= self.eps, False, up)
        up = np.where(frac >= 1.0 - self.eps, True, up)
        result = np.where(up, floor + 1.0, floor)
        return np.clip(result, self.table.int_lb, self.table.int_ub)


class PropagationRounding(RoundingTransformer):
    """
    Rounds the integer variables one at a time in ranking order, fixing each
    one and propagating the constraint rows before rounding the next, so later
    roundings stay inside the domains left by earlier ones.

    The bound changes are mirrored into the model through a BoundScope and
    are undone before `round` returns, also when it raises RoundingInfeasible.
    """

    def __init__(self, model, table, ranker, tie_break=TieBreak.RANGE, eps=1e-6):
        super().__init__(table, eps)
        self.model = model
        self.ranker = ranker
        self.tie_break = TieBreak(tie_break)
        A, sense, rhs = model.get_constraint_matrix()
        self.propagator = BoundPropagator(A, sense, rhs, table.lb, table.ub, table.var_types, tol=eps)

    def round(self, point, state):
        point = np.asarray(point, dtype=float)
        bounds = [self.model.get_bounds(j) for j in range(self.table.num_vars)]
        self.propagator.reset_bounds([b[0] for b in bounds], [b[1] for b in bounds])

        candidate = np.empty(self.table.num_integer)
        order = self.ranker.rank(point, None, state)
        with BoundScope(self.model) as scope:
            for j in order:
                lo, hi = self.propagator.bounds(j)
                lo = np.ceil(lo - self.eps)
                hi = np.floor(hi + self.eps)
                if lo > hi:
                    raise RoundingInfeasible(int(j), lo, hi)
                value = round_nearest(point[j:j + 1], lo, hi, self.tie_break, self.eps)[0]
                changed = self.propagator.fix(j, value)
                scope.fix(j, value)
                for k, (k_lb, k_ub) in changed.items():
                    scope.tighten(k, k_lb, k_ub)
                candidate[self.table.position[j]] = value
        return candidate


def make_rounding(config, model, table, ranker) -> RoundingTransformer:
    policy = RoundingPolicy(config.rounding_policy)
    if policy == RoundingPolicy.NEAREST:
        return NearestRounding(table, config.tie_break, config.tolerance_epsilon)
    if policy == RoundingPolicy.RANDOMIZED:
        return RandomizedRounding(table, config.tolerance_epsilon)
    return PropagationRounding(model, table, ranker, config.tie_break, config.tolerance_epsilon)
