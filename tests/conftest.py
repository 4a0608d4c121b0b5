"""Shared in-memory models for the pump tests."""

from __future__ import annotations

import numpy as np
import pytest

from feaspump.errors import BoundsInfeasible, RelaxationInfeasible
from feaspump.model import Model, Variable


class BarycenterModel(Model):
    """
    Tiny LP oracle over an explicit vertex list.

    `solve_relaxation` returns the mean of all optimal vertices that lie in the
    current bounds (like an interior point solve without crossover), or a fixed
    point when `fixed_point` is given. Every call is recorded.
    """

    def __init__(self, obj, A, sense, rhs, lb, ub, var_types, vertices, fixed_point=None, script=None):
        n = len(obj)
        self.obj = np.asarray(obj, dtype=float)
        self.A = np.asarray(A, dtype=float).reshape(-1, n)
        self.sense = np.asarray(sense)
        self.rhs = np.asarray(rhs, dtype=float)
        self.orig_lb = np.asarray(lb, dtype=float)
        self.orig_ub = np.asarray(ub, dtype=float)
        self.lb = self.orig_lb.copy()
        self.ub = self.orig_ub.copy()
        self.var_types = list(var_types)
        self.vertices = np.asarray(vertices, dtype=float).reshape(-1, n)
        self.fixed_point = None if fixed_point is None else np.asarray(fixed_point, dtype=float)
        self.script = [np.asarray(p, dtype=float) for p in (script or [])]
        self.objectives = []
        self.targets = []
        self.tighten_calls = []

    @property
    def solves(self):
        return len(self.objectives)

    def get_variables(self):
        return [Variable(j, self.orig_lb[j], self.orig_ub[j], self.var_types[j], self.obj[j], f"x{j}")
                for j in range(len(self.obj))]

    def get_constraint_matrix(self):
        return self.A, self.sense, self.rhs

    def solve_relaxation(self, objective, targets=None):
        objective = np.asarray(objective, dtype=float)
        self.objectives.append(objective.copy())
        self.targets.append(list(targets or []))
        if self.script:
            return self.script.pop(0)
        if self.fixed_point is not None:
            return self.fixed_point.copy()
        inside = np.all((self.vertices >= self.lb - 1e-9) & (self.vertices <= self.ub + 1e-9), axis=1)
        vertices = self.vertices[inside]
        if len(vertices) == 0:
            raise RelaxationInfeasible()
        costs = vertices @ objective
        for index, value, weight in targets or []:
            costs = costs + weight * np.abs(vertices[:, index] - value)
        optimal = costs <= costs.min() + 1e-9
        return vertices[optimal].mean(axis=0)

    def get_bounds(self, index):
        return float(self.lb[index]), float(self.ub[index])

    def tighten_bounds(self, index, lb, ub):
        if lb > ub:
            raise BoundsInfeasible(index, lb, ub)
        self.tighten_calls.append((index, lb, ub))
        self.lb[index] = lb
        self.ub[index] = ub

    def bounds_restored(self):
        return np.array_equal(self.lb, self.orig_lb) and np.array_equal(self.ub, self.orig_ub)


@pytest.fixture
def single_binary_model():
    """One binary, no constraints; the first LP solve lands on 0.5."""
    return BarycenterModel(obj=[0.0], A=np.zeros((0, 1)), sense=[], rhs=[],
                           lb=[0.0], ub=[1.0], var_types=['B'], vertices=[[0.0], [1.0]])


@pytest.fixture
def assignment_model():
    """x1 + x2 = 1 on two binaries; the LP optimum is x1 = x2 = 0.5."""
    return BarycenterModel(obj=[0.0, 0.0], A=[[1.0, 1.0]], sense=['E'], rhs=[1.0],
                           lb=[0.0, 0.0], ub=[1.0, 1.0], var_types=['B', 'B'],
                           vertices=[[1.0, 0.0], [0.0, 1.0]])


@pytest.fixture
def stuck_model():
    """Always returns (0.5, 0.5) whatever the objective, so the pump can only cycle."""
    return BarycenterModel(obj=[0.0, 0.0], A=[[1.0, 1.0]], sense=['E'], rhs=[1.0],
                           lb=[0.0, 0.0], ub=[1.0, 1.0], var_types=['B', 'B'],
                           vertices=[[1.0, 0.0], [0.0, 1.0]], fixed_point=[0.5, 0.5])


@pytest.fixture
def make_model():
    return BarycenterModel
