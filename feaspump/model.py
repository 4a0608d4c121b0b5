from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


@dataclass(frozen=True)
class Variable:
    index: int
    lb: float
    ub: float
    vtype: str  # 'B', 'I' or 'C'
    obj: float = 0.0
    name: str = ""

    @property
    def is_integer(self) -> bool:
        return self.vtype in ['B', 'I']


class Model(ABC):
    """
    The LP relaxation oracle consumed by the pump.

    Concrete models own the variables, bounds and constraint matrix of the MIP
    and can re-solve the continuous relaxation under a substituted objective.
    """

    objective_offset = 0.0

    @abstractmethod
    def get_variables(self) -> List[Variable]:
        pass

    @abstractmethod
    def get_constraint_matrix(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Returns (A, sense, rhs) with sense characters 'L', 'G' or 'E'"""
        pass

    @abstractmethod
    def solve_relaxation(self, objective, targets=None) -> np.ndarray:
        """
        Solves the relaxation under `objective` and returns the values of the
        model variables.

        `targets` is an optional list of (index, value, weight); each adds
        weight * |x_index - value| to the objective. Raises
        RelaxationInfeasible or RelaxationUnbounded.
        """
        pass

    @abstractmethod
    def get_bounds(self, index) -> Tuple[float, float]:
        pass

    @abstractmethod
    def tighten_bounds(self, index, lb, ub):
        """Sets the bounds of one variable; raises BoundsInfeasible if lb > ub"""
        pass

    def check_full_feasibility(self, point, tol=1e-6) -> bool:
        """Checks bounds, integrality and every constraint row of a full point."""
        if point is None:
            return False
        point = np.asarray(point, dtype=float)
        for var in self.get_variables():
            value = point[var.index]
            if value < var.lb - tol or value > var.ub + tol:
                return False
            if var.is_integer and abs(value - round(value)) > tol:
                return False

        A, sense, rhs = self.get_constraint_matrix()
        if A.shape[0] == 0:
            return True
        lhs = A @ point
        for i in range(A.shape[0]):
            # Scale the tolerance with the row magnitude
            row_tol = tol * max(1.0, abs(rhs[i]))
            if sense[i] == 'L' and lhs[i] > rhs[i] + row_tol:
                return False
            elif sense[i] == 'G' and lhs[i] < rhs[i] - row_tol:
                return False
            elif sense[i] == 'E' and abs(lhs[i] - rhs[i]) > row_tol:
                return False
        return True

    def objective_value(self, point) -> float:
        obj = np.array([v.obj for v in self.get_variables()])
        return float(np.dot(obj, point)) + self.objective_offset


class VariableTable:
    """
    Dense view of the model variables taken once per run.

    Integer variables are addressed by their position in `int_idx`, which is
    sorted by ascending variable index; candidate points are aligned with it.
    """

    def __init__(self, variables: List[Variable]):
        self.variables = list(variables)
        self.num_vars = len(self.variables)
        self.lb = np.array([v.lb for v in self.variables], dtype=float)
        self.ub = np.array([v.ub for v in self.variables], dtype=float)
        self.obj = np.array([v.obj for v in self.variables], dtype=float)
        self.var_types = [v.vtype for v in self.variables]
        self.int_idx = np.array([v.index for v in self.variables if v.is_integer], dtype=int)
        self.cont_idx = np.array([v.index for v in self.variables if not v.is_integer], dtype=int)

        # Integral bounds of the integer variables
        self.int_lb = np.ceil(self.lb[self.int_idx] - 1e-9)
        self.int_ub = np.floor(self.ub[self.int_idx] + 1e-9)

        self.position = np.full(self.num_vars, -1, dtype=int)
        self.position[self.int_idx] = np.arange(len(self.int_idx))

    @property
    def num_integer(self) -> int:
        return len(self.int_idx)

    @property
    def num_continuous(self) -> int:
        return len(self.cont_idx)

    def check_candidate(self, candidate):
        """A candidate outside its integral bounds is a programming error."""
        assert candidate.shape == (self.num_integer,), "candidate has the wrong length"
        assert np.all(candidate == np.round(candidate)), "candidate is not integral"
        assert np.all(candidate >= self.int_lb) and np.all(candidate <= self.int_ub), \
            "candidate violates variable bounds"

    def full_point(self, point, candidate):
        """Continuous values from `point`, integer values from `candidate`."""
        full = np.array(point, dtype=float)
        full[self.int_idx] = candidate
        return full

    def count_fractional(self, point, tol=1e-6) -> int:
        values = point[self.int_idx]
        return int(np.sum(np.abs(values - np.round(values)) > tol))
