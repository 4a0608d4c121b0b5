from collections import deque
from typing import Dict, Tuple

import numpy as np

from feaspump.errors import RoundingInfeasible


class BoundPropagator:
    """
    Activity-based bound propagation on the rows of A x (sense) b.

    Works on its own copy of the bounds. `fix()` returns the bounds that
    changed because of the assignment so the caller can mirror them into a
    BoundScope; an emptied domain raises RoundingInfeasible.
    """

    def __init__(self, A, sense, rhs, lb, ub, var_types, tol=1e-6, epsilon=1e-3, max_rounds=20):
        self.tol = tol
        self.epsilon = epsilon  # minimal improvement for continuous bounds
        self.lb = np.array(lb, dtype=float)
        self.ub = np.array(ub, dtype=float)
        self.is_int = np.array([t in ['B', 'I'] for t in var_types], dtype=bool)
        num_vars = len(self.lb)

        # Every row is stored as one or two "<=" rows: coefs * x <= rhs
        self.rows = []
        self.col_rows = [[] for _ in range(num_vars)]
        A = np.asarray(A, dtype=float)
        for i in range(A.shape[0]):
            cols = np.nonzero(A[i, :])[0]
            if len(cols) == 0:
                continue
            coefs = A[i, cols]
            if sense[i] in ('L', 'E'):
                self._add_row(cols, coefs, rhs[i])
            if sense[i] in ('G', 'E'):
                self._add_row(cols, -coefs, -rhs[i])
        self.max_pops = max_rounds * max(1, len(self.rows))

    def _add_row(self, cols, coefs, rhs):
        r = len(self.rows)
        self.rows.append((cols, coefs, float(rhs)))
        for j in cols:
            self.col_rows[j].append(r)

    def reset_bounds(self, lb, ub):
        self.lb = np.array(lb, dtype=float)
        self.ub = np.array(ub, dtype=float)

    def bounds(self, var_idx) -> Tuple[float, float]:
        return float(self.lb[var_idx]), float(self.ub[var_idx])

    def fix(self, var_idx, value) -> Dict[int, Tuple[float, float]]:
        if value < self.lb[var_idx] - self.tol or value > self.ub[var_idx] + self.tol:
            raise RoundingInfeasible(var_idx, self.lb[var_idx], self.ub[var_idx])
        self.lb[var_idx] = value
        self.ub[var_idx] = value
        return self.propagate(self.col_rows[var_idx])

    def propagate(self, rows) -> Dict[int, Tuple[float, float]]:
        changed = {}
        queue = deque(rows)
        queued = set(rows)
        pops = 0
        while queue and pops < self.max_pops:
            r = queue.popleft()
            queued.discard(r)
            pops += 1
            for k in self._propagate_row(r):
                changed[k] = (float(self.lb[k]), float(self.ub[k]))
                for other in self.col_rows[k]:
                    if other != r and other not in queued:
                        queue.append(other)
                        queued.add(other)
        return changed

    def _propagate_row(self, r):
        cols, coefs, rhs = self.rows[r]
        lb = self.lb[cols]
        ub = self.ub[cols]

        # Minimal activity of the row, infinite contributions counted apart
        contrib = np.where(coefs > 0, coefs * lb, coefs * ub)
        infinite = np.isinf(contrib)
        num_inf = int(np.sum(infinite))
        finite_activity = float(np.sum(contrib[~infinite]))

        if num_inf == 0 and finite_activity > rhs + self.tol * max(1.0, abs(rhs)):
            raise RoundingInfeasible(int(cols[0]), float(lb[0]), float(ub[0]))
        if num_inf > 1:
            return []

        tightened = []
        for pos, k in enumerate(cols):
            if num_inf == 1 and not infinite[pos]:
                continue
            residual = finite_activity if infinite[pos] else finite_activity - contrib[pos]
            coef = coefs[pos]
            bound = (rhs - residual) / coef
            if coef > 0:
                if self.is_int[k]:
                    bound = np.floor(bound + self.tol)
                if bound < self.ub[k] - max(self.tol, 0.0 if self.is_int[k] else self.epsilon):
                    if bound < self.lb[k] - self.tol:
                        raise RoundingInfeasible(int(k), float(self.lb[k]), float(bound))
                    self.ub[k] = max(bound, self.lb[k])
                    tightened.append(k)
            else:
                if self.is_int[k]:
                    bound = np.ceil(bound - self.tol)
                if bound > self.lb[k] + max(self.tol, 0.0 if self.is_int[k] else self.epsilon):
                    if bound > self.ub[k] + self.tol:
                        raise RoundingInfeasible(int(k), float(bound), float(self.ub[k]))
                    self.lb[k] = min(bound, self.ub[k])
                    tightened.append(k)
        return tightened
