import numpy as np

from feaspump.config import RankingPolicy


def compute_locks(A, sense, num_vars):
    """
    Counts, per variable, the rows that can become violated when the variable
    moves down (down locks) or up (up locks).
    """
    down_locks = np.zeros(num_vars)
    up_locks = np.zeros(num_vars)
    for i in range(A.shape[0]):
        row = A[i, :]
        for j in np.nonzero(row)[0]:
            coeff = row[j]
            if sense[i] == 'E':
                down_locks[j] += 1
                up_locks[j] += 1
            elif (sense[i] == 'L') == (coeff > 0):
                up_locks[j] += 1
            else:
                down_locks[j] += 1
    return down_locks, up_locks


class Ranker:
    """
    Orders the integer variables by descending priority.

    Scores are recomputed on every call; equal scores are ordered by
    ascending variable index so that runs are reproducible.
    """

    SCORE_DECIMALS = 12

    def __init__(self, policy, table, model=None, visit_penalty=0.1, eps=1e-6):
        self.policy = RankingPolicy(policy)
        self.table = table
        self.visit_penalty = visit_penalty
        self.eps = eps
        self.lock_pressure = None
        if self.policy == RankingPolicy.LOCKS:
            if model is None:
                raise ValueError("locks ranking needs the model constraint matrix")
            A, sense, _ = model.get_constraint_matrix()
            down_locks, up_locks = compute_locks(A, sense, table.num_vars)
            total = (down_locks + up_locks)[table.int_idx]
            self.lock_pressure = total / max(1.0, float(np.max(total, initial=0.0)))

    def scores(self, point, candidate, state):
        values = np.asarray(point, dtype=float)[self.table.int_idx]
        if candidate is None:
            # Closeness to integrality: 1 when integral, 0 at a half
            frac_gap = np.abs(values - np.round(values))
            base = 1.0 - 2.0 * frac_gap
        else:
            base = np.abs(values - candidate)
            base[base <= self.eps] = 0.0

        if self.policy == RankingPolicy.LOCKS:
            base = base * (1.0 + self.lock_pressure)
        elif self.policy == RankingPolicy.RANDOM:
            base = base * state.rng.uniform(0.5, 1.5, size=len(base))

        if self.visit_penalty > 0 and candidate is not None:
            base = base - self.visit_penalty * state.visit_counts()
        return np.round(base, self.SCORE_DECIMALS)

    def rank(self, point, candidate, state):
        """Variable indices of the integer variables, highest priority first."""
        scores = self.scores(point, candidate, state)
        order = np.lexsort((self.table.int_idx, -scores))
        return self.table.int_idx[order]
