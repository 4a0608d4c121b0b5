import numpy as np


def move_away(values, current, lb, ub, step):
    """
    Moves each current integer value by `step` towards its LP value, i.e.
    away from its rounding. Values that agree with the LP move towards the
    bound with more room; a move clamped back onto the same value goes the
    other way instead.
    """
    direction = np.sign(values - current)
    room_up = ub - current
    room_down = current - lb
    direction = np.where(direction == 0, np.where(room_up > room_down, 1.0, -1.0), direction)

    target = np.clip(current + direction * step, lb, ub)
    stuck = target == current
    if np.any(stuck):
        target = np.where(stuck, np.clip(current - direction * step, lb, ub), target)
    return target


class Perturber:
    """
    Flips of the top ranked integer variables when the pump cycles or stalls,
    and the stronger perturbation applied on restarts.
    """

    RESTART_NOISE = (-0.3, 0.7)

    def __init__(self, config, table, ranker):
        self.config = config
        self.table = table
        self.ranker = ranker

    def flip_count(self, state):
        count = self.config.flip_count(self.table.num_integer)
        if self.config.random_flip_count:
            count = int(state.rng.integers(max(1, count // 2), (3 * count) // 2 + 1))
        return min(count, self.table.num_integer)

    def _flip(self, point, candidate, var_indices, state):
        positions = self.table.position[var_indices]
        perturbed = candidate.copy()
        values = np.asarray(point, dtype=float)[var_indices]
        perturbed[positions] = move_away(values, candidate[positions],
                                         self.table.int_lb[positions], self.table.int_ub[positions],
                                         self.config.perturbation_step)
        state.record_flips(positions)
        return perturbed, positions

    def perturb(self, point, candidate, state):
        """Weak perturbation: moves the `flip_count` highest ranked variables."""
        count = self.flip_count(state)
        selected = self.ranker.rank(point, candidate, state)[:count]
        return self._flip(point, candidate, selected, state)

    def restart(self, point, candidate, state):
        """
        Strong perturbation used on restarts. The random variant moves every
        variable whose displacement plus noise drawn from [-0.3, 0.7] exceeds
        0.5; the deterministic one moves twice the usual number of top ranked
        variables.
        """
        if self.config.random_restarts:
            values = np.asarray(point, dtype=float)[self.table.int_idx]
            gaps = np.abs(values - candidate)
            noise = np.maximum(state.rng.uniform(*self.RESTART_NOISE, size=len(gaps)), 0.0)
            selected = self.table.int_idx[gaps + noise > 0.5]
            if len(selected) > 0:
                return self._flip(point, candidate, selected, state)

        count = min(2 * self.config.flip_count(self.table.num_integer), self.table.num_integer)
        selected = self.ranker.rank(point, candidate, state)[:count]
        return self._flip(point, candidate, selected, state)
