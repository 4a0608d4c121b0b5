from collections import deque

import numpy as np


class CycleHistory:
    """
    Fixed-capacity ring buffer of recent candidates and the alpha they were
    produced with. Lookups compare exact candidate bytes.
    """

    def __init__(self, capacity):
        self.capacity = capacity
        self.entries = deque(maxlen=capacity)  # (key, alpha)

    def __len__(self):
        return len(self.entries)

    @staticmethod
    def key(candidate):
        return np.ascontiguousarray(candidate, dtype=float).tobytes()

    def contains(self, candidate, alpha=0.0, alpha_tol=np.inf) -> bool:
        key = self.key(candidate)
        for other_key, other_alpha in self.entries:
            if other_key == key and abs(alpha - other_alpha) <= alpha_tol:
                return True
        return False

    def append(self, candidate, alpha=0.0):
        self.entries.append((self.key(candidate), alpha))

    def clear(self):
        self.entries.clear()


class PumpState:
    """
    Everything the driver carries from one iteration to the next.

    `reset()` starts a new restart epoch; iteration, restart and perturbation
    counters and the random generator live for the whole run.
    """

    def __init__(self, config, num_integer):
        self.config = config
        self.num_integer = num_integer
        self.rng = np.random.default_rng(config.random_seed)

        self.iteration = 0
        self.restarts = 0
        self.perturbations = 0

        self.history = CycleHistory(config.cycle_history_size)
        self.recent_flips = deque(maxlen=config.cycle_history_size)
        self.reset()

    def reset(self):
        self.alpha = self.config.initial_alpha
        self.stall_counter = 0
        self.no_progress = 0
        self.previous_distance = np.inf
        self.best_distance = np.inf
        self.history.clear()
        self.recent_flips.clear()

    def advance_alpha(self):
        self.alpha = self.config.next_alpha(self.alpha)

    def record_distance(self, value, eps):
        """Updates progress counters; returns True on a new best distance of the epoch."""
        if value < self.previous_distance - eps:
            self.no_progress = 0
        else:
            self.no_progress += 1
        self.previous_distance = value
        if value < self.best_distance - eps:
            self.best_distance = value
            self.stall_counter = 0
            return True
        return False

    def is_stalled(self) -> bool:
        return self.no_progress >= self.config.stall_patience

    def record_flips(self, positions):
        self.recent_flips.append(np.asarray(positions, dtype=int))
        self.perturbations += 1

    def visit_counts(self):
        counts = np.zeros(self.num_integer)
        for positions in self.recent_flips:
            np.add.at(counts, positions, 1)
        return counts
