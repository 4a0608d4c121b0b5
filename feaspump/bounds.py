class BoundScope:
    """
    Temporary bound changes on a Model, undone when the scope exits.

    The first tightening of a variable records its prior bounds; leaving the
    `with` block restores them in reverse order whether or not it raised.

        with BoundScope(model) as scope:
            scope.tighten(j, 1.0, 1.0)
            ...
    """

    def __init__(self, model):
        self.model = model
        self.saved = {}  # {var_idx: (lb, ub)} before the first change
        self.order = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.restore()
        return False

    def tighten(self, var_idx, lb, ub):
        if var_idx not in self.saved:
            self.saved[var_idx] = self.model.get_bounds(var_idx)
            self.order.append(var_idx)
        self.model.tighten_bounds(var_idx, lb, ub)

    def fix(self, var_idx, value):
        self.tighten(var_idx, value, value)

    def restore(self):
        for var_idx in reversed(self.order):
            lb, ub = self.saved[var_idx]
            self.model.tighten_bounds(var_idx, lb, ub)
        self.saved = {}
        self.order = []

    def __len__(self):
        return len(self.order)
