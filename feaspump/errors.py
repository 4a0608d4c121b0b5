class PumpError(Exception):
    """Base class for errors raised by the feasibility pump"""


class RelaxationInfeasible(PumpError):
    """Thrown when the LP relaxation has no feasible point under the current bounds"""

    def __init__(self, status=None):
        self.status = status
        message = "LP relaxation is infeasible"
        if status is not None:
            message += f" (solver status {status})"
        super().__init__(message)


class RelaxationUnbounded(PumpError):
    """Thrown when the LP relaxation is unbounded under the objective it was given"""

    def __init__(self, status=None):
        self.status = status
        message = "LP relaxation is unbounded"
        if status is not None:
            message += f" (solver status {status})"
        super().__init__(message)


class LPSolveError(PumpError):
    """Thrown when the LP solver stops without a point and without a verdict"""

    def __init__(self, status):
        self.status = status
        super().__init__(f"LP solve ended with status {status} and no solution")


class BoundsInfeasible(PumpError):
    """Thrown when a bound tightening would leave a variable with lb > ub"""

    def __init__(self, index, lb, ub):
        self.index = index
        self.lb = lb
        self.ub = ub
        super().__init__(f"Infeasible tightening for variable {index}: [{lb}, {ub}]")


class RoundingInfeasible(PumpError):
    """Thrown by propagation rounding when a variable domain becomes empty"""

    def __init__(self, index, lb=None, ub=None):
        self.index = index
        self.lb = lb
        self.ub = ub
        super().__init__(f"Propagation emptied the domain of variable {index}: [{lb}, {ub}]")
