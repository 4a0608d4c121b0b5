import numpy as np
import gurobipy as gp
from gurobipy import GRB

from feaspump.errors import BoundsInfeasible, LPSolveError, RelaxationInfeasible, RelaxationUnbounded
from feaspump.model import Model, Variable


def _to_gurobi(value):
    if value == np.inf:
        return GRB.INFINITY
    if value == -np.inf:
        return -GRB.INFINITY
    return float(value)


class GurobiModel(Model):
    """
    Continuous relaxation of a MIPInstance held in one reusable Gurobi model.

    The relaxation is built once; objectives and bounds are changed in place
    between solves instead of copying the model. Absolute-value targets get
    one auxiliary variable d >= |x - value| per integer variable, created on
    first use and kept with a zero cost while unused.
    """

    def __init__(self, instance, threads=None, time_limit=None, env=None):
        self.instance = instance
        self.objective_offset = float(instance.obj_const)
        self.lb = np.array(instance.lb, dtype=float)
        self.ub = np.array(instance.ub, dtype=float)
        self._variables = [
            Variable(index=j, lb=self.lb[j], ub=self.ub[j], vtype=instance.var_types[j],
                     obj=float(instance.obj[j]), name=instance.var_names[j])
            for j in range(instance.num_vars)
        ]

        # One environment per model: Gurobi environments are not shared across threads
        if env is None:
            env = gp.Env(empty=True)
            env.setParam('OutputFlag', 0)
            env.start()
        self.env = env
        self.model = gp.Model("fp_relaxation", env=env)
        self.model.Params.OutputFlag = 0
        # Tell infeasible and unbounded apart instead of INF_OR_UNBD
        self.model.Params.DualReductions = 0
        if threads is not None:
            self.model.Params.Threads = threads
        if time_limit is not None:
            self.model.Params.TimeLimit = time_limit

        self.x_vars = []
        for j in range(instance.num_vars):
            self.x_vars.append(self.model.addVar(lb=_to_gurobi(self.lb[j]), ub=_to_gurobi(self.ub[j]),
                                                 vtype=GRB.CONTINUOUS, name=instance.var_names[j]))
        self.model.update()
        for i in range(instance.num_constraints):
            row = instance.A[i, :]
            lhs = gp.quicksum(row[j] * self.x_vars[j] for j in np.nonzero(row)[0])
            sense = instance.sense[i]
            rhs = instance.b[i]
            if sense == 'L':
                self.model.addConstr(lhs <= rhs, name=str(instance.row_names[i]))
            elif sense == 'G':
                self.model.addConstr(lhs >= rhs, name=str(instance.row_names[i]))
            elif sense == 'E':
                self.model.addConstr(lhs == rhs, name=str(instance.row_names[i]))
        self.model.ModelSense = GRB.MINIMIZE
        self.model.update()
        self.num_solves = 0
        self.dist_vars = {}  # {var_idx: (d, row d - x >= -value, row d + x >= value)}

    def get_variables(self):
        return list(self._variables)

    def get_constraint_matrix(self):
        return (np.asarray(self.instance.A, dtype=float),
                np.asarray(self.instance.sense),
                np.asarray(self.instance.b, dtype=float))

    def _distance_var(self, index, value):
        if index not in self.dist_vars:
            x = self.x_vars[index]
            d = self.model.addVar(lb=0.0, ub=GRB.INFINITY, vtype=GRB.CONTINUOUS, name=f"fp_dist_{index}")
            above = self.model.addConstr(d - x >= -value, name=f"fp_dist_above_{index}")
            below = self.model.addConstr(d + x >= value, name=f"fp_dist_below_{index}")
            self.model.update()
            self.dist_vars[index] = (d, above, below)
        return self.dist_vars[index]

    def solve_relaxation(self, objective, targets=None):
        objective = np.asarray(objective, dtype=float)
        self.model.setAttr("Obj", self.x_vars, objective.tolist())
        for d, _, _ in self.dist_vars.values():
            d.Obj = 0.0
        for index, value, weight in targets or []:
            d, above, below = self._distance_var(index, value)
            d.Obj = weight
            above.RHS = -value
            below.RHS = value
        self.model.optimize()
        self.num_solves += 1

        status = self.model.Status
        if status == GRB.OPTIMAL or (status in (GRB.TIME_LIMIT, GRB.ITERATION_LIMIT) and self.model.SolCount > 0):
            return np.array(self.model.getAttr("X", self.x_vars))
        if status == GRB.INFEASIBLE:
            raise RelaxationInfeasible(status)
        if status == GRB.UNBOUNDED:
            raise RelaxationUnbounded(status)
        raise LPSolveError(status)

    def get_bounds(self, index):
        return float(self.lb[index]), float(self.ub[index])

    def tighten_bounds(self, index, lb, ub):
        if lb > ub:
            raise BoundsInfeasible(index, lb, ub)
        self.lb[index] = lb
        self.ub[index] = ub
        var = self.x_vars[index]
        var.LB = _to_gurobi(lb)
        var.UB = _to_gurobi(ub)

    def dispose(self):
        self.model.dispose()
