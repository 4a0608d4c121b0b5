import numpy as np
import gurobipy as gp
from gurobipy import GRB
from typing import List, Optional
import os

class MIPInstance:
    """
    Dense copy of a MIP: min obj*x + obj_const s.t. A x (sense) b, lb <= x <= ub.
    Maximization problems are negated on load so the data is always MINIMIZE.
    """
    def __init__(self, mps_path: Optional[str] = None):
        self.mps_path = mps_path
        self.name = os.path.basename(mps_path) if mps_path else "instance"
        self.A = np.zeros((0, 0))
        self.b = np.zeros(0)
        self.sense = []
        self.lb = np.zeros(0)
        self.ub = np.zeros(0)
        self.var_types = []
        self.var_names = []
        self.row_names = []
        self.obj = np.zeros(0)
        self.obj_const = 0.0
        self.sense_obj = 1

        if mps_path is not None:
            env = gp.Env(empty=True)
            env.setParam('OutputFlag', 0)
            env.start()
            self.model = gp.read(mps_path, env=env)
            self._extract_data()

    @classmethod
    def from_arrays(cls, obj, A, sense, b, lb, ub, var_types, obj_const=0.0,
                    var_names: Optional[List[str]] = None, name="instance"):
        instance = cls()
        instance.name = name
        instance.obj = np.asarray(obj, dtype=float)
        n = len(instance.obj)
        instance.A = np.asarray(A, dtype=float).reshape(-1, n)
        instance.b = np.asarray(b, dtype=float)
        instance.sense = list(sense)
        instance.lb = np.asarray(lb, dtype=float)
        instance.ub = np.asarray(ub, dtype=float)
        instance.var_types = list(var_types)
        instance.obj_const = float(obj_const)
        instance.var_names = list(var_names) if var_names is not None else [f"x{j}" for j in range(n)]
        instance.row_names = [f"c{i}" for i in range(instance.A.shape[0])]
        if not (len(instance.lb) == len(instance.ub) == len(instance.var_types) == n):
            raise ValueError("obj, lb, ub and var_types must have the same length")
        if not (len(instance.b) == len(instance.sense) == instance.A.shape[0]):
            raise ValueError("A, sense and b must have the same number of rows")
        return instance

    @property
    def num_vars(self) -> int:
        return len(self.var_names)

    @property
    def num_constraints(self) -> int:
        return len(self.row_names)

    @property
    def num_binary(self) -> int:
        return self.var_types.count('B')

    @property
    def num_integer(self) -> int:
        return self.var_types.count('I')

    @property
    def num_continuous(self) -> int:
        return self.var_types.count('C')


    def _extract_data(self):
        self.model.update()

        ### Objective ###
        if self.model.ModelSense == GRB.MAXIMIZE:
            print("[INFO] Maximization problem detected. Negating objective function.")
            self.sense_obj = -1

        variables = self.model.getVars()
        self.var_names = [v.VarName for v in variables]
        self.obj = np.array([v.Obj for v in variables], dtype=float)
        self.lb = np.array([v.LB for v in variables], dtype=float)
        self.ub = np.array([v.UB for v in variables], dtype=float)
        self.lb[self.lb <= -GRB.INFINITY] = -np.inf
        self.ub[self.ub >= GRB.INFINITY] = np.inf
        self.var_types = [v.VType for v in variables]
        # Semi-continuous and semi-integer columns are treated as their base type
        self.var_types = ['I' if t == 'N' else 'C' if t == 'S' else t for t in self.var_types]
        self.obj_const = float(self.model.ObjCon)

        ### Constraints ###
        constraints = self.model.getConstrs()
        self.row_names = [c.ConstrName for c in constraints]
        self.b = np.array([c.RHS for c in constraints], dtype=float)
        sense_map = {GRB.LESS_EQUAL: 'L', GRB.GREATER_EQUAL: 'G', GRB.EQUAL: 'E'}
        self.sense = [sense_map[c.Sense] for c in constraints]
        if constraints:
            self.A = self.model.getA().toarray()
        else:
            self.A = np.zeros((0, len(variables)))

        if self.sense_obj == -1:
            self.obj = -self.obj
            self.obj_const = -self.obj_const

    def pretty_print(self):
        print(f'This model has {self.num_vars} variables and {self.num_constraints} constraints')
        print('\n=== Variables ===')
        print(f"Total binary variables: {self.num_binary}")
        print(f"Total integer variables: {self.num_integer}")
        print(f"Total continuous variables: {self.num_continuous}")

    def is_integral(self, solution, tol=1e-6):
        for i, vtype in enumerate(self.var_types):
            if vtype in ['B', 'I']:  # Only check integer/binary vars
                if abs(solution[i] - round(solution[i])) > tol:
                    return False
        return True
