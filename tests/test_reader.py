import gurobipy as gp
from gurobipy import GRB
import numpy as np
import pytest

from reader import MIPInstance


def test_from_arrays_builds_dense_instance():
    instance = MIPInstance.from_arrays(obj=[1.0, 2.0, 0.0], A=[[1.0, 1.0, 0.0]], sense=['L'], b=[4.0],
                                       lb=[0.0, 0.0, -1.0], ub=[1.0, 5.0, 1.0], var_types=['B', 'I', 'C'])
    assert instance.num_vars == 3
    assert instance.num_constraints == 1
    assert (instance.num_binary, instance.num_integer, instance.num_continuous) == (1, 1, 1)
    assert instance.var_names == ["x0", "x1", "x2"]
    assert instance.is_integral([1.0, 3.0, 0.25])
    assert not instance.is_integral([0.5, 3.0, 0.0])


def test_from_arrays_rejects_mismatched_lengths():
    with pytest.raises(ValueError):
        MIPInstance.from_arrays(obj=[1.0, 2.0], A=[[1.0, 1.0]], sense=['L'], b=[4.0],
                                lb=[0.0], ub=[1.0, 1.0], var_types=['B', 'B'])
    with pytest.raises(ValueError):
        MIPInstance.from_arrays(obj=[1.0, 2.0], A=[[1.0, 1.0]], sense=['L', 'G'], b=[4.0],
                                lb=[0.0, 0.0], ub=[1.0, 1.0], var_types=['B', 'B'])


def test_reads_maximization_model_as_minimization(tmp_path):
    path = str(tmp_path / "small.lp")
    with gp.Env(empty=True) as env:
        env.setParam('OutputFlag', 0)
        env.start()
        with gp.Model("small", env=env) as m:
            x = m.addVar(vtype=GRB.BINARY, name="x")
            y = m.addVar(lb=0.0, ub=4.0, vtype=GRB.INTEGER, name="y")
            z = m.addVar(lb=0.0, ub=GRB.INFINITY, name="z")
            m.setObjective(3 * x + 2 * y + z + 1.5, GRB.MAXIMIZE)
            m.addConstr(x + y + z <= 5, name="cap")
            m.addConstr(y - z >= 1, name="link")
            m.write(path)

    instance = MIPInstance(path)

    assert instance.name == "small.lp"
    assert instance.sense_obj == -1
    assert instance.obj.tolist() == [-3.0, -2.0, -1.0]
    assert instance.obj_const == -1.5
    assert instance.var_types == ['B', 'I', 'C']
    assert instance.ub[2] == np.inf
    assert instance.sense == ['L', 'G']
    assert instance.A.tolist() == [[1.0, 1.0, 1.0], [0.0, 1.0, -1.0]]
    assert instance.b.tolist() == [5.0, 1.0]
