import numpy as np
import pytest

from feaspump.bounds import BoundScope
from feaspump.errors import BoundsInfeasible, RoundingInfeasible
from feaspump.propagation import BoundPropagator


def test_fixing_propagates_through_knapsack_row():
    propagator = BoundPropagator([[2.0, 3.0, 4.0]], ['L'], [5.0], np.zeros(3), np.full(3, 3.0), ['I'] * 3)
    changed = propagator.fix(2, 1.0)

    # 2 x0 + 3 x1 <= 1 leaves x0 = x1 = 0
    assert changed == {0: (0.0, 0.0), 1: (0.0, 0.0)}
    assert propagator.bounds(0) == (0.0, 0.0)


def test_equality_row_fixes_last_binary():
    propagator = BoundPropagator([[1.0, 1.0, 1.0]], ['E'], [1.0], np.zeros(3), np.ones(3), ['B'] * 3)
    propagator.fix(0, 0.0)
    changed = propagator.fix(1, 0.0)
    assert changed[2] == (1.0, 1.0)


def test_greater_equal_row_raises_lower_bounds():
    propagator = BoundPropagator([[1.0, 1.0]], ['G'], [3.0], np.zeros(2), np.array([2.0, 5.0]), ['I', 'C'])
    changed = propagator.fix(0, 0.0)
    assert changed == {1: (3.0, 5.0)}


def test_continuous_bounds_are_not_rounded():
    propagator = BoundPropagator([[1.0, 2.0]], ['L'], [3.0], np.zeros(2), np.full(2, 10.0), ['I', 'C'])
    propagator.fix(0, 2.0)
    assert propagator.bounds(1) == (0.0, 0.5)


def test_chained_rows_propagate_transitively():
    # x0 <= x1 and x1 <= x2 as rows x0 - x1 <= 0, x1 - x2 <= 0
    A = [[1.0, -1.0, 0.0], [0.0, 1.0, -1.0]]
    propagator = BoundPropagator(A, ['L', 'L'], [0.0, 0.0], np.zeros(3), np.full(3, 5.0), ['I'] * 3)
    changed = propagator.fix(0, 3.0)
    assert changed[1] == (3.0, 5.0)
    assert changed[2] == (3.0, 5.0)


def test_unbounded_variables_do_not_propagate():
    propagator = BoundPropagator([[1.0, 1.0, 1.0]], ['L'], [4.0],
                                 np.array([0.0, -np.inf, -np.inf]), np.full(3, np.inf), ['I'] * 3)
    assert propagator.fix(0, 1.0) == {}


def test_single_infinite_contribution_bounds_that_variable():
    propagator = BoundPropagator([[1.0, 1.0]], ['L'], [4.0],
                                 np.array([0.0, -np.inf]), np.array([10.0, np.inf]), ['I', 'I'])
    propagator.propagate([0])
    assert propagator.bounds(0)[1] == 10.0
    propagator.reset_bounds([0.0, 1.0], [10.0, np.inf])
    propagator.propagate([0])
    assert propagator.bounds(0) == (0.0, 3.0)


def test_conflict_raises_rounding_infeasible():
    propagator = BoundPropagator([[1.0, 1.0]], ['G'], [2.0], np.zeros(2), np.ones(2), ['B', 'B'])
    with pytest.raises(RoundingInfeasible):
        propagator.fix(0, 0.0)


def test_fix_outside_domain_raises():
    propagator = BoundPropagator(np.zeros((0, 1)), [], [], [0.0], [1.0], ['B'])
    with pytest.raises(RoundingInfeasible) as excinfo:
        propagator.fix(0, 2.0)
    assert excinfo.value.index == 0


def test_reset_bounds_discards_previous_fixings():
    propagator = BoundPropagator([[1.0, 1.0]], ['L'], [1.0], np.zeros(2), np.ones(2), ['B', 'B'])
    propagator.fix(0, 1.0)
    assert propagator.bounds(1) == (0.0, 0.0)
    propagator.reset_bounds([0.0, 0.0], [1.0, 1.0])
    assert propagator.bounds(1) == (0.0, 1.0)


def test_bound_scope_restores_on_exit(make_model):
    model = make_model(obj=[0.0, 0.0], A=np.zeros((0, 2)), sense=[], rhs=[],
                       lb=[0.0, -1.0], ub=[1.0, 4.0], var_types=['B', 'I'], vertices=[[0.0, 0.0]])
    with BoundScope(model) as scope:
        scope.fix(0, 1.0)
        scope.tighten(1, 0.0, 2.0)
        scope.tighten(1, 1.0, 2.0)
        assert model.get_bounds(1) == (1.0, 2.0)
        assert len(scope) == 2
    assert model.bounds_restored()


def test_bound_scope_restores_when_body_raises(make_model):
    model = make_model(obj=[0.0], A=np.zeros((0, 1)), sense=[], rhs=[],
                       lb=[0.0], ub=[3.0], var_types=['I'], vertices=[[0.0]])
    with pytest.raises(BoundsInfeasible):
        with BoundScope(model) as scope:
            scope.tighten(0, 2.0, 2.0)
            scope.tighten(0, 3.0, 1.0)
    assert model.bounds_restored()
