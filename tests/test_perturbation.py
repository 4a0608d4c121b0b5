import numpy as np

from feaspump.config import PumpConfig
from feaspump.model import VariableTable
from feaspump.perturbation import Perturber, move_away
from feaspump.ranking import Ranker
from feaspump.state import PumpState


def _setup(make_model, n, ub=1.0, **kwargs):
    model = make_model(obj=np.zeros(n), A=np.zeros((0, n)), sense=[], rhs=[],
                       lb=np.zeros(n), ub=np.full(n, ub), var_types=['I'] * n, vertices=[np.zeros(n)])
    table = VariableTable(model.get_variables())
    config = PumpConfig(**kwargs).validate()
    ranker = Ranker(config.ranking_policy, table, visit_penalty=config.visit_penalty)
    return Perturber(config, table, ranker), PumpState(config, n)


def test_move_away_goes_towards_lp_value():
    target = move_away(np.array([0.7, 0.2, 3.4]), np.array([0.0, 1.0, 5.0]),
                       np.zeros(3), np.array([1.0, 1.0, 9.0]), 1)
    assert target.tolist() == [1.0, 0.0, 4.0]


def test_move_away_on_agreement_uses_larger_room():
    target = move_away(np.array([2.0, 7.0]), np.array([2.0, 7.0]),
                       np.zeros(2), np.full(2, 9.0), 1)
    assert target.tolist() == [3.0, 6.0]


def test_move_away_at_bound_goes_other_way():
    # LP value above a candidate already at its upper bound
    target = move_away(np.array([1.2]), np.array([1.0]), np.array([0.0]), np.array([1.0]), 1)
    assert target.tolist() == [0.0]


def test_move_away_always_changes_value_with_room():
    target = move_away(np.array([4.0, 0.0]), np.array([4.0, 0.0]),
                       np.array([0.0, 0.0]), np.array([4.0, 1.0]), 2)
    assert target.tolist() == [2.0, 1.0]


def test_perturb_flips_top_ranked(make_model):
    perturber, state = _setup(make_model, 10, perturbation_fraction=0.2)
    point = np.array([0.1, 0.45, 0.0, 0.3, 0.2, 0.0, 0.05, 0.4, 0.0, 0.0])
    candidate = np.zeros(10)

    perturbed, positions = perturber.perturb(point, candidate, state)

    assert positions.tolist() == [1, 7]
    assert perturbed.tolist() == [0, 1, 0, 0, 0, 0, 0, 1, 0, 0]
    assert state.perturbations == 1


def test_perturb_changes_candidate(make_model):
    perturber, state = _setup(make_model, 3, ub=4.0)
    candidate = np.array([2.0, 0.0, 4.0])
    perturbed, _ = perturber.perturb(candidate.copy(), candidate, state)
    assert not np.array_equal(perturbed, candidate)


def test_flip_count_randomization_stays_in_range(make_model):
    perturber, state = _setup(make_model, 40, perturbation_fraction=0.25, random_flip_count=True)
    counts = {perturber.flip_count(state) for _ in range(200)}
    assert min(counts) >= 5
    assert max(counts) <= 15
    assert len(counts) > 1


def test_deterministic_restart_flips_twice_as_many(make_model):
    perturber, state = _setup(make_model, 10, perturbation_fraction=0.1, random_restarts=False)
    point = np.linspace(0.05, 0.45, 10)
    perturbed, positions = perturber.restart(point, np.zeros(10), state)
    assert positions.tolist() == [9, 8]
    assert perturbed.sum() == 2.0


def test_random_restart_is_seeded(make_model):
    point = np.full(8, 0.4)
    first, state_a = _setup(make_model, 8, random_seed=5)
    second, state_b = _setup(make_model, 8, random_seed=5)

    perturbed_a, _ = first.restart(point, np.zeros(8), state_a)
    perturbed_b, _ = second.restart(point, np.zeros(8), state_b)
    assert np.array_equal(perturbed_a, perturbed_b)
    assert perturbed_a.sum() >= 1.0
