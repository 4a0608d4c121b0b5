from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from feaspump.config import PumpConfig
from feaspump.driver import FeasibilityPump
from feaspump.incumbent import CancellationToken, IncumbentStore


def run_parallel(model_factory, config=None, seeds=(0, 1, 2, 3), max_workers=None,
                 store=None, token=None, cancel_on_success=True):
    """
    Runs one independent pump per seed.

    `model_factory()` must return a fresh Model for every run; runs share only
    the incumbent store and the cancellation token. Returns the outcomes in
    seed order together with the store.
    """
    config = (config or PumpConfig()).validate()
    store = store if store is not None else IncumbentStore()
    token = token if token is not None else CancellationToken(config.time_budget)

    def _run(seed):
        run_config = replace(config, random_seed=seed)
        model = model_factory()
        outcome = FeasibilityPump(model, run_config, store=store, token=token, name=f"fp-seed{seed}").run()
        if outcome.succeeded and cancel_on_success:
            token.cancel()
        return outcome

    with ThreadPoolExecutor(max_workers=max_workers or len(seeds)) as executor:
        outcomes = list(executor.map(_run, seeds))
    return outcomes, store
