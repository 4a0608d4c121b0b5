import time

from feaspump.bounds import BoundScope
from feaspump.config import PumpConfig
from feaspump.distance import l1_distance, projection_objective
from feaspump.errors import RelaxationInfeasible, RelaxationUnbounded, RoundingInfeasible
from feaspump.incumbent import IncumbentStore
from feaspump.model import VariableTable
from feaspump.outcome import Failure, FailureReason, IterationRecord, PumpInfo, PumpPhase, Success
from feaspump.perturbation import Perturber
from feaspump.ranking import Ranker
from feaspump.rounding import NearestRounding, make_rounding
from feaspump.state import PumpState


class FeasibilityPump:
    """
    Feasibility pump driver.

    Alternates LP solves under the blended objective with roundings of their
    solutions until a rounding is feasible for the full MIP, perturbing the
    rounding on cycles and stalls and restarting when perturbations stop
    helping. All cross-iteration state lives in one PumpState per run, so
    independent runs on private models can execute concurrently.
    """

    def __init__(self, model, config=None, store=None, token=None, name="fp"):
        self.model = model
        self.config = (config or PumpConfig()).validate()
        self.store = store if store is not None else IncumbentStore()
        self.token = token
        self.name = name

        self.table = None
        self.state = None
        self.info = None
        self.start_time = None

    def run(self):
        cfg = self.config
        eps = cfg.tolerance_epsilon
        self.start_time = time.time()
        self.table = table = VariableTable(self.model.get_variables())
        self.state = state = PumpState(cfg, table.num_integer)
        self.info = PumpInfo(alpha=state.alpha)

        ranker = Ranker(cfg.ranking_policy, table, self.model, cfg.visit_penalty, eps)
        self.rounding = make_rounding(cfg, self.model, table, ranker)
        self.fallback_rounding = NearestRounding(table, cfg.tie_break, eps)
        perturber = Perturber(cfg, table, ranker)

        if cfg.max_iterations <= 0:
            return self._fail(FailureReason.ITERATION_LIMIT)
        if self._cancelled():
            return self._fail(FailureReason.CANCELLED)
        self._print_header()

        ########## INIT #########

        try:
            point = self.model.solve_relaxation(table.obj)
        except RelaxationInfeasible:
            return self._fail(FailureReason.RELAXATION_INFEASIBLE)
        except RelaxationUnbounded:
            return self._fail(FailureReason.RELAXATION_UNBOUNDED)

        candidate, rounded_ok = self._round(point)
        distance = l1_distance(point, candidate, table, eps)
        if rounded_ok and distance.is_zero():
            success = self._try_converge(point, candidate, distance)
            if success is not None:
                return success
        state.record_distance(distance.value, eps)
        state.history.append(candidate, state.alpha)
        self._record(PumpPhase.INIT, distance, point)
        target = candidate

        while True:

            ########## GLOBAL STOPPING CONDITIONS #########

            if state.iteration >= cfg.max_iterations:
                return self._fail(FailureReason.ITERATION_LIMIT)
            if self._cancelled():
                return self._fail(FailureReason.CANCELLED)
            state.iteration += 1

            ########## SOLVING #########

            objective, targets = projection_objective(state.alpha, target, table)
            try:
                point = self.model.solve_relaxation(objective, targets=targets)
            except RelaxationInfeasible:
                return self._fail(FailureReason.RELAXATION_INFEASIBLE)
            except RelaxationUnbounded:
                return self._fail(FailureReason.RELAXATION_UNBOUNDED)

            ########## ROUNDING #########

            candidate, rounded_ok = self._round(point)

            ########## MEASURING #########

            distance = l1_distance(point, candidate, table, eps)
            state.record_distance(distance.value, eps)
            measured_ok = rounded_ok
            if rounded_ok and distance.is_zero():
                success = self._try_converge(point, candidate, distance)
                if success is not None:
                    return success
                measured_ok = False

            cycled = measured_ok and state.history.contains(candidate, state.alpha, cfg.cycle_alpha_tolerance)
            if measured_ok and not cycled and not state.is_stalled():
                state.history.append(candidate, state.alpha)
                self._record(PumpPhase.MEASURING, distance, point)
                target = candidate
                state.advance_alpha()
                continue

            ########## PERTURBING #########

            state.stall_counter += 1
            state.no_progress = 0
            if state.stall_counter <= cfg.stall_ceiling:
                candidate, _ = perturber.perturb(point, candidate, state)
                phase = PumpPhase.PERTURBING
                state.advance_alpha()
            else:

                ########## RESTARTING #########

                if state.restarts >= cfg.max_restarts:
                    self._record(PumpPhase.STALLED_OUT, distance, point)
                    return self._fail(FailureReason.MAX_RESTARTS_EXCEEDED)
                state.restarts += 1
                state.reset()
                candidate, _ = perturber.restart(point, candidate, state)
                phase = PumpPhase.RESTARTING

            distance = l1_distance(point, candidate, table, eps)
            state.history.append(candidate, state.alpha)
            self._record(phase, distance, point)
            target = candidate

    def _round(self, point):
        """Active rounding; RoundingInfeasible falls back to nearest rounding."""
        ok = True
        try:
            candidate = self.rounding.round(point, self.state)
        except RoundingInfeasible:
            candidate = self.fallback_rounding.round(point, self.state)
            ok = False
        self.table.check_candidate(candidate)
        return candidate, ok

    def _try_converge(self, point, candidate, distance):
        """Full feasibility of a zero-distance rounding; returns Success or None."""
        tol = self.config.tolerance_epsilon
        full = self.table.full_point(point, candidate)
        feasible = self.model.check_full_feasibility(full, tol)
        if not feasible and self.table.num_continuous > 0:
            full = self._solve_fixed(candidate)
            feasible = full is not None and self.model.check_full_feasibility(full, tol)
        if not feasible:
            return None

        objective_value = self.model.objective_value(full)
        self.store.update_best_solution(full, objective_value, source=self.name)
        self._record(PumpPhase.CONVERGED, distance, point)
        self._finish()
        if self.config.verbose:
            print(f"FP found a feasible point after {self.state.iteration} iterations: {objective_value:.6f}")
        return Success(full, objective_value, self.state.iteration, self.info)

    def _solve_fixed(self, candidate):
        """Re-solves the continuous variables with the integer ones fixed to `candidate`."""
        with BoundScope(self.model) as scope:
            for pos, j in enumerate(self.table.int_idx):
                scope.fix(j, candidate[pos])
            try:
                point = self.model.solve_relaxation(self.table.obj)
            except (RelaxationInfeasible, RelaxationUnbounded):
                return None
        return self.table.full_point(point, candidate)

    def _cancelled(self):
        if self.token is not None and self.token.cancelled:
            return True
        budget = self.config.time_budget
        return budget is not None and time.time() - self.start_time >= budget

    def _record(self, phase, distance, point):
        state = self.state
        record = IterationRecord(
            iteration=state.iteration,
            phase=phase,
            distance=distance.value,
            alpha=state.alpha,
            num_fractional=self.table.count_fractional(point, self.config.tolerance_epsilon),
            restarts=state.restarts,
        )
        self.info.trace.append(record)
        if self.config.verbose and (state.iteration % self.config.verbosity_interval == 0
                                    or phase != PumpPhase.MEASURING):
            self._print_record(record)

    def _finish(self):
        self.info.restarts = self.state.restarts
        self.info.perturbations = self.state.perturbations
        self.info.alpha = self.state.alpha
        self.info.runtime = time.time() - self.start_time

    def _fail(self, reason):
        self._finish()
        if self.config.verbose:
            print(f"FP stopped without a feasible point ({reason.value}) after {self.state.iteration} iterations")
        return Failure(reason, self.state.iteration, self.info)

    def _print_header(self):
        if not self.config.verbose:
            return
        print(f"Feasibility pump on {self.table.num_vars} variables ({self.table.num_integer} integer)")
        print("  Iter  Phase        |  Distance     Alpha   IntInf | Restarts |  Time  |")
        print("----------------------+-------------------------------+----------+--------+")

    def _print_record(self, record):
        elapsed = time.time() - self.start_time
        print(f"{record.iteration:6d}  {record.phase.value:<12s} |{record.distance:10.4f}  {record.alpha:8.4f}  "
              f"{record.num_fractional:6d} | {record.restarts:8d} | {elapsed:5.2f}s |")


def run(model, config=None, store=None, token=None):
    """Runs one feasibility pump on `model` and returns its Outcome."""
    return FeasibilityPump(model, config, store=store, token=token).run()
