"""
Feasibility pump primal heuristic for mixed-integer programs.

    from feaspump import FeasibilityPump, PumpConfig
    outcome = FeasibilityPump(model, PumpConfig(max_iterations=200)).run()
"""

from feaspump.config import AlphaSchedule, PumpConfig, RankingPolicy, RoundingPolicy, TieBreak
from feaspump.driver import FeasibilityPump, run
from feaspump.errors import (BoundsInfeasible, LPSolveError, PumpError, RelaxationInfeasible,
                             RelaxationUnbounded, RoundingInfeasible)
from feaspump.incumbent import CancellationToken, Incumbent, IncumbentStore
from feaspump.model import Model, Variable, VariableTable
from feaspump.outcome import Failure, FailureReason, IterationRecord, PumpInfo, PumpPhase, Success, best_of
from feaspump.parallel import run_parallel

__version__ = "2.3.0"

__all__ = [
    "AlphaSchedule", "PumpConfig", "RankingPolicy", "RoundingPolicy", "TieBreak",
    "FeasibilityPump", "run", "run_parallel",
    "BoundsInfeasible", "LPSolveError", "PumpError", "RelaxationInfeasible", "RelaxationUnbounded",
    "RoundingInfeasible",
    "CancellationToken", "Incumbent", "IncumbentStore",
    "Model", "Variable", "VariableTable",
    "Failure", "FailureReason", "IterationRecord", "PumpInfo", "PumpPhase", "Success", "best_of",
]
