import time
import argparse
import os

import matplotlib.pyplot as plt

# -- Reading modules ---
from reader.reader import MIPInstance
# --- Pump modules ---
from feaspump.config import PumpConfig, RoundingPolicy, RankingPolicy, TieBreak, AlphaSchedule
from feaspump.driver import FeasibilityPump
from feaspump.lp_model import GurobiModel
from feaspump.outcome import PumpPhase, best_of
from feaspump.parallel import run_parallel


def build_config(args) -> PumpConfig:
    return PumpConfig(
        max_iterations=args.max_iterations,
        max_restarts=args.max_restarts,
        time_budget=args.time_budget,
        rounding_policy=args.rounding,
        tie_break=args.tie_break,
        ranking_policy=args.ranking,
        perturbation_fraction=args.perturbation_fraction,
        perturbation_step=args.perturbation_step,
        random_flip_count=args.random_flip_count,
        stall_ceiling=args.stall_ceiling,
        initial_alpha=args.initial_alpha,
        alpha_schedule=args.alpha_schedule,
        alpha_decay=args.alpha_decay,
        random_seed=args.seed,
        cycle_history_size=args.history_size,
        tolerance_epsilon=args.tolerance,
        verbose=not args.quiet,
        verbosity_interval=args.verbosity_interval,
    ).validate()


def plot_distance_trace(info, instance_name, plot_filename):
    """Saves distance per iteration, marking perturbations and restarts"""
    iterations = [r.iteration for r in info.trace]
    distances = [r.distance for r in info.trace]
    fig, ax = plt.subplots(figsize=(12, 6))
    ax.step(iterations, distances, where='post', color='blue', label='Distance')
    perturbed = [r for r in info.trace if r.phase == PumpPhase.PERTURBING]
    restarted = [r for r in info.trace if r.phase == PumpPhase.RESTARTING]
    ax.scatter([r.iteration for r in perturbed], [r.distance for r in perturbed],
               marker='x', color='orange', label='Perturbation')
    ax.scatter([r.iteration for r in restarted], [r.distance for r in restarted],
               marker='o', color='red', label='Restart')
    ax.set_title(f"Feasibility pump on {instance_name}")
    ax.set_xlabel("Iteration")
    ax.set_ylabel("L1 distance")
    ax.grid(True, linestyle='--', alpha=0.6)
    ax.legend()
    plt.tight_layout()
    plt.savefig(plot_filename)
    plt.close(fig)
    print(f"\n📈 Distance plot saved to {plot_filename}")


# --- Main execution block ---

def main():
    # 1. SET-UP
    parser = argparse.ArgumentParser(description="Feasibility pump primal heuristic for MIPs.")
    parser.add_argument("instance_path", type=str, help="Path to the .mps instance.")
    parser.add_argument("--max-iterations", type=int, default=1000)
    parser.add_argument("--max-restarts", type=int, default=20)
    parser.add_argument("--time-budget", type=float, default=None, help="Seconds.")
    parser.add_argument("--rounding", choices=[p.value for p in RoundingPolicy], default="nearest")
    parser.add_argument("--tie-break", choices=[t.value for t in TieBreak], default="range")
    parser.add_argument("--ranking", choices=[p.value for p in RankingPolicy], default="displacement")
    parser.add_argument("--perturbation-fraction", type=float, default=0.1)
    parser.add_argument("--perturbation-step", type=int, default=1)
    parser.add_argument("--random-flip-count", action="store_true", help="Randomize the number of flips.")
    parser.add_argument("--stall-ceiling", type=int, default=10)
    parser.add_argument("--initial-alpha", type=float, default=0.0, help="Objective weight (objective pump).")
    parser.add_argument("--alpha-schedule", choices=[s.value for s in AlphaSchedule], default="geometric")
    parser.add_argument("--alpha-decay", type=float, default=0.9)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--history-size", type=int, default=10)
    parser.add_argument("--tolerance", type=float, default=1e-6)
    parser.add_argument("--workers", type=int, default=1, help="Independent runs with seeds seed..seed+workers-1.")
    parser.add_argument("--threads", type=int, default=1, help="LP threads per run.")
    parser.add_argument("--verbosity-interval", type=int, default=10)
    parser.add_argument("--quiet", action="store_true")
    parser.add_argument("--plot", action="store_true", help="Save a distance-per-iteration plot.")
    args = parser.parse_args()

    # 2. LOAD
    print(f"📦 Loading instance: {args.instance_path}")
    if not os.path.exists(args.instance_path):
        print(f"❌ ERROR: File not found at '{args.instance_path}'")
        return 1
    instance = MIPInstance(args.instance_path)
    instance.pretty_print()
    config = build_config(args)

    # 3. PUMP
    start_time = time.time()
    if args.workers > 1:
        seeds = [args.seed + k for k in range(args.workers)]
        print(f"🚀 Running {len(seeds)} pumps in parallel (seeds {seeds[0]}..{seeds[-1]})")
        config.verbose = False
        outcomes, store = run_parallel(lambda: GurobiModel(instance, threads=args.threads),
                                       config, seeds=seeds, max_workers=args.workers)
        outcome = best_of(outcomes) or outcomes[0]
    else:
        print("🚀 Running feasibility pump...")
        outcome = FeasibilityPump(GurobiModel(instance, threads=args.threads), config).run()
    elapsed = time.time() - start_time

    # 4. REPORT
    info = outcome.info
    print(f"\nIterations: {outcome.iteration_count}  Restarts: {info.restarts}  "
          f"Perturbations: {info.perturbations}  Time: {elapsed:.2f}s")
    if outcome.succeeded:
        print(f"✅ Feasible solution found! Objective value: {instance.sense_obj * outcome.objective_value:.6f}")
    else:
        print(f"❌ No feasible solution found ({outcome.reason.value}).")

    if args.plot and info.trace:
        plot_filename = f"fp_trace_{os.path.splitext(instance.name)[0]}.png"
        plot_distance_trace(info, instance.name, plot_filename)
    return 0 if outcome.succeeded else 2


if __name__ == "__main__":
    raise SystemExit(main())
