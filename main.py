"""
Volatility-Target Asymptotics - Validation Pipeline
=====================================================
Runs the Monte Carlo validation scenarios, writes one CSV table per
scenario, and renders the convergence figures.

Usage:
    python main.py                                   # all scenarios, 100k paths
    python main.py --num-samples 20000               # quicker run
    python main.py --scenarios multiplier_u_bounds multiplier_v_bounds
    python main.py --num-time-steps 1000 2000 --n-workers 4
"""
from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

ROOT = Path(__file__).parent
sys.path.insert(0, str(ROOT / "src"))

from voltarget.config      import ValidationSettings
from voltarget.utils.helpers import get_logger, set_level
from voltarget.validation  import SCENARIOS, run_all
from voltarget.visualization.convergence_plots import generate_all_figures

log = get_logger("main")


def _args() -> argparse.Namespace:
    defaults = ValidationSettings()
    p = argparse.ArgumentParser(description="Volatility-Target Asymptotics Validation")
    p.add_argument("--num-samples",    type=int, default=defaults.num_samples)
    p.add_argument("--seed",           type=int, default=defaults.seed)
    p.add_argument("--num-time-steps", type=int, nargs="+",
                   default=list(defaults.num_time_steps))
    p.add_argument("--scenarios",      nargs="+", default=list(SCENARIOS),
                   choices=list(SCENARIOS))
    p.add_argument("--n-workers",      type=int, default=defaults.n_workers)
    p.add_argument("--output-dir",     default=defaults.output_dir)
    p.add_argument("--figures-dir",    default="outputs/figures")
    p.add_argument("--log-level",      default=defaults.log_level)
    p.add_argument("--no-figures",     action="store_true")
    return p.parse_args()


def main() -> None:
    args = _args()
    set_level(args.log_level)

    settings = ValidationSettings(
        num_samples=args.num_samples,
        seed=args.seed,
        output_dir=args.output_dir,
        n_workers=args.n_workers,
        log_level=args.log_level,
        num_time_steps=tuple(args.num_time_steps),
    )
    log.info("Scenarios: %s", ", ".join(args.scenarios))
    log.info("Samples=%d | seed=%d | N=%s | workers=%d",
             settings.num_samples, settings.seed,
             list(settings.num_time_steps), settings.n_workers)

    t0 = time.perf_counter()
    results = run_all(settings, names=args.scenarios)

    if not args.no_figures:
        for path in generate_all_figures(results, output_dir=args.figures_dir):
            log.info("Figure saved to %s", path)

    log.info("Done in %.1f s. Tables in %s/", time.perf_counter() - t0, settings.output_dir)


if __name__ == "__main__":
    main()
