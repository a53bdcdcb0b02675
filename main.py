"""
Decoplan - Square Dive Decompression Planner

Plans a single-gas square dive with the ZH-L16 model and prints the
decompression, no-decompression and no-fly times.

Usage:
    python main.py                          # Plan the dive from config.yaml
    python main.py --depth 30 --time 20     # Quick override
    python main.py --fO2 0.32 --table       # No-deco table for EAN32
    python main.py --plot                   # Show compartment loading
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import matplotlib.pyplot as plt

from decoplan.compartments import N2_A, N2_B, NUM_COMPARTMENTS
from decoplan.config import build_parameters, load_effective_config
from decoplan.planner import (
    DiveParameters,
    DivePlanner,
    InvalidDiveParametersError,
    PlanningResult,
)
from decoplan.session import plan_batch

logger = logging.getLogger("decoplan")

# Depths (m) listed by --table
TABLE_DEPTHS = range(12, 43, 3)


def setup_logging(verbose: bool = False, log_file: str = None):
    """Set up logging configuration."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=log_format,
        handlers=handlers,
    )


def print_dive_plan(params: DiveParameters) -> None:
    """Print dive plan summary before planning."""
    print("--- DIVE PLAN ---")
    print(f"Depth: {params.depth_m:.0f}m")
    print(f"Bottom time: {params.bottom_time_min:.0f} min")
    print(f"Gas mix: {params.f_o2 * 100:.0f}% O2 (fN2={params.f_n2:.2f})")
    if params.p_factor:
        print(f"P-factor: {params.p_factor} (not applied)")


def print_results(result: PlanningResult) -> None:
    """Print planning results."""
    print("\n--- PLAN RESULTS ---")
    print(f"No-fly:   {result.no_fly_minutes:2d} min")
    print(f"Deco:     {result.deco_minutes:2d} min")
    print(f"No-deco:  {result.no_deco_minutes:2d} min")

    print("\nStops:")
    for depth, minutes in result.schedule.stops:
        print(f"  {depth:2d}m  {minutes:3d} min")

    if result.schedule.requires_deco:
        print("\nWARNING: Mandatory decompression stops required before surfacing.")


def print_table(params: DiveParameters, n_workers: int = None) -> None:
    """Print deco and no-deco times over TABLE_DEPTHS for the same gas and time."""
    rows = [
        DiveParameters(
            depth_m=float(depth),
            bottom_time_min=params.bottom_time_min,
            f_o2=params.f_o2,
            p_factor=params.p_factor,
        )
        for depth in TABLE_DEPTHS
    ]
    results = plan_batch(rows, n_workers=n_workers)

    print(f"\n--- TABLE ({params.bottom_time_min:.0f} min, fO2={params.f_o2}) ---")
    print(f"{'depth':>6} {'deco':>5} {'no-deco':>8} {'no-fly':>7}  stops 3/6/9/12")
    for row, result in zip(rows, results):
        stops = "/".join(str(m) for m in result.schedule.as_tuple())
        print(
            f"{row.depth_m:5.0f}m {result.deco_minutes:5d} "
            f"{result.no_deco_minutes:8d} {result.no_fly_minutes:7d}  {stops}"
        )


def plot_results(result: PlanningResult) -> None:
    """Compartment loading at the end of the bottom time vs. surfacing limits."""
    pressures = result.pre_deco_tissues.pressures
    # Pressure at which a compartment's ceiling reaches the surface (1 bar)
    limits = N2_A + 1.0 / N2_B
    idx = np.arange(NUM_COMPARTMENTS)

    _fig, ax = plt.subplots(figsize=(12, 5))
    colors = np.where(pressures > limits, "red", "steelblue")
    ax.bar(idx, pressures, color=colors, label="N2 loading")
    ax.plot(idx, limits, "k--", marker="o", linewidth=1, label="Surfacing limit")
    ax.axhline(
        y=result.f_n2, color="green", linestyle="-", linewidth=1, alpha=0.5,
        label=f"Surface ppN2 = {result.f_n2:.2f}",
    )

    p = result.params
    ax.set_xticks(idx)
    ax.set_xlabel("Compartment (0 = fastest)")
    ax.set_ylabel("Pressure (bar)")
    ax.set_title(
        f"Tissue loading after {p.depth_m:.0f}m / {p.bottom_time_min:.0f} min "
        f"(deco {result.deco_minutes} min)"
    )
    ax.legend(loc="upper right", fontsize=8)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.show()


def parse_args(argv=None) -> argparse.Namespace:
    """Parse command-line arguments for quick overrides."""
    parser = argparse.ArgumentParser(
        description="Decoplan - Square Dive Decompression Planner",
    )
    parser.add_argument("--depth", type=float, help="Dive depth in meters")
    parser.add_argument("--time", type=float, help="Bottom time in minutes")
    parser.add_argument("--fO2", type=float, help="O2 fraction (e.g. 0.32 for EAN32)")
    parser.add_argument(
        "--pfactor", type=int, help="Conservatism setting (accepted, not applied)"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config YAML (default: config.yaml next to main.py)",
    )
    parser.add_argument(
        "--table", action="store_true",
        help="Also print a table over common recreational depths",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Worker processes for --table (default: CPU count)",
    )
    parser.add_argument(
        "--plot", action="store_true", help="Plot compartment loading"
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    config = load_effective_config(
        overrides={
            "depth_m": args.depth,
            "bottom_time_min": args.time,
            "f_o2": args.fO2,
            "p_factor": args.pfactor,
        },
        config_path=args.config,
    )
    logger.debug(f"Config source: {config['source']} ({config['config_path']})")

    try:
        params = build_parameters(config)
    except InvalidDiveParametersError as e:
        logger.error(f"Invalid dive parameters: {e}")
        return 2

    print_dive_plan(params)
    result = DivePlanner().plan(params)
    print_results(result)

    if args.table:
        print_table(params, n_workers=args.workers)

    if args.plot:
        plot_results(result)

    return 0


if __name__ == "__main__":
    sys.exit(main())
