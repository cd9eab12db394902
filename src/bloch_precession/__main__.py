"""Main entry point: python -m bloch_precession"""

from __future__ import annotations

import argparse
import logging
import math

from bloch_precession import __version__
from bloch_precession.analysis.metrics import TrajectoryMetrics
from bloch_precession.core.simulation import BlochSimulation
from bloch_precession.utils.constants import (
    DEFAULT_DETUNING_MHZ,
    DEFAULT_RABI_FREQ_MHZ,
    DT,
)
from bloch_precession.utils.types import SimulationConfig


def finite_float(text: str) -> float:
    """argparse type: a finite real number."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}")
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be finite, got {text!r}")
    return value


def positive_float(text: str) -> float:
    value = finite_float(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {text!r}")
    return value


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {text!r}")
    return value


def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {text!r}")
    return value


def _add_drive_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--rabi", type=finite_float, default=DEFAULT_RABI_FREQ_MHZ,
        help=f"Rabi frequency in MHz (default {DEFAULT_RABI_FREQ_MHZ})",
    )
    parser.add_argument(
        "--detuning", type=finite_float, default=DEFAULT_DETUNING_MHZ,
        help=f"Detuning in MHz (default {DEFAULT_DETUNING_MHZ})",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bloch-precession",
        description="Bloch sphere precession of a driven two-level system",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = parser.add_subparsers(dest="command")

    # simulate
    sim = sub.add_parser("simulate", help="Run a headless simulation")
    _add_drive_args(sim)
    sim.add_argument("--steps", type=positive_int, default=500, help="Integration steps")
    sim.add_argument("--dt", type=positive_float, default=DT, help=f"Time step (default {DT})")
    sim.add_argument(
        "--renormalize-every", type=non_negative_int, default=0,
        help="Rescale the Bloch vector to unit length every N steps (0 = never)",
    )
    sim.add_argument("--no-viz", action="store_true", help="Skip plot generation")
    sim.add_argument("--save-dir", type=str, default=".", help="Directory for plots")

    # visualize
    viz = sub.add_parser("visualize", help="Launch 3D renderer")
    _add_drive_args(viz)
    viz.add_argument("--paused", action="store_true", help="Start stopped")

    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


def run_simulation(args: argparse.Namespace) -> BlochSimulation:
    """Headless pipeline: configure -> run -> analyze -> report."""
    config = SimulationConfig(
        dt=args.dt,
        rabi_freq=args.rabi,
        detuning=args.detuning,
        renormalize_every=args.renormalize_every,
    )
    sim = BlochSimulation(config=config)

    print(f"Rabi: {args.rabi:.3f} MHz | Detuning: {args.detuning:.3f} MHz")
    print(f"Steps: {args.steps} | dt: {args.dt}")
    print()

    print(f"Integrating ({args.steps} steps)...")
    history = sim.run(args.steps)

    report = TrajectoryMetrics(history, sim.params).full_report()
    field = sim.effective_field()
    theta, phi = sim.current_spherical()
    x, y, z = sim.current_cartesian()
    ground, excited = sim.populations()
    pops = report["population_stats"]

    print()
    print("=" * 50)
    print(" RESULTS")
    print("=" * 50)
    print(f"  Elapsed time:        {sim.elapsed_time():.4f}")
    print(f"  |B_eff|:             {field.magnitude:.4f} rad/time")
    print(f"  theta, phi:          {theta:.4f}, {phi:.4f}")
    print(f"  x, y, z:             {x:.4f}, {y:.4f}, {z:.4f}")
    print(f"  P(|g>), P(|e>):      {ground:.4f}, {excited:.4f}")
    print(f"  Max P(|e>):          {pops['excited_max']:.4f}")
    print(f"  Norm drift:          {report['norm_drift']:.2e}")
    print(f"  Analytic deviation:  {report['analytic_deviation']:.2e}")
    if report["estimated_period"] is not None:
        print(f"  Rabi period:         {report['estimated_period']:.4f} "
              f"(expected {report['expected_period']:.4f})")
    print(f"  Trail points:        {len(sim.trail)}/{sim.trail.capacity}")
    print("=" * 50)

    if not args.no_viz:
        from bloch_precession.visualization.plots import PlotSuite

        print("\nGenerating plots...")
        plots = PlotSuite(save_dir=args.save_dir)
        plots.population_vs_time(history, rabi_freq=args.rabi, detuning=args.detuning)
        plots.spherical_angles_vs_time(history)
        plots.bloch_trajectory_3d(sim)
        print(f"Plots saved to {plots.save_dir}")

    return sim


def run_visualize(args: argparse.Namespace) -> None:
    """Launch 3D renderer."""
    config = SimulationConfig(rabi_freq=args.rabi, detuning=args.detuning)
    sim = BlochSimulation(config=config)
    if not args.paused:
        sim.toggle_running()

    print(f"Rabi: {args.rabi:.1f} MHz | Detuning: {args.detuning:.1f} MHz")
    print("Launching 3D renderer...")
    print("  SPACE=play/pause  R=reset  UP/DOWN=Rabi  LEFT/RIGHT=detuning  ESC=close")

    from bloch_precession.visualization.renderer import BlochRenderer

    renderer = BlochRenderer(sim)
    renderer.run()


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "simulate":
        setup_logging(args.verbose)
        run_simulation(args)
    elif args.command == "visualize":
        setup_logging(args.verbose)
        run_visualize(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
