"""
Command line entry point.

Usage:
    porpsim --mode memory --porpoises 5 --ticks 2000 --seed 42 --output tracks.csv
"""

import argparse
import logging
import sys

from porpsim.config import configure_logging
from porpsim.core.output_writer import TrackWriter
from porpsim.core.simulation import Simulation
from porpsim.movement.land_avoidance import NavigationError
from porpsim.parameters.simulation_params import ConfigurationError, SimulationParameters

logger = logging.getLogger("porpsim.cli")

EXIT_OK = 0
EXIT_NAVIGATION_ERROR = 1
EXIT_CONFIGURATION_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="porpsim",
        description="Simulate harbour porpoise movement with spatial memory.",
    )
    parser.add_argument('--params', type=str, default=None,
                        help="JSON file with simulation parameters")
    parser.add_argument('--mode', type=str, default=None,
                        help="Movement mode: markov, crw or memory (or 0, 1, 2)")
    parser.add_argument('--porpoises', type=int, default=None)
    parser.add_argument('--ticks', type=int, default=None)
    parser.add_argument('--seed', type=int, default=None)
    parser.add_argument('--landscape', type=str, default=None)
    parser.add_argument('--data-dir', type=str, default=None)
    parser.add_argument('--output', type=str, default=None,
                        help="CSV file receiving one row per porpoise per tick")
    parser.add_argument('--log-level', type=str, default="INFO")
    parser.add_argument('--no-progress', action='store_true')
    return parser


def load_parameters(args: argparse.Namespace) -> SimulationParameters:
    """Parameters from the JSON file (if any) with command line overrides."""
    values = {}
    if args.params:
        try:
            values = SimulationParameters.from_json(args.params).to_dict()
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot read parameter file {args.params}: {e}") from e

    overrides = {
        "movement_mode": args.mode,
        "porpoise_count": args.porpoises,
        "sim_ticks": args.ticks,
        "random_seed": args.seed,
        "landscape": args.landscape,
        "data_dir": args.data_dir,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    return SimulationParameters.from_dict(values)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        configure_logging(args.log_level)
    except ValueError as e:
        print(f"porpsim: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR

    try:
        params = load_parameters(args)
        sim = Simulation(params, record_tracks=False)
        sim.initialize()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIGURATION_ERROR

    try:
        if args.output:
            with TrackWriter(args.output) as writer:
                sim.run(progress=not args.no_progress, writer=writer)
        else:
            sim.run(progress=not args.no_progress)
    except NavigationError:
        return EXIT_NAVIGATION_ERROR

    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
