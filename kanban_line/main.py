"""
Main entry point for the simulation.
"""
import argparse
import logging

from .sim_model import KanbanSimulation
from .config import SCENARIO_A, SCENARIO_B, ConfigurationError
from .analytics import Analytics


def run_scenario(scenario_config, seed=None, realtime_factor=None, until=None):
    scenario_name = scenario_config['NAME']
    print(f"\nRunning {scenario_name}...")
    print(f"  Configuration: {len(scenario_config['STATIONS'])} stations, time stretch {scenario_config['TIME_STRETCH']}")

    sim = KanbanSimulation(scenario_config, seed=seed)

    if realtime_factor:
        # e.g. 0.001 -> 1 hour of line time in ~3.6 real seconds
        sim.run_realtime(until=until, realtime_factor=realtime_factor)
    else:
        sim.run(until=until)

    return sim


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Kanban lamp assembly line simulation")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--until", type=float, default=None, help="Run length in real seconds")
    parser.add_argument("--realtime", type=float, default=None,
                        help="Real seconds per clock second (omit to run as fast as possible)")
    parser.add_argument("--output-dir", default="results", help="Where graphs and lamp CSVs go")
    parser.add_argument("--no-graphs", action="store_true", help="Skip graphs and CSV export")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(name)s] %(asctime)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    analytics = Analytics()
    try:
        for scenario in (SCENARIO_A, SCENARIO_B):
            sim = run_scenario(scenario, seed=args.seed, realtime_factor=args.realtime, until=args.until)
            analytics.add_result(scenario["NAME"], sim)
    except ConfigurationError as exc:
        logging.getLogger(__name__).error(f"Invalid scenario: {exc}")
        return 2

    # Report
    analytics.print_summary()
    if not args.no_graphs:
        analytics.generate_graphs(args.output_dir)
        for path in analytics.export_lamps(args.output_dir):
            print(f"Lamps exported to {path}")
    print("Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
