"""Run the Cart-Pole Playground headlessly."""

import argparse
from datetime import UTC, datetime
from pathlib import Path

from cartpoleplayground.agent import CartPoleAgent, ControlMode, EpisodeResult
from cartpoleplayground.logging_config import (
    logger,
    set_log_level,
)
from cartpoleplayground.report.csv_export import export_episode_results_to_csv
from cartpoleplayground.report.plots import plot_results
from cartpoleplayground.report.summary import summary
from cartpoleplayground.utils.config_loader import (
    DEFAULT_TICKS,
    SimulationConfig,
    create_agent,
    load_simulation_config,
)
from cartpoleplayground.utils.seeding import get_seed_registry


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Run the Cart-Pole Playground.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML simulation configuration file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "NONE"],
        help="Set the logging level (default: INFO). Use 'NONE' to disable logging.",
    )
    mode_choices = [mode.value for mode in ControlMode]
    parser.add_argument(
        "--mode",
        type=str,
        default=None,
        choices=mode_choices,
        help=f"Control mode ({', '.join(mode_choices)}); overrides the config file.",
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=None,
        help=f"Number of simulation ticks to run (default: {DEFAULT_TICKS}).",
    )
    parser.add_argument(
        "--max-episode-steps",
        type=int,
        default=None,
        help="Cap on episode length; episodes otherwise run until the pole falls.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility; generated when omitted.",
    )
    parser.add_argument(
        "--plots",
        action="store_true",
        help="Save episode-length and training-return plots.",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Export completed episodes to CSV.",
    )
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """Merge the optional config file with command-line overrides."""
    config = load_simulation_config(args.config) if args.config else SimulationConfig()
    overrides = {}
    if args.mode is not None:
        overrides["control_mode"] = ControlMode(args.mode)
    if args.ticks is not None:
        overrides["ticks"] = args.ticks
    if args.max_episode_steps is not None:
        overrides["max_episode_steps"] = args.max_episode_steps
    if args.seed is not None:
        overrides["seed"] = args.seed
    if not overrides:
        return config
    return SimulationConfig(**{**config.model_dump(), **overrides})


def run_session(agent: CartPoleAgent, ticks: int) -> list[EpisodeResult]:
    """Tick the agent, pausing cleanly on KeyboardInterrupt."""
    if not agent.is_running:
        agent.toggle_run()
    results: list[EpisodeResult] = []
    try:
        for _ in range(ticks):
            episode = agent.tick()
            if episode is not None:
                results.append(episode)
    except KeyboardInterrupt:
        logger.warning("KeyboardInterrupt detected. Pausing and reporting partial results.")
    finally:
        if agent.is_running:
            agent.toggle_run()
    return results


def main() -> None:
    """Run the Cart-Pole Playground."""
    args = parse_arguments()
    set_log_level(args.log_level)

    config = build_config(args)
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    logger.info(f"Session ID: {timestamp}")
    logger.info(f"Config file: {args.config}")
    logger.info(f"Control mode: {config.control_mode.value}")
    logger.info(f"Ticks: {config.ticks}")
    logger.info(f"Max episode steps: {config.max_episode_steps}")

    agent = create_agent(config)
    seeds = get_seed_registry()
    logger.info(f"Seeds: {seeds}")

    results = run_session(agent, config.ticks)
    summary(timestamp, results, agent.metrics, agent.training_stats, seeds=seeds)

    export_dir = Path.cwd() / "exports" / timestamp
    if args.export:
        export_episode_results_to_csv(results, export_dir / "data")
    if args.plots:
        plot_results("", results, export_dir / "plots")


if __name__ == "__main__":
    main()
