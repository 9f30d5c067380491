"""Reporting module for Cart-Pole Playground session results."""

from rich import box
from rich.console import Console
from rich.table import Table

from cartpoleplayground.agent import EpisodeMetrics, EpisodeResult, TrainingStats
from cartpoleplayground.logging_config import (
    logger,
)

# Only the most recent episodes are listed individually
MAX_LISTED_EPISODES = 20


def build_summary_table(
    all_results: list[EpisodeResult],
    max_rows: int = MAX_LISTED_EPISODES,
) -> Table:
    """Build a rich table listing the most recent completed episodes."""
    table = Table(title="Completed episodes", box=box.SIMPLE_HEAVY)
    table.add_column("Episode", justify="right")
    table.add_column("Mode")
    table.add_column("Steps", justify="right")
    table.add_column("Reward", justify="right")
    table.add_column("Termination")
    table.add_column("Trained", justify="center")
    table.add_column("Avg return", justify="right")

    for result in all_results[-max_rows:]:
        table.add_row(
            str(result.episode),
            result.control_mode.value,
            str(result.steps),
            f"{result.total_reward:.0f}",
            result.termination_reason.value,
            "yes" if result.update_applied else "-",
            f"{result.average_return:.1f}",
        )
    return table


def summary(
    session_id: str,
    all_results: list[EpisodeResult],
    metrics: EpisodeMetrics,
    training_stats: TrainingStats,
    console: Console | None = None,
    seeds: dict[str, int] | None = None,
) -> None:
    """
    Print a summary of the session.

    Parameters
    ----------
    session_id : str
        Identifier of the session.
    all_results : list[EpisodeResult]
        Episodes completed during the session.
    metrics : EpisodeMetrics
        Final episode metrics of the agent.
    training_stats : TrainingStats
        Final training statistics of the agent.
    console : Console | None
        Console to print to; a new one is created when None.
    seeds : dict[str, int] | None
        Seeds used by the session, listed when given.
    """
    if not all_results:
        logger.warning("No completed episodes to summarize.")
        return

    console = console or Console()
    console.print(build_summary_table(all_results))

    average_steps = sum(r.steps for r in all_results) / len(all_results)
    lines = [
        f"Session ID: {session_id}",
        f"Completed episodes: {metrics.episodes}",
        f"Average episode length: {average_steps:.2f} steps",
        f"Last episode length: {metrics.last} steps",
        f"Best episode length: {metrics.best} steps",
        f"Last training return: {training_stats.last_return:.0f}",
        f"Smoothed training return: {training_stats.average_return:.1f}",
        f"Updates applied/discarded: "
        f"{training_stats.updates_applied}/{training_stats.updates_discarded}",
    ]
    if seeds:
        lines.append("Seeds: " + ", ".join(f"{name}={value}" for name, value in seeds.items()))
    for line in lines:
        console.print(line)
        logger.info(line)
