"""CSV export functions for Cart-Pole Playground session data."""

import csv
from pathlib import Path

from cartpoleplayground.agent import EpisodeResult
from cartpoleplayground.logging_config import logger

EPISODE_FIELDNAMES = [
    "episode",
    "control_mode",
    "steps",
    "total_reward",
    "termination_reason",
    "update_applied",
    "average_return",
    "last_return",
]


def export_episode_results_to_csv(
    all_results: list[EpisodeResult],
    data_dir: Path,
    file_prefix: str = "",
) -> Path:
    """
    Export completed episodes to a CSV file.

    Args:
        all_results (list[EpisodeResult]): Completed episodes.
        data_dir (Path): Directory to save the CSV file in.
        file_prefix (str): Prefix for the output file name.

    Returns
    -------
        Path: The written file.
    """
    data_dir.mkdir(parents=True, exist_ok=True)
    filepath = data_dir / f"{file_prefix}episode_results.csv"

    with filepath.open("w", newline="") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=EPISODE_FIELDNAMES)
        writer.writeheader()
        for result in all_results:
            writer.writerow(
                {
                    "episode": result.episode,
                    "control_mode": result.control_mode.value,
                    "steps": result.steps,
                    "total_reward": result.total_reward,
                    "termination_reason": result.termination_reason.value,
                    "update_applied": result.update_applied,
                    "average_return": result.average_return,
                    "last_return": result.last_return,
                },
            )

    logger.info(f"Episode results exported to {filepath}")
    return filepath
