"""Plotting functions for Cart-Pole Playground."""

from pathlib import Path

import numpy as np
from matplotlib import pyplot as plt

from cartpoleplayground.agent import ControlMode, EpisodeResult
from cartpoleplayground.logging_config import (
    logger,
)


def running_average(values: list[float], window: int) -> np.ndarray:
    """Trailing moving average; shorter than ``window`` at the start of the series."""
    data = np.asarray(values, dtype=float)
    if data.size == 0:
        return data
    cumulative = np.cumsum(np.insert(data, 0, 0.0))
    result = np.empty_like(data)
    for i in range(data.size):
        start = max(0, i + 1 - window)
        result[i] = (cumulative[i + 1] - cumulative[start]) / (i + 1 - start)
    return result


def plot_episode_lengths(  # pragma: no cover
    file_prefix: str,
    all_results: list[EpisodeResult],
    plot_dir: Path,
    window: int = 25,
) -> None:
    """
    Plot episode lengths with their running average and save the plot.

    Args:
        file_prefix (str): Prefix for the output file name.
        all_results (list[EpisodeResult]): Completed episodes.
        plot_dir (Path): Directory to save the plot.
        window (int): Running-average window.
    """
    episodes = [r.episode for r in all_results]
    steps = [float(r.steps) for r in all_results]
    plt.figure(figsize=(10, 6))
    plt.plot(episodes, steps, marker="o", markersize=2, alpha=0.5, label="Episode Length")
    plt.plot(episodes, running_average(steps, window), color="r", label=f"Average ({window})")
    plt.title("Episode Length Over Time")
    plt.xlabel("Episode")
    plt.ylabel("Steps")
    plt.legend()
    plt.grid()
    plt.savefig(plot_dir / f"{file_prefix}episode_lengths.png")
    plt.close()


def plot_training_returns(  # pragma: no cover
    file_prefix: str,
    all_results: list[EpisodeResult],
    plot_dir: Path,
) -> None:
    """
    Plot last and smoothed training returns of neural episodes and save the plot.

    Args:
        file_prefix (str): Prefix for the output file name.
        all_results (list[EpisodeResult]): Completed episodes.
        plot_dir (Path): Directory to save the plot.
    """
    neural = [r for r in all_results if r.control_mode is ControlMode.NEURAL]
    if not neural:
        logger.warning("No neural episodes to plot training returns for.")
        return
    episodes = [r.episode for r in neural]
    plt.figure(figsize=(10, 6))
    plt.plot(episodes, [r.last_return for r in neural], alpha=0.5, label="Episode Return")
    plt.plot(episodes, [r.average_return for r in neural], color="r", label="Smoothed Return")
    plt.title("Training Return Over Time")
    plt.xlabel("Episode")
    plt.ylabel("Return")
    plt.legend()
    plt.grid()
    plt.savefig(plot_dir / f"{file_prefix}training_returns.png")
    plt.close()


def plot_results(  # pragma: no cover
    file_prefix: str,
    all_results: list[EpisodeResult],
    plot_dir: Path,
) -> None:
    """Generate every session plot into ``plot_dir``."""
    if not all_results:
        logger.warning("No completed episodes to plot.")
        return
    plot_dir.mkdir(parents=True, exist_ok=True)
    plot_episode_lengths(file_prefix, all_results, plot_dir)
    plot_training_returns(file_prefix, all_results, plot_dir)
    logger.info(f"Plots saved to {plot_dir}")
