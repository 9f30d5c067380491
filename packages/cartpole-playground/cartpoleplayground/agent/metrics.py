"""Episode and training metrics for the cart-pole agent."""

from __future__ import annotations

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from cartpoleplayground.brain.dtypes import HIDDEN_DIM, INPUT_DIM, OUTPUT_DIM

# Exponential moving average factors for the smoothed training return
RETURN_SMOOTHING_KEEP = 0.9
RETURN_SMOOTHING_NEW = 0.1


class EpisodeMetrics(BaseModel):
    """Running counters for the current episode plus persistent episode totals.

    Attributes
    ----------
    steps : int
        Surviving steps taken in the current episode.
    total_reward : float
        Reward accumulated in the current episode.
    episodes : int
        Number of completed episodes.
    best : int
        Longest completed episode, in steps.
    last : int
        Length of the most recently completed episode, in steps.
    """

    steps: int = 0
    total_reward: float = 0.0
    episodes: int = 0
    best: int = 0
    last: int = 0

    def track_step(self, reward: float) -> None:
        """Count one surviving step."""
        self.steps += 1
        self.total_reward += reward

    def track_episode_completion(self) -> int:
        """Close the current episode and return its length.

        The terminating step counts towards the episode length. Running
        counters go back to zero; ``episodes``, ``best`` and ``last`` persist.
        """
        finished_steps = self.steps + 1
        self.episodes += 1
        self.best = max(self.best, finished_steps)
        self.last = finished_steps
        self.reset_episode()
        return finished_steps

    def reset_episode(self) -> None:
        """Zero the running step and reward counters."""
        self.steps = 0
        self.total_reward = 0.0


class TrainingStats(BaseModel):
    """Statistics of the neural policy's training episodes.

    Attributes
    ----------
    average_return : float
        Exponential moving average (0.9/0.1) of episode returns. The first
        recorded episode seeds the average directly.
    last_return : float
        Return of the most recent neural episode (its trajectory length).
    updates_applied : int
        Episodes whose update replaced the parameters.
    updates_discarded : int
        Episodes whose update was rejected as non-finite.
    """

    average_return: float = 0.0
    last_return: float = 0.0
    updates_applied: int = 0
    updates_discarded: int = 0

    def record_episode(self, episode_return: float, *, update_applied: bool | None) -> None:
        """Fold one episode's return into the statistics.

        ``update_applied`` is None when no update was attempted (empty trajectory).
        """
        if self.average_return == 0:
            self.average_return = episode_return
        else:
            self.average_return = (
                self.average_return * RETURN_SMOOTHING_KEEP + episode_return * RETURN_SMOOTHING_NEW
            )
        self.last_return = episode_return
        if update_applied is True:
            self.updates_applied += 1
        elif update_applied is False:
            self.updates_discarded += 1

    def reset(self) -> None:
        """Zero every statistic."""
        self.average_return = 0.0
        self.last_return = 0.0
        self.updates_applied = 0
        self.updates_discarded = 0


class NetworkActivations(BaseModel):
    """Most recent activations of the policy network, for diagram rendering."""

    input: list[float] = Field(default_factory=lambda: [0.0] * INPUT_DIM)
    hidden: list[float] = Field(default_factory=lambda: [0.0] * HIDDEN_DIM)
    output: list[float] = Field(default_factory=lambda: [0.0] * OUTPUT_DIM)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_arrays(
        cls,
        observation: np.ndarray,
        hidden: np.ndarray,
        probs: np.ndarray,
    ) -> NetworkActivations:
        """Build a snapshot from forward-pass arrays."""
        return cls(
            input=[float(v) for v in observation],
            hidden=[float(v) for v in hidden],
            output=[float(v) for v in probs],
        )
