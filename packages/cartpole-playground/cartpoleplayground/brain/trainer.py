"""
REINFORCE trainer for the two-layer policy network.

After each episode the trainer turns the recorded trajectory into one gradient
ascent step on expected return:

1. Discounted returns are computed backwards over the trajectory.
2. Each step's return is used directly as its advantage (no baseline).
3. The output error is ``(onehot(action) - probs) * return``, the softmax
   log-likelihood gradient scaled by the advantage.
4. The error is backpropagated through ``W2`` and the tanh derivative
   ``1 - hidden^2`` to the hidden layer.
5. Gradients are summed over the episode, scaled by
   ``learning_rate / max(1, len(trajectory))`` and added to the parameters.

An update that produces any non-finite gradient or parameter is discarded and
the previous parameter set is kept.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from cartpoleplayground.brain.dtypes import TrainerConfig
from cartpoleplayground.brain.network import NetworkParameters
from cartpoleplayground.logging_config import logger

SURVIVAL_REWARD = 1.0


@dataclass(frozen=True)
class PolicyStep:
    """
    One timestep recorded while the neural policy is in control.

    Attributes
    ----------
    observation : np.ndarray
        Input vector fed to the network.
    hidden : np.ndarray
        Hidden-layer activations from the forward pass.
    probs : np.ndarray
        Action probabilities from the forward pass.
    action_index : int
        Index of the sampled action.
    reward : float
        Reward for the step; every surviving step earns 1.
    """

    observation: np.ndarray
    hidden: np.ndarray
    probs: np.ndarray
    action_index: int
    reward: float = SURVIVAL_REWARD


@dataclass
class Trajectory:
    """Ordered, append-only record of the neural-mode steps of one episode."""

    steps: list[PolicyStep] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.steps)

    def append(self, policy_step: PolicyStep) -> None:
        """Record one step at the end of the trajectory."""
        self.steps.append(policy_step)

    def pop(self) -> PolicyStep:
        """Remove and return the most recent step."""
        return self.steps.pop()

    def clear(self) -> None:
        """Drop every recorded step."""
        self.steps = []

    @property
    def rewards(self) -> list[float]:
        """Rewards in insertion order."""
        return [s.reward for s in self.steps]


@dataclass(frozen=True)
class Gradients:
    """Summed (unscaled) policy gradients, laid out like ``NetworkParameters``."""

    w1: np.ndarray
    b1: np.ndarray
    w2: np.ndarray
    b2: np.ndarray

    def is_finite(self) -> bool:
        """Whether every gradient entry is finite."""
        return all(np.isfinite(a).all() for a in (self.w1, self.b1, self.w2, self.b2))


def discounted_returns(rewards: Sequence[float], gamma: float) -> list[float]:
    """
    Compute the discounted return at every position of a reward sequence.

    ``G[t] = r[t] + gamma * G[t + 1]`` with ``G[-1] = r[-1]``.
    """
    returns = [0.0] * len(rewards)
    running = 0.0
    for t in reversed(range(len(rewards))):
        running = rewards[t] + gamma * running
        returns[t] = running
    return returns


def compute_gradients(
    params: NetworkParameters,
    steps: Sequence[PolicyStep],
    gamma: float,
) -> Gradients:
    """
    Backpropagate the policy-gradient signal over a trajectory.

    Parameters
    ----------
    params : NetworkParameters
        Parameters that generated the trajectory.
    steps : Sequence[PolicyStep]
        Recorded steps, in order.
    gamma : float
        Discount factor.

    Returns
    -------
    Gradients
        Gradients of the advantage-weighted log-likelihood, summed over steps.
    """
    grad_w1 = np.zeros_like(params.w1)
    grad_b1 = np.zeros_like(params.b1)
    grad_w2 = np.zeros_like(params.w2)
    grad_b2 = np.zeros_like(params.b2)

    returns = discounted_returns([s.reward for s in steps], gamma)

    for policy_step, advantage in zip(steps, returns, strict=True):
        hidden = np.asarray(policy_step.hidden, dtype=np.float64)
        observation = np.asarray(policy_step.observation, dtype=np.float64)

        indicator = np.zeros(params.output_dim)
        indicator[policy_step.action_index] = 1.0
        delta_out = (indicator - np.asarray(policy_step.probs, dtype=np.float64)) * advantage

        grad_w2 += np.outer(delta_out, hidden)
        grad_b2 += delta_out

        delta_hidden = (params.w2.T @ delta_out) * (1.0 - hidden**2)
        grad_w1 += np.outer(delta_hidden, observation)
        grad_b1 += delta_hidden

    return Gradients(w1=grad_w1, b1=grad_b1, w2=grad_w2, b2=grad_b2)


class ReinforceTrainer:
    """Episodic REINFORCE update without a baseline."""

    def __init__(self, config: TrainerConfig | None = None) -> None:
        self.config = config or TrainerConfig()
        self.learning_rate = self.config.learning_rate
        self.gamma = self.config.gamma

    def update(
        self,
        params: NetworkParameters,
        trajectory: Trajectory | Sequence[PolicyStep],
    ) -> NetworkParameters:
        """
        Apply one gradient-ascent step computed from a completed episode.

        Parameters
        ----------
        params : NetworkParameters
            Current parameter set. Never modified.
        trajectory : Trajectory | Sequence[PolicyStep]
            Steps recorded during the episode.

        Returns
        -------
        NetworkParameters
            A new parameter set, or ``params`` itself when the trajectory is
            empty or the update would introduce non-finite values.
        """
        steps = trajectory.steps if isinstance(trajectory, Trajectory) else list(trajectory)
        if not steps:
            return params

        # Overflow is detected below and the update discarded
        with np.errstate(over="ignore", invalid="ignore"):
            gradients = compute_gradients(params, steps, self.gamma)
            if not gradients.is_finite():
                logger.warning(
                    f"Discarding update: non-finite gradients over {len(steps)} steps",
                )
                return params

            scale = self.learning_rate / max(1, len(steps))
            updated = NetworkParameters(
                w1=params.w1 + scale * gradients.w1,
                b1=params.b1 + scale * gradients.b1,
                w2=params.w2 + scale * gradients.w2,
                b2=params.b2 + scale * gradients.b2,
            )
        if not updated.is_finite():
            logger.warning("Discarding update: non-finite parameters after gradient step")
            return params

        logger.debug(
            f"Applied REINFORCE update over {len(steps)} steps "
            f"(scale={scale:.6f}, |grad_b2|={np.abs(gradients.b2).sum():.4f})",
        )
        return updated
