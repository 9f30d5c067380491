"""Non-learning controllers and the control-mode selector."""

from enum import Enum

import numpy as np

from cartpoleplayground.brain.actions import Action
from cartpoleplayground.env import CartPoleState

# Linear feedback gains of the heuristic controller
HEURISTIC_THETA_DOT_GAIN = 0.25
HEURISTIC_X_DOT_GAIN = 0.05


class ControlMode(str, Enum):
    """Who decides the push direction each tick."""

    NEURAL = "neural"
    HEURISTIC = "heuristic"
    RANDOM = "random"


def heuristic_action(state: CartPoleState) -> Action:
    """Push right when ``theta + 0.25 * theta_dot + 0.05 * x_dot`` is positive, else left."""
    signal = (
        state.theta
        + HEURISTIC_THETA_DOT_GAIN * state.theta_dot
        + HEURISTIC_X_DOT_GAIN * state.x_dot
    )
    return Action.RIGHT if signal > 0 else Action.LEFT


def random_action(rng: np.random.Generator) -> Action:
    """Choose either direction with equal probability."""
    return Action.RIGHT if rng.random() < 0.5 else Action.LEFT  # noqa: PLR2004
