"""Sample discrete actions from a probability distribution."""

from collections.abc import Sequence

import numpy as np


def sample_action_index(probs: Sequence[float] | np.ndarray, rng: np.random.Generator) -> int:
    """
    Draw an action index from ``probs`` by inverse-CDF sampling.

    A single uniform value in ``[0, 1)`` is drawn and the distribution is walked
    until the cumulative mass exceeds it. If rounding leaves the cumulative sum
    short of the draw, the last index is returned.
    """
    draw = rng.random()
    cumulative = 0.0
    for index, p in enumerate(probs):
        cumulative += float(p)
        if draw < cumulative:
            return index
    return len(probs) - 1
