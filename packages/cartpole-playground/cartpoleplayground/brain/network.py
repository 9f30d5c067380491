"""
Two-layer policy network.

A fixed 4-8-2 perceptron mapping a cart-pole observation to a distribution over
the two push directions:

    hidden = tanh(b1 + W1 @ observation)
    logits = b2 + W2 @ hidden
    probs  = softmax(logits - max(logits))

Parameters are held in an immutable ``NetworkParameters`` value. Training never
edits a parameter set in place; it builds a new one, so any reader holding a
reference always sees a complete, consistent set.
"""

from dataclasses import dataclass

import numpy as np

from cartpoleplayground.brain.dtypes import (
    DEFAULT_INIT_SCALE,
    HIDDEN_DIM,
    INPUT_DIM,
    OUTPUT_DIM,
)
from cartpoleplayground.logging_config import logger


def _frozen(values: np.ndarray) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class NetworkParameters:
    """
    Weights and biases of the policy network.

    Attributes
    ----------
    w1 : np.ndarray
        Input-to-hidden weights, shape ``(hidden, input)``.
    b1 : np.ndarray
        Hidden biases, shape ``(hidden,)``.
    w2 : np.ndarray
        Hidden-to-output weights, shape ``(output, hidden)``.
    b2 : np.ndarray
        Output biases, shape ``(output,)``.
    """

    w1: np.ndarray
    b1: np.ndarray
    w2: np.ndarray
    b2: np.ndarray

    def __post_init__(self) -> None:
        w1, b1, w2, b2 = (_frozen(a) for a in (self.w1, self.b1, self.w2, self.b2))
        if w1.ndim != 2 or w2.ndim != 2:  # noqa: PLR2004
            error_message = "Weight matrices must be two-dimensional."
            raise ValueError(error_message)
        hidden_dim, _ = w1.shape
        output_dim, w2_hidden = w2.shape
        if b1.shape != (hidden_dim,) or w2_hidden != hidden_dim or b2.shape != (output_dim,):
            error_message = (
                f"Inconsistent parameter shapes: w1={w1.shape}, b1={b1.shape}, "
                f"w2={w2.shape}, b2={b2.shape}."
            )
            raise ValueError(error_message)
        object.__setattr__(self, "w1", w1)
        object.__setattr__(self, "b1", b1)
        object.__setattr__(self, "w2", w2)
        object.__setattr__(self, "b2", b2)

    @property
    def input_dim(self) -> int:
        """Number of observation inputs."""
        return self.w1.shape[1]

    @property
    def hidden_dim(self) -> int:
        """Number of hidden units."""
        return self.w1.shape[0]

    @property
    def output_dim(self) -> int:
        """Number of actions."""
        return self.w2.shape[0]

    @property
    def num_parameters(self) -> int:
        """Total number of scalar parameters."""
        return self.w1.size + self.b1.size + self.w2.size + self.b2.size

    def is_finite(self) -> bool:
        """Whether every weight and bias is finite."""
        return all(np.isfinite(a).all() for a in (self.w1, self.b1, self.w2, self.b2))


@dataclass(frozen=True)
class ForwardResult:
    """Activations produced by one forward pass."""

    hidden: np.ndarray
    probs: np.ndarray


def initialize_network(
    rng: np.random.Generator,
    init_scale: float = DEFAULT_INIT_SCALE,
    input_dim: int = INPUT_DIM,
    hidden_dim: int = HIDDEN_DIM,
    output_dim: int = OUTPUT_DIM,
) -> NetworkParameters:
    """
    Create a freshly randomized parameter set.

    Weights are drawn uniformly from ``[-init_scale, init_scale]``; biases start at zero.
    """
    params = NetworkParameters(
        w1=rng.uniform(-init_scale, init_scale, size=(hidden_dim, input_dim)),
        b1=np.zeros(hidden_dim),
        w2=rng.uniform(-init_scale, init_scale, size=(output_dim, hidden_dim)),
        b2=np.zeros(output_dim),
    )
    logger.debug(
        f"Initialized policy network {input_dim}-{hidden_dim}-{output_dim} "
        f"({params.num_parameters} parameters, range=[-{init_scale}, {init_scale}])",
    )
    return params


def softmax(logits: np.ndarray) -> np.ndarray:
    """Numerically stable softmax; the maximum logit is subtracted before exponentiating."""
    shifted = np.exp(logits - np.max(logits))
    return shifted / shifted.sum()


def forward(params: NetworkParameters, observation: np.ndarray) -> ForwardResult:
    """
    Run the policy network on one observation.

    Parameters
    ----------
    params : NetworkParameters
        The parameter set to evaluate.
    observation : np.ndarray
        Observation vector of length ``params.input_dim``.

    Returns
    -------
    ForwardResult
        Hidden activations and the action-probability distribution.
    """
    obs = np.asarray(observation, dtype=np.float64)
    hidden = np.tanh(params.b1 + params.w1 @ obs)
    logits = params.b2 + params.w2 @ hidden
    return ForwardResult(hidden=hidden, probs=softmax(logits))
