"""Module for the policy network, action sampling and training."""

from cartpoleplayground.brain.actions import ACTION_SET, Action
from cartpoleplayground.brain.dtypes import NetworkConfig, TrainerConfig
from cartpoleplayground.brain.network import (
    ForwardResult,
    NetworkParameters,
    forward,
    initialize_network,
)
from cartpoleplayground.brain.sampling import sample_action_index
from cartpoleplayground.brain.trainer import (
    PolicyStep,
    ReinforceTrainer,
    Trajectory,
    compute_gradients,
    discounted_returns,
)

__all__ = [
    "ACTION_SET",
    "Action",
    "ForwardResult",
    "NetworkConfig",
    "NetworkParameters",
    "PolicyStep",
    "ReinforceTrainer",
    "TrainerConfig",
    "Trajectory",
    "compute_gradients",
    "discounted_returns",
    "forward",
    "initialize_network",
    "sample_action_index",
]
