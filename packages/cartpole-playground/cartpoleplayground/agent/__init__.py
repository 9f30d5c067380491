"""Module for agent."""

__all__ = [
    "CartPoleAgent",
    "ControlMode",
    "EpisodeMetrics",
    "EpisodeResult",
    "NetworkActivations",
    "SimulationSnapshot",
    "SimulationStatus",
    "TrainingStats",
]

from cartpoleplayground.agent.agent import (
    CartPoleAgent,
    EpisodeResult,
    SimulationSnapshot,
    SimulationStatus,
)
from cartpoleplayground.agent.controllers import ControlMode
from cartpoleplayground.agent.metrics import EpisodeMetrics, NetworkActivations, TrainingStats
