"""Load and configure simulation settings from a YAML file."""

from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

from cartpoleplayground.agent import CartPoleAgent, ControlMode
from cartpoleplayground.brain.dtypes import NetworkConfig, TrainerConfig
from cartpoleplayground.env import PhysicsConfig
from cartpoleplayground.logging_config import (
    logger,
)

DEFAULT_TICKS = 5000


class SimulationConfig(BaseModel):
    """Configuration for a headless playground session."""

    seed: int | None = None
    control_mode: ControlMode = ControlMode.NEURAL
    ticks: int = DEFAULT_TICKS
    max_episode_steps: int | None = None
    physics: PhysicsConfig | None = None
    network: NetworkConfig | None = None
    trainer: TrainerConfig | None = None

    @field_validator("ticks")
    @classmethod
    def validate_ticks(cls, v: int) -> int:
        """Validate that at least one tick is requested."""
        if v < 1:
            error_message = f"ticks must be at least 1, got {v}."
            raise ValueError(error_message)
        return v

    @field_validator("max_episode_steps")
    @classmethod
    def validate_max_episode_steps(cls, v: int | None) -> int | None:
        """Validate that an episode step cap, when given, is positive."""
        if v is not None and v < 1:
            error_message = f"max_episode_steps must be at least 1, got {v}."
            raise ValueError(error_message)
        return v


def load_simulation_config(config_path: str) -> SimulationConfig:
    """
    Load simulation configuration from a YAML file and parse it into a SimulationConfig model.

    Args:
        config_path (str): Path to the YAML configuration file.

    Returns
    -------
        SimulationConfig: Parsed configuration as a Pydantic model.
    """
    with Path(config_path).open() as file:
        data = yaml.safe_load(file) or {}
        return SimulationConfig(**data)


def configure_physics(config: SimulationConfig) -> PhysicsConfig:
    """Return the physics constants, falling back to the classic cart-pole values."""
    if config.physics is None:
        logger.info("No physics configuration found; using defaults.")
        return PhysicsConfig()
    return config.physics


def configure_network(config: SimulationConfig) -> NetworkConfig:
    """Return the network initialization settings or their defaults."""
    return config.network or NetworkConfig()


def configure_trainer(config: SimulationConfig) -> TrainerConfig:
    """Return the trainer settings or their defaults."""
    return config.trainer or TrainerConfig()


def create_agent(config: SimulationConfig, seed: int | None = None) -> CartPoleAgent:
    """
    Build a CartPoleAgent from a simulation configuration.

    Args:
        config (SimulationConfig): Simulation configuration object.
        seed (int | None): Overrides ``config.seed`` when given.

    Returns
    -------
        CartPoleAgent: The configured agent, paused.
    """
    return CartPoleAgent(
        physics_config=configure_physics(config),
        network_config=configure_network(config),
        trainer_config=configure_trainer(config),
        control_mode=config.control_mode,
        max_episode_steps=config.max_episode_steps,
        seed=seed if seed is not None else config.seed,
    )
