"""Define the configuration types used by the policy network and trainer."""

from pydantic import BaseModel, field_validator

INPUT_DIM = 4
HIDDEN_DIM = 8
OUTPUT_DIM = 2

DEFAULT_INIT_SCALE = 0.3
DEFAULT_LEARNING_RATE = 0.02
DEFAULT_GAMMA = 0.99


class NetworkConfig(BaseModel):
    """Configuration for the two-layer policy network."""

    init_scale: float = DEFAULT_INIT_SCALE  # Weights drawn from U(-init_scale, init_scale)

    @field_validator("init_scale")
    @classmethod
    def validate_init_scale(cls, v: float) -> float:
        """Validate that the initialization range is positive."""
        if v <= 0:
            error_message = f"init_scale must be positive, got {v}."
            raise ValueError(error_message)
        return v


class TrainerConfig(BaseModel):
    """Configuration for the REINFORCE trainer."""

    learning_rate: float = DEFAULT_LEARNING_RATE
    gamma: float = DEFAULT_GAMMA

    @field_validator("learning_rate")
    @classmethod
    def validate_learning_rate(cls, v: float) -> float:
        """Validate that the learning rate is positive."""
        if v <= 0:
            error_message = f"learning_rate must be positive, got {v}."
            raise ValueError(error_message)
        return v

    @field_validator("gamma")
    @classmethod
    def validate_gamma(cls, v: float) -> float:
        """Validate that the discount factor lies in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            error_message = f"gamma must be within [0, 1], got {v}."
            raise ValueError(error_message)
        return v
