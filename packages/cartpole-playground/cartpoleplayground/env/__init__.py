"""Module for the cart-pole environment."""

from cartpoleplayground.env.cartpole import (
    DEFAULT_PHYSICS,
    PUSH_LEFT,
    PUSH_RIGHT,
    CartPoleState,
    PhysicsConfig,
    StepResult,
    TerminationReason,
    create_initial_state,
    step,
)

__all__ = [
    "DEFAULT_PHYSICS",
    "PUSH_LEFT",
    "PUSH_RIGHT",
    "CartPoleState",
    "PhysicsConfig",
    "StepResult",
    "TerminationReason",
    "create_initial_state",
    "step",
]
