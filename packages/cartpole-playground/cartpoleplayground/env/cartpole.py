"""
Cart-pole physics.

The classic inverted pendulum on a cart, integrated with a single explicit Euler
step per call. The cart moves along a frictionless track and is driven by a
fixed-magnitude force pushing left or right.

Equations of motion (shared intermediate term ``temp``):

    temp       = (F + m_p * l * theta_dot^2 * sin(theta)) / M
    theta_acc  = (g * sin(theta) - cos(theta) * temp) / (l * (4/3 - m_p * cos(theta)^2 / M))
    x_acc      = temp - m_p * l * theta_acc * cos(theta) / M

where ``M = m_c + m_p`` and ``l`` is the half-pole length. Each state component
then advances by ``tau`` times its first derivative.
"""

import math
from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_GRAVITY = 9.8
DEFAULT_CART_MASS = 1.0
DEFAULT_POLE_MASS = 0.1
DEFAULT_HALF_POLE_LENGTH = 0.5
DEFAULT_FORCE_MAGNITUDE = 10.0
DEFAULT_TAU = 0.02
DEFAULT_TRACK_LIMIT = 2.4
DEFAULT_ANGLE_LIMIT = 12 * math.pi / 180

# Initial state is drawn from x ~ U(-0.2, 0.2), theta ~ U(-0.1, 0.1)
INITIAL_POSITION_SPREAD = 0.2
INITIAL_ANGLE_SPREAD = 0.1

PUSH_LEFT = -1
PUSH_RIGHT = 1


class TerminationReason(str, Enum):
    """Reason why an episode terminated.

    Attributes
    ----------
    TRACK_LIMIT : str
        The cart left the track.
    ANGLE_LIMIT : str
        The pole tilted past the angle limit.
    NON_FINITE : str
        The integrator produced a non-finite state.
    MAX_STEPS : str
        The episode reached the configured step cap.
    """

    TRACK_LIMIT = "track_limit"
    ANGLE_LIMIT = "angle_limit"
    NON_FINITE = "non_finite"
    MAX_STEPS = "max_steps"


class PhysicsConfig(BaseModel):
    """Physical constants of the cart-pole system."""

    gravity: float = DEFAULT_GRAVITY
    cart_mass: float = DEFAULT_CART_MASS
    pole_mass: float = DEFAULT_POLE_MASS
    half_pole_length: float = DEFAULT_HALF_POLE_LENGTH
    force_magnitude: float = DEFAULT_FORCE_MAGNITUDE
    tau: float = DEFAULT_TAU
    track_limit: float = DEFAULT_TRACK_LIMIT
    angle_limit: float = DEFAULT_ANGLE_LIMIT

    model_config = ConfigDict(frozen=True)

    @field_validator("cart_mass", "pole_mass", "half_pole_length", "tau", "track_limit", "angle_limit")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate that physical quantities are strictly positive."""
        if v <= 0:
            error_message = f"Physical constant must be positive, got {v}."
            raise ValueError(error_message)
        return v

    @property
    def total_mass(self) -> float:
        """Combined mass of cart and pole."""
        return self.cart_mass + self.pole_mass

    @property
    def pole_mass_length(self) -> float:
        """Pole mass times half-pole length."""
        return self.pole_mass * self.half_pole_length


DEFAULT_PHYSICS = PhysicsConfig()


class CartPoleState(BaseModel):
    """Immutable state of the cart-pole system."""

    x: float = 0.0
    x_dot: float = 0.0
    theta: float = 0.0
    theta_dot: float = 0.0

    model_config = ConfigDict(frozen=True)

    def to_vector(self) -> np.ndarray:
        """Return the observation vector ``[x, x_dot, theta, theta_dot]``."""
        return np.array([self.x, self.x_dot, self.theta, self.theta_dot], dtype=np.float64)

    def is_finite(self) -> bool:
        """Whether every component is a finite number."""
        return all(math.isfinite(v) for v in (self.x, self.x_dot, self.theta, self.theta_dot))


class StepResult(BaseModel):
    """Outcome of a single physics step."""

    next_state: CartPoleState
    terminal: bool
    finite: bool = True
    termination_reason: TerminationReason | None = None

    model_config = ConfigDict(frozen=True)


def step(
    state: CartPoleState,
    action: int,
    config: PhysicsConfig = DEFAULT_PHYSICS,
) -> StepResult:
    """
    Advance the cart-pole system by one timestep.

    Parameters
    ----------
    state : CartPoleState
        Current state. Never modified.
    action : int
        ``-1`` to push left, ``+1`` to push right.
    config : PhysicsConfig
        Physical constants.

    Returns
    -------
    StepResult
        The next state and whether it is terminal. A pole exactly at the angle
        limit (or a cart exactly at the track limit) is not terminal.
    """
    if action not in (PUSH_LEFT, PUSH_RIGHT):
        error_message = f"Action must be {PUSH_LEFT} or {PUSH_RIGHT}, got {action}."
        raise ValueError(error_message)

    force = action * config.force_magnitude
    cos_theta = math.cos(state.theta)
    sin_theta = math.sin(state.theta)
    total_mass = config.total_mass
    length = config.half_pole_length

    temp = (force + config.pole_mass_length * state.theta_dot**2 * sin_theta) / total_mass
    denominator = length * (4.0 / 3.0 - config.pole_mass * cos_theta**2 / total_mass)
    if denominator == 0.0:
        theta_acc = math.nan
    else:
        theta_acc = (config.gravity * sin_theta - cos_theta * temp) / denominator
    x_acc = temp - config.pole_mass_length * theta_acc * cos_theta / total_mass

    tau = config.tau
    next_state = CartPoleState(
        x=state.x + tau * state.x_dot,
        x_dot=state.x_dot + tau * x_acc,
        theta=state.theta + tau * state.theta_dot,
        theta_dot=state.theta_dot + tau * theta_acc,
    )

    # NaN compares False against the limits, so check finiteness first
    if not next_state.is_finite():
        return StepResult(
            next_state=next_state,
            terminal=True,
            finite=False,
            termination_reason=TerminationReason.NON_FINITE,
        )
    if abs(next_state.x) > config.track_limit:
        return StepResult(
            next_state=next_state,
            terminal=True,
            termination_reason=TerminationReason.TRACK_LIMIT,
        )
    if abs(next_state.theta) > config.angle_limit:
        return StepResult(
            next_state=next_state,
            terminal=True,
            termination_reason=TerminationReason.ANGLE_LIMIT,
        )
    return StepResult(next_state=next_state, terminal=False)


def create_initial_state(rng: np.random.Generator) -> CartPoleState:
    """Draw a fresh start state with a small random offset and tilt."""
    return CartPoleState(
        x=float(rng.uniform(-INITIAL_POSITION_SPREAD, INITIAL_POSITION_SPREAD)),
        x_dot=0.0,
        theta=float(rng.uniform(-INITIAL_ANGLE_SPREAD, INITIAL_ANGLE_SPREAD)),
        theta_dot=0.0,
    )
