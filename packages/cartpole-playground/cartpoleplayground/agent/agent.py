"""
Cart-pole agent: the fixed-step simulation loop.

The agent owns every piece of mutable simulation state (cart-pole state,
episode metrics, the neural trajectory, training statistics and the canonical
network parameters) and advances it one ``tick()`` at a time. Ticks are
cooperative: each runs to completion, and pausing only takes effect before the
next one.

Per tick, while running:

1. Pick an action according to the control mode (neural, heuristic, random).
   In neural mode the forward pass is recorded as a ``PolicyStep``.
2. Step the physics.
3. On a terminal state, close the episode, train on the trajectory if the
   neural policy was in control, and start a fresh randomized episode.

Parameters are replaced wholesale after training; ``snapshot()`` hands the
immutable parameter object to rendering collaborators.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
from pydantic import BaseModel, ConfigDict

from cartpoleplayground.agent.controllers import ControlMode, heuristic_action, random_action
from cartpoleplayground.agent.metrics import EpisodeMetrics, NetworkActivations, TrainingStats
from cartpoleplayground.brain.actions import Action, action_from_index
from cartpoleplayground.brain.dtypes import NetworkConfig, TrainerConfig
from cartpoleplayground.brain.network import NetworkParameters, forward, initialize_network
from cartpoleplayground.brain.sampling import sample_action_index
from cartpoleplayground.brain.trainer import (
    SURVIVAL_REWARD,
    PolicyStep,
    ReinforceTrainer,
    Trajectory,
)
from cartpoleplayground.env import (
    CartPoleState,
    PhysicsConfig,
    TerminationReason,
    create_initial_state,
    step,
)
from cartpoleplayground.logging_config import logger
from cartpoleplayground.utils.seeding import ensure_seed, get_rng, register_seed

# Episode logging interval
EPISODE_LOG_INTERVAL = 25


class SimulationStatus(str, Enum):
    """Run state of the simulation loop."""

    PAUSED = "paused"
    RUNNING = "running"


class EpisodeResult(BaseModel):
    """Record of one completed episode.

    Attributes
    ----------
    episode : int
        1-based index of the episode.
    steps : int
        Episode length, including the terminating step.
    total_reward : float
        Reward collected over the surviving steps.
    control_mode : ControlMode
        Control mode active when the episode ended.
    termination_reason : TerminationReason
        Why the episode ended.
    update_applied : bool
        Whether a training update replaced the network parameters.
    average_return : float
        Smoothed training return after the episode.
    last_return : float
        Training return of the most recent neural episode.
    """

    episode: int
    steps: int
    total_reward: float
    control_mode: ControlMode
    termination_reason: TerminationReason
    update_applied: bool = False
    average_return: float = 0.0
    last_return: float = 0.0

    model_config = ConfigDict(frozen=True)


class SimulationSnapshot(BaseModel):
    """Read-only view of the simulation for rendering collaborators."""

    state: CartPoleState
    metrics: EpisodeMetrics
    parameters: NetworkParameters
    activations: NetworkActivations
    training: TrainingStats
    control_mode: ControlMode
    status: SimulationStatus

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class CartPoleAgent:
    """
    Orchestrates physics, control and training for the cart-pole playground.

    Parameters
    ----------
    physics_config : PhysicsConfig | None
        Physical constants; defaults to the classic cart-pole values.
    network_config : NetworkConfig | None
        Parameter initialization settings.
    trainer_config : TrainerConfig | None
        Learning rate and discount factor.
    control_mode : ControlMode | str
        Initial control mode.
    max_episode_steps : int | None
        Optional cap on episode length; None lets episodes run until failure.
    seed : int | None
        Seed of the agent's random generator; generated when None.
    initial_state : CartPoleState | None
        Starting state of the first episode; randomized when None.
    """

    def __init__(  # noqa: PLR0913
        self,
        physics_config: PhysicsConfig | None = None,
        network_config: NetworkConfig | None = None,
        trainer_config: TrainerConfig | None = None,
        control_mode: ControlMode | str = ControlMode.NEURAL,
        max_episode_steps: int | None = None,
        seed: int | None = None,
        initial_state: CartPoleState | None = None,
    ) -> None:
        self.physics_config = physics_config or PhysicsConfig()
        self.network_config = network_config or NetworkConfig()
        self.trainer = ReinforceTrainer(trainer_config)
        self.max_episode_steps = max_episode_steps

        self.seed = ensure_seed(seed)
        register_seed("agent", self.seed)
        self.rng: np.random.Generator = get_rng(self.seed)

        self._control_mode = ControlMode(control_mode)
        self._status = SimulationStatus.PAUSED
        self._parameters = initialize_network(self.rng, self.network_config.init_scale)
        self._state = initial_state if initial_state is not None else create_initial_state(self.rng)
        self._trajectory = Trajectory()
        self._activations = NetworkActivations()
        self.metrics = EpisodeMetrics()
        self.training_stats = TrainingStats()

        logger.info(
            f"CartPoleAgent ready (seed={self.seed}, mode={self._control_mode.value}, "
            f"max_episode_steps={self.max_episode_steps})",
        )

    @property
    def state(self) -> CartPoleState:
        """Current cart-pole state."""
        return self._state

    @property
    def parameters(self) -> NetworkParameters:
        """Current canonical network parameters (immutable)."""
        return self._parameters

    @property
    def activations(self) -> NetworkActivations:
        """Activations of the latest neural forward pass."""
        return self._activations

    @property
    def trajectory_length(self) -> int:
        """Number of neural steps recorded since the last clear."""
        return len(self._trajectory)

    @property
    def control_mode(self) -> ControlMode:
        """Active control mode."""
        return self._control_mode

    @property
    def status(self) -> SimulationStatus:
        """Whether the loop is running or paused."""
        return self._status

    @property
    def is_running(self) -> bool:
        """Whether ticks currently advance the simulation."""
        return self._status is SimulationStatus.RUNNING

    def toggle_run(self) -> SimulationStatus:
        """Switch between PAUSED and RUNNING and return the new status."""
        self._status = (
            SimulationStatus.PAUSED if self.is_running else SimulationStatus.RUNNING
        )
        logger.debug(f"Simulation {self._status.value}")
        return self._status

    def set_control_mode(self, mode: ControlMode | str) -> None:
        """Select the control mode; leaving neural mode discards the trajectory."""
        new_mode = ControlMode(mode)
        if new_mode is not ControlMode.NEURAL:
            self._trajectory.clear()
        if new_mode is not self._control_mode:
            logger.info(f"Control mode: {self._control_mode.value} -> {new_mode.value}")
        self._control_mode = new_mode

    def reset(self, initial_state: CartPoleState | None = None) -> None:
        """Manual reset: fresh state, paused loop, cleared trajectory and running counters."""
        self._state = initial_state if initial_state is not None else create_initial_state(self.rng)
        self._status = SimulationStatus.PAUSED
        self._trajectory.clear()
        self.metrics.reset_episode()
        logger.info("Simulation reset")

    def reinitialize_network(self) -> None:
        """Replace the parameters with fresh random values and forget training progress."""
        self._parameters = initialize_network(self.rng, self.network_config.init_scale)
        self._trajectory.clear()
        self.training_stats.reset()
        self._activations = NetworkActivations()
        logger.info("Policy network reinitialized")

    def snapshot(self) -> SimulationSnapshot:
        """Capture everything a renderer needs without exposing mutable state."""
        return SimulationSnapshot(
            state=self._state,
            metrics=self.metrics.model_copy(),
            parameters=self._parameters,
            activations=self._activations,
            training=self.training_stats.model_copy(),
            control_mode=self._control_mode,
            status=self._status,
        )

    def tick(self) -> EpisodeResult | None:
        """
        Advance the simulation by one step.

        Returns
        -------
        EpisodeResult | None
            The completed episode when this tick ended one, otherwise None.
            Always None while paused.
        """
        if not self.is_running:
            return None

        action = self._select_action(self._state)
        result = step(self._state, action.force_direction, self.physics_config)

        if not result.finite:
            logger.warning(f"Non-finite physics state after {self.metrics.steps + 1} steps")
            # The step that produced the non-finite state must not be trained on
            if self._control_mode is ControlMode.NEURAL and len(self._trajectory) > 0:
                self._trajectory.pop()

        if result.terminal:
            return self._complete_episode(result.termination_reason or TerminationReason.NON_FINITE)

        if self.max_episode_steps is not None and self.metrics.steps + 1 >= self.max_episode_steps:
            return self._complete_episode(TerminationReason.MAX_STEPS)

        self._state = result.next_state
        self.metrics.track_step(SURVIVAL_REWARD)
        return None

    def run(self, num_ticks: int) -> list[EpisodeResult]:
        """Run ``num_ticks`` ticks and return the episodes completed along the way."""
        results = []
        for _ in range(num_ticks):
            episode = self.tick()
            if episode is not None:
                results.append(episode)
        return results

    def _select_action(self, state: CartPoleState) -> Action:
        match self._control_mode:
            case ControlMode.HEURISTIC:
                return heuristic_action(state)
            case ControlMode.RANDOM:
                return random_action(self.rng)
            case ControlMode.NEURAL:
                return self._neural_action(state)
        error_message = f"Unsupported control mode: {self._control_mode}"
        raise ValueError(error_message)

    def _neural_action(self, state: CartPoleState) -> Action:
        observation = state.to_vector()
        output = forward(self._parameters, observation)
        action_index = sample_action_index(output.probs, self.rng)

        self._trajectory.append(
            PolicyStep(
                observation=observation,
                hidden=output.hidden,
                probs=output.probs,
                action_index=action_index,
                reward=SURVIVAL_REWARD,
            ),
        )
        self._activations = NetworkActivations.from_arrays(observation, output.hidden, output.probs)
        return action_from_index(action_index)

    def _complete_episode(self, reason: TerminationReason) -> EpisodeResult:
        total_reward = self.metrics.total_reward
        finished_steps = self.metrics.track_episode_completion()
        update_applied = False

        if self._control_mode is ControlMode.NEURAL:
            episode_return = float(len(self._trajectory))
            attempted = len(self._trajectory) > 0
            updated = self.trainer.update(self._parameters, self._trajectory)
            update_applied = updated is not self._parameters
            self._parameters = updated
            self._trajectory.clear()
            self.training_stats.record_episode(
                episode_return,
                update_applied=update_applied if attempted else None,
            )

        episode = EpisodeResult(
            episode=self.metrics.episodes,
            steps=finished_steps,
            total_reward=total_reward,
            control_mode=self._control_mode,
            termination_reason=reason,
            update_applied=update_applied,
            average_return=self.training_stats.average_return,
            last_return=self.training_stats.last_return,
        )

        if episode.episode % EPISODE_LOG_INTERVAL == 0:
            logger.info(
                f"Episode {episode.episode}: {finished_steps} steps "
                f"({reason.value}), best={self.metrics.best}, "
                f"avg_return={self.training_stats.average_return:.1f}",
            )
        else:
            logger.debug(f"Episode {episode.episode}: {finished_steps} steps ({reason.value})")

        self._state = create_initial_state(self.rng)
        return episode
