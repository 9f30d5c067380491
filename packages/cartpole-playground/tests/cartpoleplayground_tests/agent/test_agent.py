"""Tests for the cart-pole agent's simulation loop."""

import math

import numpy as np
import pytest
from cartpoleplayground.agent import (
    CartPoleAgent,
    ControlMode,
    EpisodeResult,
    NetworkActivations,
    SimulationStatus,
)
from cartpoleplayground.agent.controllers import heuristic_action
from cartpoleplayground.env import CartPoleState, TerminationReason, step

# Starting tilts the heuristic controller cannot recover from
LONG_FAILING_TILT = 0.15
SHORT_FAILING_TILT = 0.19
ROLLOUT_LIMIT = 10000


def _run_until_episode_ends(agent: CartPoleAgent, limit: int = 10000) -> EpisodeResult:
    for _ in range(limit):
        result = agent.tick()
        if result is not None:
            return result
    pytest.fail(f"No episode completed within {limit} ticks")


def _heuristic_episode_length(state: CartPoleState) -> int:
    """Count the steps until the heuristic controller fails, including the terminating one."""
    for steps in range(1, ROLLOUT_LIMIT + 1):
        result = step(state, heuristic_action(state).force_direction)
        if result.terminal:
            return steps
        state = result.next_state
    pytest.fail(f"Heuristic rollout did not terminate within {ROLLOUT_LIMIT} steps")


@pytest.fixture
def neural_agent() -> CartPoleAgent:
    """Create a running neural-mode agent with a step cap."""
    agent = CartPoleAgent(control_mode=ControlMode.NEURAL, max_episode_steps=200, seed=11)
    agent.toggle_run()
    return agent


class TestRunState:
    """Test the PAUSED/RUNNING state machine."""

    def test_starts_paused(self):
        """Test that a new agent does not advance."""
        agent = CartPoleAgent(seed=0)
        before = agent.state

        assert agent.status is SimulationStatus.PAUSED
        assert agent.tick() is None
        assert agent.state is before
        assert agent.metrics.steps == 0

    def test_toggle_run(self):
        """Test toggling between paused and running."""
        agent = CartPoleAgent(seed=0)

        assert agent.toggle_run() is SimulationStatus.RUNNING
        assert agent.is_running
        assert agent.toggle_run() is SimulationStatus.PAUSED
        assert not agent.is_running

    def test_running_tick_advances_state(self):
        """Test that a running tick adopts the next state and counts the step."""
        agent = CartPoleAgent(control_mode="heuristic", seed=0, initial_state=CartPoleState(theta=0.01))
        agent.toggle_run()

        assert agent.tick() is None
        assert agent.state != CartPoleState(theta=0.01)
        assert agent.metrics.steps == 1
        assert agent.metrics.total_reward == 1.0


class TestHeuristicEpisode:
    """Test episode bookkeeping with the heuristic controller."""

    @pytest.mark.parametrize("tilt", [LONG_FAILING_TILT, SHORT_FAILING_TILT])
    def test_last_equals_steps_taken(self, tilt):
        """Test that a failed balancing episode records the steps of an independent rollout."""
        start = CartPoleState(theta=tilt)
        expected = _heuristic_episode_length(start)
        agent = CartPoleAgent(control_mode=ControlMode.HEURISTIC, seed=3, initial_state=start)
        agent.toggle_run()

        result = _run_until_episode_ends(agent, limit=ROLLOUT_LIMIT)

        assert result.termination_reason in {TerminationReason.TRACK_LIMIT, TerminationReason.ANGLE_LIMIT}
        assert result.steps == expected
        assert agent.metrics.last == expected
        assert agent.metrics.best == expected
        assert agent.metrics.episodes == 1
        assert agent.metrics.steps == 0
        assert agent.metrics.total_reward == 0.0
        assert result.total_reward == expected - 1
        assert result.update_applied is False

    def test_best_keeps_longer_earlier_episode(self):
        """Test that a shorter episode after a longer one updates ``last`` but not ``best``."""
        long_start = CartPoleState(theta=LONG_FAILING_TILT)
        short_start = CartPoleState(theta=SHORT_FAILING_TILT)
        long_steps = _heuristic_episode_length(long_start)
        short_steps = _heuristic_episode_length(short_start)
        assert long_steps > short_steps

        agent = CartPoleAgent(control_mode=ControlMode.HEURISTIC, seed=5, initial_state=long_start)
        agent.toggle_run()
        _run_until_episode_ends(agent)

        agent.reset(initial_state=short_start)
        agent.toggle_run()
        _run_until_episode_ends(agent)

        assert agent.metrics.episodes == 2
        assert agent.metrics.last == short_steps
        assert agent.metrics.best == long_steps

    def test_step_cap_termination_reason(self):
        """Test that the step cap ends an episode with MAX_STEPS."""
        agent = CartPoleAgent(
            control_mode=ControlMode.HEURISTIC,
            max_episode_steps=3,
            seed=0,
            initial_state=CartPoleState(),
        )
        agent.toggle_run()

        result = _run_until_episode_ends(agent, limit=3)

        assert result.steps == 3
        assert result.termination_reason is TerminationReason.MAX_STEPS

    def test_random_mode_terminates(self):
        """Test that the random controller drops the pole and the state is reinitialized."""
        agent = CartPoleAgent(control_mode=ControlMode.RANDOM, seed=9)
        agent.toggle_run()

        result = _run_until_episode_ends(agent)

        assert result.termination_reason in {TerminationReason.ANGLE_LIMIT, TerminationReason.TRACK_LIMIT}
        assert abs(agent.state.theta) <= 0.1
        assert agent.state.theta_dot == 0.0
        assert agent.trajectory_length == 0


class TestNeuralMode:
    """Test recording and training in neural mode."""

    def test_trajectory_tracks_neural_steps(self, neural_agent):
        """Test that the trajectory grows by one per neural tick until the episode ends."""
        for _ in range(400):
            result = neural_agent.tick()
            if result is None:
                assert neural_agent.trajectory_length == neural_agent.metrics.steps
            else:
                assert neural_agent.trajectory_length == 0

    def test_activations_are_distribution(self, neural_agent):
        """Test that every neural tick leaves a valid probability vector in the activations."""
        for _ in range(500):
            neural_agent.tick()
            activations = neural_agent.activations

            assert len(activations.input) == 4
            assert len(activations.hidden) == 8
            assert len(activations.output) == 2
            assert all(p >= 0 for p in activations.output)
            assert sum(activations.output) == pytest.approx(1.0, abs=1e-6)

        assert neural_agent.metrics.episodes >= 2

    def test_episode_end_trains_and_replaces_parameters(self, neural_agent):
        """Test the end-of-episode update and training statistics."""
        before = neural_agent.parameters

        result = _run_until_episode_ends(neural_agent)

        assert result.control_mode is ControlMode.NEURAL
        assert result.update_applied is True
        assert neural_agent.parameters is not before
        assert neural_agent.training_stats.last_return == result.steps
        assert neural_agent.training_stats.average_return == result.steps
        assert neural_agent.training_stats.updates_applied == 1

    def test_average_return_is_smoothed(self, neural_agent):
        """Test the 0.9/0.1 moving average over consecutive episodes."""
        first = _run_until_episode_ends(neural_agent)
        second = _run_until_episode_ends(neural_agent)

        expected = 0.9 * first.steps + 0.1 * second.steps
        assert neural_agent.training_stats.average_return == pytest.approx(expected)
        assert second.average_return == pytest.approx(expected)

    def test_non_finite_step_is_not_trained_on(self):
        """Test that a non-finite physics step ends the episode without an update."""
        agent = CartPoleAgent(
            control_mode=ControlMode.NEURAL,
            seed=1,
            initial_state=CartPoleState(theta_dot=math.inf),
        )
        before = agent.parameters
        agent.toggle_run()

        with np.errstate(invalid="ignore", over="ignore"):
            result = agent.tick()

        assert result is not None
        assert result.termination_reason is TerminationReason.NON_FINITE
        assert result.update_applied is False
        assert agent.parameters is before
        assert agent.trajectory_length == 0
        assert agent.training_stats.updates_applied == 0
        assert agent.training_stats.updates_discarded == 0
        assert agent.state.is_finite()


class TestControlInputs:
    """Test the inputs accepted from the control layer."""

    def test_switching_away_from_neural_clears_trajectory(self, neural_agent):
        """Test that partial neural data is discarded on a mode switch."""
        for _ in range(3):
            neural_agent.tick()
        assert neural_agent.trajectory_length > 0

        neural_agent.set_control_mode(ControlMode.HEURISTIC)
        neural_agent.tick()

        assert neural_agent.trajectory_length == 0
        assert neural_agent.control_mode is ControlMode.HEURISTIC

    def test_heuristic_episode_does_not_train(self, neural_agent):
        """Test that non-neural episodes leave the parameters alone."""
        neural_agent.set_control_mode("heuristic")
        before = neural_agent.parameters

        _run_until_episode_ends(neural_agent)

        assert neural_agent.parameters is before
        assert neural_agent.training_stats.updates_applied == 0

    def test_unknown_mode_rejected(self):
        """Test that an unknown control mode raises."""
        agent = CartPoleAgent(seed=0)

        with pytest.raises(ValueError, match="not a valid ControlMode"):
            agent.set_control_mode("autopilot")

    def test_reset_keeps_persistent_counters(self, neural_agent):
        """Test the manual reset semantics."""
        _run_until_episode_ends(neural_agent)
        for _ in range(2):
            neural_agent.tick()
        episodes, best, last = (
            neural_agent.metrics.episodes,
            neural_agent.metrics.best,
            neural_agent.metrics.last,
        )

        neural_agent.reset()

        assert neural_agent.status is SimulationStatus.PAUSED
        assert neural_agent.trajectory_length == 0
        assert neural_agent.metrics.steps == 0
        assert neural_agent.metrics.total_reward == 0.0
        assert neural_agent.metrics.episodes == episodes
        assert neural_agent.metrics.best == best
        assert neural_agent.metrics.last == last

    def test_reinitialize_network(self, neural_agent):
        """Test that reinitializing replaces parameters and clears training progress."""
        _run_until_episode_ends(neural_agent)
        neural_agent.tick()
        before = neural_agent.parameters

        neural_agent.reinitialize_network()

        assert neural_agent.parameters is not before
        assert neural_agent.trajectory_length == 0
        assert neural_agent.training_stats.average_return == 0.0
        assert neural_agent.training_stats.last_return == 0.0
        assert neural_agent.activations == NetworkActivations()


class TestSnapshot:
    """Test the read-only snapshot for rendering collaborators."""

    def test_snapshot_contents(self, neural_agent):
        """Test that the snapshot mirrors the agent."""
        neural_agent.tick()

        snapshot = neural_agent.snapshot()

        assert snapshot.state == neural_agent.state
        assert snapshot.parameters is neural_agent.parameters
        assert snapshot.activations == neural_agent.activations
        assert snapshot.control_mode is ControlMode.NEURAL
        assert snapshot.status is SimulationStatus.RUNNING

    def test_snapshot_is_isolated(self, neural_agent):
        """Test that later ticks do not change an earlier snapshot."""
        snapshot = neural_agent.snapshot()

        neural_agent.tick()

        assert snapshot.metrics.steps == 0
        assert neural_agent.metrics.steps == 1


class TestReproducibility:
    """Test that seeding reproduces whole runs."""

    def test_same_seed_same_run(self):
        """Test that two agents with the same seed produce identical episodes."""
        first = CartPoleAgent(seed=21, max_episode_steps=100)
        second = CartPoleAgent(seed=21, max_episode_steps=100)
        first.toggle_run()
        second.toggle_run()

        assert first.run(600) == second.run(600)
        np.testing.assert_array_equal(first.parameters.w1, second.parameters.w1)
        assert first.state == second.state
