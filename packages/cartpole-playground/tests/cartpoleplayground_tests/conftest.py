import numpy as np
import pytest
from cartpoleplayground.brain.network import NetworkParameters, initialize_network


@pytest.fixture
def rng() -> np.random.Generator:
    """Create a seeded random generator for testing."""
    return np.random.default_rng(1234)


@pytest.fixture
def params(rng) -> NetworkParameters:
    """Create a randomly initialized 4-8-2 parameter set."""
    return initialize_network(rng)


class FixedDraw:
    """Stand-in generator whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_draw():
    """Factory for generators with a fixed uniform draw."""
    return FixedDraw
