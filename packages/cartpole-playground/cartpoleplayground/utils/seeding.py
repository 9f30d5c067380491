"""Seeding infrastructure for reproducible simulations.

Every source of randomness in the playground (initial cart-pole states, action
sampling, network initialization) draws from one explicit numpy ``Generator``
owned by the agent. This module creates those generators.

Usage:
    # Auto-generate seed if not provided
    seed = ensure_seed(user_seed)

    # Create a seeded numpy RNG for the simulation
    rng = get_rng(seed)
"""

import secrets

import numpy as np

# Maximum seed value (2^32 - 1, compatible with numpy)
MAX_SEED = 2**32

# Global registry for tracking seeds used in current session
_seed_registry: dict[str, int] = {}


def generate_seed() -> int:
    """Generate a cryptographically random seed.

    Returns
    -------
        A random integer in [0, 2^32)
    """
    return secrets.randbelow(MAX_SEED)


def ensure_seed(seed: int | None = None) -> int:
    """Ensure a seed is available, generating one if not provided.

    Args:
        seed: User-provided seed, or None to auto-generate

    Returns
    -------
        The provided seed or a newly generated one
    """
    if seed is not None:
        return seed
    return generate_seed()


def get_rng(seed: int | None = None) -> np.random.Generator:
    """Create a seeded numpy random number Generator.

    The generator is independent of the global numpy RNG state.

    Args:
        seed: Seed for the RNG, or None to use a random seed

    Returns
    -------
        A numpy Generator instance seeded with the given seed
    """
    actual_seed = ensure_seed(seed)
    return np.random.default_rng(actual_seed)


def register_seed(name: str, seed: int) -> None:
    """Register a seed in the session registry.

    Args:
        name: Identifier for the seed (e.g., "agent")
        seed: The seed value being used
    """
    _seed_registry[name] = seed


def get_seed_registry() -> dict[str, int]:
    """Get a copy of the current seed registry."""
    return _seed_registry.copy()


def clear_seed_registry() -> None:
    """Clear the seed registry."""
    _seed_registry.clear()
