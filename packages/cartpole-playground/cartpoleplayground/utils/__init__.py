"""Utilities module for Cart-Pole Playground."""

from cartpoleplayground.utils.seeding import (
    clear_seed_registry,
    ensure_seed,
    generate_seed,
    get_rng,
    get_seed_registry,
    register_seed,
)

__all__ = [
    "clear_seed_registry",
    "ensure_seed",
    "generate_seed",
    "get_rng",
    "get_seed_registry",
    "register_seed",
]
