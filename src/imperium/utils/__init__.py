"""Utility functions for the Imperium simulation."""

from imperium.utils.rng import (
    generate_seed,
    random_choice,
    random_int,
    seeded_random,
    weighted_choice,
)
from imperium.utils.rounding import round_half_up

__all__ = [
    "generate_seed",
    "random_choice",
    "random_int",
    "round_half_up",
    "seeded_random",
    "weighted_choice",
]
