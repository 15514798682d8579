"""Deterministic random number generation for the simulation.

All randomness is seeded from game state (game_id, round, phase, context)
so that:
- Reproducibility: the same seed always produces the same result
- Fairness: no hidden randomness
- Bug reproduction: exact replay of a round
- Audit trail: every draw reports the seed it used

Examples:
    >>> seed = generate_seed(game_id=1, round_number=3, phase="player", context="attack:7")
    >>> result = random_int(seed, 0, 10)
    >>> result["seed"]
    '1:3:player:attack:7'

    >>> weighted_choice(seed, {"common": 60, "rare": 12})["choice"] in {"common", "rare"}
    True
"""

from __future__ import annotations

import hashlib
import random
from collections.abc import Mapping, Sequence
from typing import Any


def generate_seed(game_id: int, round_number: int, phase: str, context: str) -> str:
    """Generate a deterministic seed from game state.

    Format: "game_id:round:phase:context"

    Args:
        game_id: Game identifier (unique per session)
        round_number: Current round (1-based)
        phase: Current phase ('player', 'shop', 'bot')
        context: What the draw is for (e.g., 'attack:3:7', 'draft:2')

    Returns:
        Seed string for the helpers below

    Examples:
        >>> generate_seed(1, 4, "player", "spell:steal")
        '1:4:player:spell:steal'

    Raises:
        ValueError: If game_id or round_number is negative
    """
    if game_id < 0:
        raise ValueError(f"game_id must be non-negative, got {game_id}")
    if round_number < 0:
        raise ValueError(f"round_number must be non-negative, got {round_number}")

    return f"{game_id}:{round_number}:{phase}:{context}"


def _seed_to_int(seed: str) -> int:
    """Convert a seed string to a stable 64-bit integer for random.Random()."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=False)


def seeded_random(seed: str) -> random.Random:
    """Return a private ``random.Random`` for callers that need several draws."""
    return random.Random(_seed_to_int(seed))


def random_int(seed: str, min_val: int, max_val: int) -> dict[str, Any]:
    """Generate a random integer in [min_val, max_val] with a deterministic seed.

    Args:
        seed: Deterministic seed string
        min_val: Minimum value (inclusive)
        max_val: Maximum value (inclusive)

    Returns:
        Dictionary containing value, min, max and seed

    Raises:
        ValueError: If min_val > max_val
    """
    if min_val > max_val:
        raise ValueError(f"min_val ({min_val}) cannot be greater than max_val ({max_val})")

    rng = random.Random(_seed_to_int(seed))
    value = rng.randint(min_val, max_val)

    return {
        "value": value,
        "min": min_val,
        "max": max_val,
        "seed": seed,
    }


def random_choice(seed: str, options: Sequence[Any]) -> dict[str, Any]:
    """Choose one option with a deterministic seed.

    Raises:
        ValueError: If options is empty
    """
    if not options:
        raise ValueError("options list cannot be empty")

    rng = random.Random(_seed_to_int(seed))
    index = rng.randint(0, len(options) - 1)

    return {
        "choice": options[index],
        "index": index,
        "seed": seed,
    }


def weighted_choice(seed: str, weights: Mapping[Any, int]) -> dict[str, Any]:
    """Choose a key with probability proportional to its integer weight.

    Args:
        seed: Deterministic seed string
        weights: Mapping of option -> non-negative weight (at least one positive)

    Returns:
        Dictionary containing choice, roll, total and seed

    Raises:
        ValueError: If no weight is positive or a weight is negative
    """
    if any(weight < 0 for weight in weights.values()):
        raise ValueError("weights must be non-negative")
    total = sum(weights.values())
    if total <= 0:
        raise ValueError("at least one weight must be positive")

    rng = random.Random(_seed_to_int(seed))
    roll = rng.randrange(total)
    cumulative = 0
    choice = None
    for option, weight in weights.items():
        cumulative += weight
        if roll < cumulative:
            choice = option
            break

    return {
        "choice": choice,
        "roll": roll,
        "total": total,
        "seed": seed,
    }
