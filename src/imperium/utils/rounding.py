"""Integer rounding used by the economy and combat formulas.

Python's built-in ``round`` rounds exact halves to the nearest even number.
The game's figures round halves up instead, so a loan payment of 2.5 gold
is 3, not 2.

Examples:
    >>> round_half_up(2.5)
    3
    >>> round_half_up(-2.5)
    -2
"""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)
