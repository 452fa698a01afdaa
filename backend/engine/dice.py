"""
Dice rolling.
The random source is always passed in so games can be replayed in tests.
"""

import random

from backend.engine import DIE_SIDES


def expand_roll(first: int, second: int) -> tuple[int, ...]:
    """Doubles are played four times; otherwise each die is played once."""
    if first == second:
        return (first,) * 4
    return (first, second)


def roll(rng: random.Random) -> tuple[int, ...]:
    """Roll two independent dice and return the turn's die values."""
    return expand_roll(rng.randint(1, DIE_SIDES), rng.randint(1, DIE_SIDES))
