"""
Dice rolling and the facade's roll_dice.
"""

import random
from collections import Counter

import pytest

from backend.engine import BLACK, WHITE
from backend.engine.dice import expand_roll, roll
from backend.engine.errors import IllegalMove
from backend.engine.game import new_game, roll_dice


class _Scripted(random.Random):
    """Random whose randint returns queued values."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def randint(self, a, b):
        return self._values.pop(0)


def test_expand_roll():
    assert expand_roll(3, 5) == (3, 5)
    assert expand_roll(5, 3) == (5, 3)
    assert expand_roll(4, 4) == (4, 4, 4, 4)


def test_roll_uses_injected_source():
    assert roll(_Scripted([6, 1])) == (6, 1)
    assert roll(_Scripted([2, 2])) == (2, 2, 2, 2)


def test_seeded_rolls_repeat():
    assert [roll(random.Random(99)) for _ in range(5)] == [roll(random.Random(99)) for _ in range(5)]


def test_roll_distribution():
    rng = random.Random(2024)
    faces = Counter()
    doubles = 0
    trials = 6000
    for _ in range(trials):
        values = roll(rng)
        assert len(values) in (2, 4)
        assert all(1 <= v <= 6 for v in values)
        if len(values) == 4:
            doubles += 1
        faces.update(values[:2])
    assert set(faces) == {1, 2, 3, 4, 5, 6}
    # Each face close to 1/6 of the first two dice; doubles close to 1/6 of rolls
    for count in faces.values():
        assert abs(count / (2 * trials) - 1 / 6) < 0.03
    assert abs(doubles / trials - 1 / 6) < 0.03


def test_facade_roll_sets_dice_and_timestamp(fixed_clock):
    state = new_game("casual", random.Random(1))
    rolled = roll_dice(state, _Scripted([3, 5]), fixed_clock)
    assert rolled.dice.values == (3, 5)
    assert rolled.dice.rolled
    assert rolled.dice.used == ()
    assert rolled.timestamp == 1_800_000_000_000
    assert rolled.turn == state.turn
    assert not state.dice.rolled


def test_facade_roll_twice_rejected(make_state):
    state = make_state({0: (WHITE, 2)}, dice=(3, 5))
    with pytest.raises(IllegalMove):
        roll_dice(state, random.Random(1))


def test_facade_roll_passes_when_nothing_can_move(make_state, fixed_clock):
    stuck = make_state({0: (WHITE, 2), 2: (BLACK, 2), 4: (BLACK, 2)}, bar={WHITE: 1})
    rolled = roll_dice(stuck, _Scripted([3, 5]), fixed_clock)
    assert rolled.turn == BLACK
    assert not rolled.dice.rolled
    assert rolled.timestamp == 1_800_000_000_000
